from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import HTTPException, Request

from glassworks.auth.jwt import verify_token


async def account_context_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Any]],
):
    """
    Context middleware (no enforcement):

    - If there is an Authorization: Bearer <token>, decode it via verify_token()
    - Put {account_id, device_id} in request.state (used in error logs)
    - Never touches the DB and never blocks on an invalid token
      (enforcement lives in the dependencies: get_current_account()).
    """
    auth = request.headers.get("authorization")
    if not auth or not auth.startswith("Bearer "):
        return await call_next(request)

    token = auth.removeprefix("Bearer ").strip()
    if not token:
        return await call_next(request)

    try:
        payload = verify_token(token)
    except HTTPException:
        # Public endpoints (e.g. /health) keep working with a bad token.
        return await call_next(request)

    account_id_raw = payload.get("sub")
    try:
        if account_id_raw is not None:
            request.state.account_id = int(account_id_raw)
    except (TypeError, ValueError):
        pass
    if payload.get("device_id"):
        request.state.device_id = str(payload["device_id"])

    return await call_next(request)


def get_account_id(request: Request) -> int | None:
    return getattr(request.state, "account_id", None)
