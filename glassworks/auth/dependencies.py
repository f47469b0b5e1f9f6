from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sqlmodel import Session

from glassworks.auth.admission import AdmissionPolicy, SessionAdmissionController
from glassworks.auth.errors import SessionRevoked
from glassworks.auth.jwt import verify_token
from glassworks.config import settings
from glassworks.db.session import get_session
from glassworks.model.account import Account, AccountRole
from glassworks.services.identity_store import IdentityStore

bearer = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
) -> dict[str, Any]:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verify_token(credentials.credentials)


def get_current_account(
    payload: dict[str, Any] = Depends(get_token_payload),
    session: Session = Depends(get_session),
) -> Account:
    """Dependency returning the account authenticated by the JWT."""
    account_id_raw = payload.get("sub")
    if not account_id_raw:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    account_id = int(account_id_raw)

    account = session.get(Account, account_id)
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account not found")
    return account


def require_current_device(
    payload: dict[str, Any] = Depends(get_token_payload),
    account: Account = Depends(get_current_account),
) -> Account:
    """
    Like get_current_account, but a token issued for a device must still match
    the account's active session. Tokens of a device that was logged out or
    superseded by another device are rejected with SESSION_REVOKED.

    Tokens issued without a device id are not device-bound.
    """
    token_device_id = payload.get("device_id")
    if not token_device_id:
        return account
    active = account.active_session
    if active is None or active.device_id != token_device_id:
        raise SessionRevoked()
    return account


def get_identity_store(session: Session = Depends(get_session)) -> IdentityStore:
    return IdentityStore(session)


def get_admission_controller(
    store: IdentityStore = Depends(get_identity_store),
) -> SessionAdmissionController:
    return SessionAdmissionController(store, policy=AdmissionPolicy.from_settings(settings))


def require_role(required_role: AccountRole):
    """
    Dependency factory checking the role of the authenticated account.

    Args:
        required_role: role needed to call the route (e.g. AccountRole.ADMIN)

    Returns:
        Dependency function returning the account
    """
    def role_checker(account: Account = Depends(get_current_account)) -> Account:
        if account.role != required_role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {required_role.value}"
            )
        return account

    return role_checker


require_admin = require_role(AccountRole.ADMIN)
