import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from glassworks.api.route import router
from glassworks.auth.errors import GlassworksError
from glassworks.config import settings
from glassworks.middleware.account_context import account_context_middleware, get_account_id

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Glassworks API",
    description="Accounts, device sessions and billing for a glass fabrication business",
    version="1.0.0",
)

# CORS: frontend origins come from CORS_ORIGINS (comma separated)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _account_context(request: Request, call_next):
    return await account_context_middleware(request, call_next)


app.include_router(router)


def _error_payload(*, code: str, message: str, details: object | None = None) -> dict:
    payload: dict = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


@app.exception_handler(GlassworksError)
async def glassworks_exception_handler(request: Request, exc: GlassworksError):
    # Domain errors carry their own machine-readable code (e.g. DEVICE_CONFLICT).
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(code=exc.code, message=exc.message),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Normalize FastAPI/Starlette HTTP errors to the common payload.
    code = f"HTTP_{exc.status_code}"
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(code=code, message=message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_payload(code="VALIDATION_ERROR", message="Invalid request", details=_jsonable_errors(exc)),
    )


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raised ValueError, which is not JSON serializable.
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path} (account={get_account_id(request)}): {exc}",
        exc_info=True,
    )

    error_message = str(exc) if exc else "Internal server error"

    # Keep the message short; it is shown to the client.
    max_message_length = 500
    if len(error_message) > max_message_length:
        error_message = error_message[:max_message_length] + "..."

    return JSONResponse(
        status_code=500,
        content=_error_payload(code="INTERNAL_ERROR", message=error_message),
    )
