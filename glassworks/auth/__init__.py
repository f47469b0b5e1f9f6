from glassworks.auth.jwt import create_access_token, verify_token
from glassworks.auth.errors import (
    AccountNotFound,
    DeviceConflict,
    GlassworksError,
    SessionRevoked,
    StaleAccountError,
    Unauthorized,
)

__all__ = [
    "create_access_token",
    "verify_token",
    "AccountNotFound",
    "DeviceConflict",
    "GlassworksError",
    "SessionRevoked",
    "StaleAccountError",
    "Unauthorized",
]
