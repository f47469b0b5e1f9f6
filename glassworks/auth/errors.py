class GlassworksError(Exception):
    """
    Base for errors reported to the client as {"error": {"code", "message"}}.

    Subclasses set `code` (machine-readable) and `status_code` (HTTP).
    """

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccountNotFound(GlassworksError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Account not found"


class Unauthorized(GlassworksError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Invalid email or password"


class DeviceConflict(GlassworksError):
    """Another device holds a recent session; the client may retry with an override."""

    code = "DEVICE_CONFLICT"
    status_code = 409
    default_message = "Another device is already logged in. Please logout from other device first."


class SessionRevoked(GlassworksError):
    code = "SESSION_REVOKED"
    status_code = 401
    default_message = "This device session has ended. Please login again."


class StaleAccountError(GlassworksError):
    """Conditional write lost against a concurrent update of the same account."""

    code = "CONCURRENT_UPDATE"
    status_code = 503
    default_message = "Account was modified concurrently, please retry"

    def __init__(self, account_id: int | None = None, message: str | None = None):
        self.account_id = account_id
        super().__init__(message)
