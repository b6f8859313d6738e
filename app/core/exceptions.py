from fastapi import Request
from fastapi.responses import JSONResponse


class ConferenceError(Exception):
    """Base exception for conference API errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.status,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class AuthenticationError(ConferenceError):
    def __init__(self, message: str = "Invalid or missing API token.", details: dict | None = None):
        super().__init__(code="authentication_required", message=message, status=401, details=details)


class AuthorizationError(ConferenceError):
    def __init__(self, message: str = "Insufficient permissions.", details: dict | None = None):
        super().__init__(code="insufficient_permissions", message=message, status=403, details=details)


class NotFoundError(ConferenceError):
    def __init__(self, message: str = "Resource not found.", details: dict | None = None):
        super().__init__(code="not_found", message=message, status=404, details=details)


class InvalidCursorError(ConferenceError):
    def __init__(self, message: str = "Malformed feed position.", details: dict | None = None):
        super().__init__(code="invalid_cursor", message=message, status=400, details=details)


class DataUnavailableError(ConferenceError):
    def __init__(self, message: str = "Conference data is unavailable.", details: dict | None = None):
        super().__init__(
            code="data_unavailable",
            message=message,
            status=503,
            details=details or {"suggestion": "The database may be busy or unreachable. Retry the whole request."},
        )


async def conference_error_handler(request: Request, exc: ConferenceError) -> JSONResponse:
    """Global exception handler for ConferenceError and subclasses."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())
