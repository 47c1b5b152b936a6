"""
Domain errors raised by the services and the auth dependencies.

Every error carries the HTTP status it maps to at the boundary; the
handlers in ``app.main`` turn them into ``{"success": false, "message": ...}``.
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request"


class AuthError(AppError):
    status_code = 401
    message = "Unauthorized"


class ForbiddenError(AuthError):
    status_code = 403
    message = "Forbidden: Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class ConflictError(AppError):
    status_code = 409
    message = "Already exists"


class LockedError(AppError):
    status_code = 423
    message = "Account temporarily locked"


class RateLimitError(AppError):
    status_code = 429
    message = "Too many requests, please try again later"

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class InternalError(AppError):
    status_code = 500
    message = "Internal server error"
