"""
Domain error types.

Each error carries a `name` (kept stable for clients and logs) and the HTTP
status it maps to. The API layer renders them as {"message": ...}.
"""


class AppError(Exception):
    name = "AppError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequest(AppError):
    name = "BadRequest"
    status_code = 400


class Unauthorized(AppError):
    name = "Unauthorized"
    status_code = 401


class Forbidden(AppError):
    name = "Forbidden"
    status_code = 403


class NotFound(AppError):
    name = "NotFound"
    status_code = 404


class ExternalAPIError(AppError):
    """An upstream provider (Geoapify, Gemini, image search) failed."""

    name = "ExternalAPIError"
    status_code = 502
