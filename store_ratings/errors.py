"""Application errors.

Services raise these; `api.server` renders every `AppError` as
`{"message": ..., "code": ..., "field": ...}` with `status_code`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    status_code: int = 400
    code: str = "error"
    default_message: str = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        field: Optional[str] = None,
        code: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.field = field
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"message": self.message, "code": self.code}
        if self.field:
            d["field"] = self.field
        return d


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class InvalidEmailFormat(ValidationError):
    code = "invalid_email"
    default_message = "Please provide a valid email address"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, field="email")


class WeakPassword(ValidationError):
    code = "weak_password"
    default_message = (
        "Password must be 8-16 characters with at least one uppercase letter "
        "and one special character"
    )

    def __init__(self, message: Optional[str] = None, *, field: str = "password") -> None:
        super().__init__(message, field=field)


class OutOfRange(ValidationError):
    code = "rating_out_of_range"
    default_message = "Rating must be an integer between 1 and 5"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, field="rating")


class DuplicateEmail(AppError):
    status_code = 400
    code = "duplicate_email"
    default_message = "Email already in use"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, field="email")


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidCredentials(AppError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidToken(AppError):
    status_code = 401
    code = "token_invalid"
    default_message = "Invalid or missing token"


class TokenExpired(InvalidToken):
    code = "token_expired"
    default_message = "Token has expired"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "You do not have permission to perform this action"
