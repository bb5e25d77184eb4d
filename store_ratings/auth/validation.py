"""Credential/profile format rules shared by registration and admin creation."""

from __future__ import annotations

import re
from typing import Any, Optional

from store_ratings.errors import InvalidEmailFormat, ValidationError, WeakPassword


NAME_MIN_LEN = 20
NAME_MAX_LEN = 60
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 16
ADDRESS_MAX_LEN = 400

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UPPER_RE = re.compile(r"[A-Z]")
_SPECIAL_RE = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")


def validate_name(name: Any) -> bool:
    if not name or not isinstance(name, str):
        return False
    return NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN


def validate_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    return _EMAIL_RE.match(email) is not None


def validate_password(password: Any) -> bool:
    if not password or not isinstance(password, str):
        return False
    if not PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN:
        return False
    return bool(_UPPER_RE.search(password)) and bool(_SPECIAL_RE.search(password))


def validate_address(address: Any) -> bool:
    # Optional field.
    if not address:
        return True
    return isinstance(address, str) and len(address) <= ADDRESS_MAX_LEN


def check_registration(
    *,
    name: Any,
    email: Any,
    password: Any,
    address: Optional[Any] = None,
) -> None:
    """Raise the first failing rule as a field-tagged error."""
    if not name or not email or not password:
        raise ValidationError("Missing required fields")
    if not validate_name(name):
        raise ValidationError(
            f"Name must be between {NAME_MIN_LEN} and {NAME_MAX_LEN} characters",
            field="name",
        )
    if not validate_email(email):
        raise InvalidEmailFormat()
    if not validate_password(password):
        raise WeakPassword()
    if not validate_address(address):
        raise ValidationError(
            f"Address cannot exceed {ADDRESS_MAX_LEN} characters",
            field="address",
        )


def check_new_password(password: Any, *, field: str = "newPassword") -> None:
    if not password:
        raise ValidationError("New password required", field=field)
    if not validate_password(password):
        raise WeakPassword(field=field)
