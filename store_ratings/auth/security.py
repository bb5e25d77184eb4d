from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from store_ratings.errors import InvalidToken, TokenExpired
from store_ratings.models import Principal, Role


# Fixed work factor.
PBKDF2_ROUNDS = 29000

_pwd = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=PBKDF2_ROUNDS,
)
_JWT_ALG = "HS256"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        # Malformed / unrecognized digest.
        return False


def create_access_token(
    *,
    secret: str,
    user_id: int,
    role: Role | str,
    expires_minutes: int,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=max(1, int(expires_minutes)))

    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "role": Role.parse(role).value,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_access_token(*, token: str, secret: str) -> Principal:
    """Verify signature + expiry and return the claimed identity."""
    if not token:
        raise InvalidToken("Authentication token missing", code="missing_token")
    if not secret:
        raise ValueError("jwt_secret_blank")

    try:
        payload = jwt.decode(token, secret, algorithms=[_JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError:
        raise InvalidToken()

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise InvalidToken("Token subject is invalid")

    try:
        role = Role.parse(payload.get("role"))
    except ValueError:
        raise InvalidToken("Token role is invalid")

    return Principal(user_id=user_id, role=role)
