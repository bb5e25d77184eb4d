"""Registration, login and password changes.

Every function receives the connection it works on; the caller owns the
transaction (see `store_ratings.db.connect`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from store_ratings.config import Config
from store_ratings.db import connect
from store_ratings.errors import (
    Forbidden,
    InvalidCredentials,
    InvalidEmailFormat,
    NotFound,
    ValidationError,
)
from store_ratings.models import Role
from store_ratings.stores.crud import get_store_by_owner, insert_store, public_store

from .crud import (
    count_users,
    get_user_by_email,
    get_user_by_id,
    insert_user,
    normalize_email,
    public_user,
    update_password_hash,
)
from .security import create_access_token, hash_password, verify_password
from .validation import check_new_password, check_registration, validate_email


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


@dataclass(frozen=True)
class AuthResult:
    user: Dict[str, Any]
    token: Optional[str] = None
    store: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"user": self.user}
        if self.store is not None:
            d["store"] = self.store
        if self.token is not None:
            d["token"] = self.token
        return d


def _parse_role(role: Any) -> Role:
    if role is None or role == "":
        return Role.USER
    try:
        return Role.parse(role)
    except ValueError:
        raise ValidationError("Role must be one of: user, store, admin", field="role")


def _issue_token(cfg: Config, user: Dict[str, Any]) -> str:
    return create_access_token(
        secret=cfg.AUTH_JWT_SECRET,
        user_id=int(user["id"]),
        role=user["role"],
        expires_minutes=int(cfg.AUTH_TOKEN_EXPIRE_MINUTES),
    )


def _store_view(conn: Any, user: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if user.get("role") != Role.STORE.value:
        return None
    row = get_store_by_owner(conn, int(user["id"]))
    return public_store(row) if row is not None else None


def create_account(
    conn: Any,
    *,
    name: Any,
    email: Any,
    password: Any,
    address: Any = None,
    role: Any = None,
) -> AuthResult:
    """Validate, hash and insert a user; store-role users also get their store row.

    No token is issued. Shared by self-registration, admin creation and scripts.
    """
    check_registration(name=name, email=email, password=password, address=address)
    r = _parse_role(role)

    row = insert_user(
        conn,
        name=name,
        email=email,
        password_hash=hash_password(password),
        address=address,
        role=r,
    )
    user = public_user(row)

    store = None
    if r is Role.STORE:
        store = public_store(
            insert_store(
                conn,
                owner_user_id=user["id"],
                name=user["name"],
                email=user["email"],
                address=user["address"],
            )
        )

    _debug(f"Created account user_id={user['id']} email={user['email']} role={r.value}")
    return AuthResult(user=user, store=store)


def register(
    conn: Any,
    cfg: Config,
    *,
    name: Any,
    email: Any,
    password: Any,
    address: Any = None,
    role: Any = None,
) -> AuthResult:
    """Public self-registration. Returns the new user and a bearer token."""
    if _parse_role(role) is Role.ADMIN:
        raise Forbidden("Admin accounts can only be created by an administrator")

    created = create_account(
        conn, name=name, email=email, password=password, address=address, role=role
    )
    return AuthResult(user=created.user, store=created.store, token=_issue_token(cfg, created.user))


def admin_create_user(
    conn: Any,
    *,
    name: Any,
    email: Any,
    password: Any,
    address: Any = None,
    role: Any = None,
) -> AuthResult:
    return create_account(
        conn, name=name, email=email, password=password, address=address, role=role
    )


def admin_create_store(
    conn: Any,
    *,
    name: Any,
    email: Any,
    password: Any,
    address: Any = None,
) -> AuthResult:
    """Create a store together with the store-role login that owns it."""
    return create_account(
        conn, name=name, email=email, password=password, address=address, role=Role.STORE
    )


def login(
    conn: Any,
    cfg: Config,
    *,
    email: Any,
    password: Any,
    required_role: Optional[Role] = None,
) -> AuthResult:
    if not validate_email(email):
        raise InvalidEmailFormat()
    if not password:
        raise ValidationError("Password is required", field="password")

    row = get_user_by_email(conn, email)
    if row is None:
        raise NotFound("User not found")
    if not verify_password(str(password), str(row["password_hash"])):
        _debug(f"Rejected login for email={normalize_email(email)}")
        raise InvalidCredentials()

    user = public_user(row)
    if required_role is not None and user["role"] != required_role.value:
        raise Forbidden(f"This login is only for {required_role.value} accounts")

    _debug(f"Login user_id={user['id']} role={user['role']}")
    return AuthResult(user=user, store=_store_view(conn, user), token=_issue_token(cfg, user))


def change_password(conn: Any, *, user_id: int, new_password: Any) -> Dict[str, Any]:
    """Overwrite the caller's password hash. The existing token stays valid."""
    check_new_password(new_password)
    if get_user_by_id(conn, user_id) is None:
        raise NotFound("User not found")

    update_password_hash(conn, user_id=user_id, password_hash=hash_password(new_password))
    _debug(f"Password updated for user_id={user_id}")
    return {"message": "Password updated successfully"}


def profile(conn: Any, *, user_id: int) -> AuthResult:
    row = get_user_by_id(conn, user_id)
    if row is None:
        raise NotFound("User not found")
    user = public_user(row)
    return AuthResult(user=user, store=_store_view(conn, user))


def bootstrap_admin_if_needed(cfg: Config) -> Optional[Dict[str, Any]]:
    """Create the first admin when the users table is empty.

    Driven by AUTH_BOOTSTRAP_ADMIN_NAME / _EMAIL / _PASSWORD so a fresh database
    always has a way in. Does nothing once any user exists.
    """
    if not cfg.AUTH_BOOTSTRAP_ENABLED:
        return None
    email = normalize_email(cfg.AUTH_BOOTSTRAP_ADMIN_EMAIL)
    password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return None

    with connect(cfg.DB_DSN) as conn:
        if count_users(conn) > 0:
            return None
        created = create_account(
            conn,
            name=cfg.AUTH_BOOTSTRAP_ADMIN_NAME,
            email=email,
            password=password,
            role=Role.ADMIN,
        )
    return created.user
