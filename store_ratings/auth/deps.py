from __future__ import annotations

from typing import Any, Callable, Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from store_ratings.config import Config
from store_ratings.db import connect
from store_ratings.errors import Forbidden, InvalidToken
from store_ratings.models import Operation, Principal, is_permitted

from .security import decode_access_token


_bearer = HTTPBearer(auto_error=False)


def _debug(msg: str) -> None:
    print(f"[gate] {msg}")


def get_config(request: Request) -> Config:
    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise RuntimeError("server_config_missing")
    return cfg


def get_conn(cfg: Config = Depends(get_config)) -> Iterator[Any]:
    """One connection (and transaction) per request."""
    with connect(cfg.DB_DSN) as conn:
        yield conn


def get_principal(
    cfg: Config = Depends(get_config),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Principal:
    """Authenticate a request from `Authorization: Bearer <jwt>`.

    Stateless: the identity and role come from the verified token alone.
    """
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Authentication token missing", code="missing_token")
    return decode_access_token(token=credentials.credentials, secret=cfg.AUTH_JWT_SECRET)


def authorize(principal: Principal, operation: Operation) -> Principal:
    if not is_permitted(principal.role, operation):
        _debug(f"Denied {operation.value} for user_id={principal.user_id} role={principal.role.value}")
        raise Forbidden()
    return principal


def require(operation: Operation) -> Callable[..., Principal]:
    """Dependency factory: authenticated AND the role may perform `operation`."""

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        return authorize(principal, operation)

    return _dep
