from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from store_ratings.auth import bootstrap_admin_if_needed, require
from store_ratings.auth import service as auth_service
from store_ratings.auth.crud import count_users, list_users
from store_ratings.auth.deps import get_config, get_conn
from store_ratings.config import Config, load_config
from store_ratings.db import init_db
from store_ratings.errors import AppError, NotFound, ValidationError
from store_ratings.models import Operation, Principal, RatingAggregate, Role
from store_ratings.ratings import (
    aggregates_by_store,
    compute_store_aggregate,
    list_store_ratings,
    submit_or_replace_rating,
)
from store_ratings.ratings.crud import count_ratings, ratings_by_user
from store_ratings.stores.crud import count_stores, get_store_by_owner, list_stores, public_store
from store_ratings.util.listing import filter_rows, sort_rows


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


_NO_RATINGS = RatingAggregate(count=0, average=0.0)

router = APIRouter()


# -----------------------------
# Request bodies
# -----------------------------
# Fields are optional at the schema level so missing/invalid values reach the
# credential validator and come back with its field-specific messages.


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    address: Optional[str] = None
    role: Optional[str] = None  # user|store (admin only via /admin/create-user)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdatePasswordRequest(BaseModel):
    newPassword: Optional[str] = None


class RateRequest(BaseModel):
    storeId: int
    rating: Any = None  # checked as an int in [1, 5]
    comment: Optional[str] = None


class CreateUserRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    address: Optional[str] = None
    role: Optional[str] = None  # user|store|admin


class CreateStoreRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    address: Optional[str] = None


# -----------------------------
# Health
# -----------------------------


@router.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


# -----------------------------
# Auth
# -----------------------------


@router.post("/register", status_code=201)
def register(
    payload: RegisterRequest,
    cfg: Config = Depends(get_config),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    result = auth_service.register(
        conn,
        cfg,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        address=payload.address,
        role=payload.role,
    )
    return result.to_dict()


@router.post("/login")
def login(
    payload: LoginRequest,
    cfg: Config = Depends(get_config),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    result = auth_service.login(conn, cfg, email=payload.email, password=payload.password)
    return result.to_dict()


@router.post("/store/store-login")
def store_login(
    payload: LoginRequest,
    cfg: Config = Depends(get_config),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    result = auth_service.login(
        conn,
        cfg,
        email=payload.email,
        password=payload.password,
        required_role=Role.STORE,
    )
    if result.store is None:
        raise NotFound("Store not found")
    return result.to_dict()


@router.get("/me")
def me(
    principal: Principal = Depends(require(Operation.VIEW_PROFILE)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    return auth_service.profile(conn, user_id=principal.user_id).to_dict()


@router.put("/update-password")
def update_password(
    payload: UpdatePasswordRequest,
    principal: Principal = Depends(require(Operation.CHANGE_PASSWORD)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    return auth_service.change_password(
        conn, user_id=principal.user_id, new_password=payload.newPassword
    )


# -----------------------------
# Users (role=user)
# -----------------------------


@router.get("/users/stores")
def browse_stores(
    q: Optional[str] = Query(None, description="Filter by name or address"),
    principal: Principal = Depends(require(Operation.BROWSE_STORES)),
    conn: Any = Depends(get_conn),
) -> List[Dict[str, Any]]:
    aggs = aggregates_by_store(conn)
    mine = ratings_by_user(conn, principal.user_id)

    out: List[Dict[str, Any]] = []
    for row in list_stores(conn):
        s = public_store(row, aggs.get(int(row["store_id"]), _NO_RATINGS))
        # The dashboard reads avgRating; admin tables read averageRating.
        s["avgRating"] = s["averageRating"]
        s["userRating"] = mine.get(s["id"])
        out.append(s)
    return filter_rows(out, q, ("name", "address"))


@router.post("/rate")
def rate_store(
    payload: RateRequest,
    principal: Principal = Depends(require(Operation.RATE_STORE)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    rating = submit_or_replace_rating(
        conn,
        user_id=principal.user_id,
        store_id=payload.storeId,
        value=payload.rating,
        comment=payload.comment,
    )
    agg = compute_store_aggregate(conn, payload.storeId)
    return {
        "message": "Rating submitted",
        "rating": rating,
        "aggregate": {"averageRating": agg.average, "totalRatings": agg.count},
    }


# -----------------------------
# Store owners (role=store)
# -----------------------------


@router.get("/store/ratings")
def own_store_ratings(
    principal: Principal = Depends(require(Operation.VIEW_OWN_STORE_RATINGS)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    row = get_store_by_owner(conn, principal.user_id)
    if row is None:
        raise NotFound("Store not found")

    store_id = int(row["store_id"])
    agg = compute_store_aggregate(conn, store_id)
    return {
        "store": public_store(row, agg),
        "ratings": list_store_ratings(conn, store_id),
        "averageRating": agg.average,
        "totalRatings": agg.count,
    }


@router.put("/store/update-password")
def store_update_password(
    payload: UpdatePasswordRequest,
    principal: Principal = Depends(require(Operation.CHANGE_STORE_PASSWORD)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    return auth_service.change_password(
        conn, user_id=principal.user_id, new_password=payload.newPassword
    )


# -----------------------------
# Admin
# -----------------------------

_STORE_SORT_FIELDS = ("name", "email", "address", "averageRating", "totalRatings", "createdAt")
_USER_SORT_FIELDS = ("name", "email", "address", "role", "averageRating", "createdAt")


@router.get("/admin/stats")
def admin_stats(
    _admin: Principal = Depends(require(Operation.ADMIN_STATS)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    return {
        "totalUsers": count_users(conn),
        "totalStores": count_stores(conn),
        "totalRatings": count_ratings(conn),
    }


@router.get("/admin/stores")
def admin_list_stores(
    q: Optional[str] = Query(None, description="Filter by name, email or address"),
    sort: Optional[str] = Query(None),
    order: str = Query("asc"),
    _admin: Principal = Depends(require(Operation.ADMIN_LIST_STORES)),
    conn: Any = Depends(get_conn),
) -> List[Dict[str, Any]]:
    aggs = aggregates_by_store(conn)
    stores = [public_store(r, aggs.get(int(r["store_id"]), _NO_RATINGS)) for r in list_stores(conn)]
    stores = filter_rows(stores, q, ("name", "email", "address"))
    return sort_rows(stores, sort, order, _STORE_SORT_FIELDS)


@router.get("/admin/users")
def admin_list_users(
    q: Optional[str] = Query(None, description="Filter by name, email, address or role"),
    role: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    order: str = Query("asc"),
    _admin: Principal = Depends(require(Operation.ADMIN_LIST_USERS)),
    conn: Any = Depends(get_conn),
) -> List[Dict[str, Any]]:
    role_filter: Optional[Role] = None
    if role:
        try:
            role_filter = Role.parse(role)
        except ValueError:
            raise ValidationError("Role must be one of: user, store, admin", field="role")

    aggs = aggregates_by_store(conn)
    store_by_owner = {int(r["owner_user_id"]): int(r["store_id"]) for r in list_stores(conn)}

    users = list_users(conn, role=role_filter)
    for u in users:
        if u["role"] == Role.STORE.value and u["id"] in store_by_owner:
            u["averageRating"] = aggs.get(store_by_owner[u["id"]], _NO_RATINGS).average
    users = filter_rows(users, q, ("name", "email", "address", "role"))
    return sort_rows(users, sort, order, _USER_SORT_FIELDS)


@router.post("/admin/create-user", status_code=201)
def admin_create_user(
    payload: CreateUserRequest,
    admin: Principal = Depends(require(Operation.ADMIN_CREATE_USER)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    result = auth_service.admin_create_user(
        conn,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        address=payload.address,
        role=payload.role,
    )
    _debug(f"Admin user_id={admin.user_id} created user_id={result.user['id']}")
    return result.to_dict()


@router.post("/admin/create-store", status_code=201)
def admin_create_store(
    payload: CreateStoreRequest,
    admin: Principal = Depends(require(Operation.ADMIN_CREATE_STORE)),
    conn: Any = Depends(get_conn),
) -> Dict[str, Any]:
    result = auth_service.admin_create_store(
        conn,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        address=payload.address,
    )
    _debug(f"Admin user_id={admin.user_id} created store for user_id={result.user['id']}")
    return result.to_dict()


# -----------------------------
# App
# -----------------------------


def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = None
    message = "Invalid request"
    if errors:
        loc = [str(p) for p in errors[0].get("loc", ()) if p != "body"]
        field = ".".join(loc) or None
        message = f"{field}: {errors[0].get('msg')}" if field else str(errors[0].get("msg"))
    return JSONResponse(status_code=400, content=ValidationError(message, field=field).to_dict())


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    cfg: Config = app.state.cfg
    init_db(cfg.DB_DSN)

    # First admin, only when the users table is empty.
    boot = bootstrap_admin_if_needed(cfg)
    if boot:
        _debug(f"Bootstrapped initial admin: email={boot.get('email')} role={boot.get('role')}")
    yield


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    app = FastAPI(title="Store Ratings", version="0.1.0", lifespan=_lifespan)
    app.state.cfg = cfg or load_config()

    # CORS is for local development (React dev server -> API on :8000).
    origins = [o.strip() for o in (app.state.cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)
    return app


app = create_app()
