import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load a local .env file if present (no-op otherwise).
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    Anything else (or unset) returns `default`.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Secrets come from environment variables or a .env file.
    Tests construct this directly, e.g. `Config(DB_DSN=str(tmp_path / "t.sqlite"))`.
    """

    # -----------------
    # Core
    # -----------------
    # Postgres: STORE_RATINGS_DATABASE_URL (or DATABASE_URL).
    # Fallback: STORE_RATINGS_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("STORE_RATINGS_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("STORE_RATINGS_DB_PATH", "./store_ratings.sqlite")
    )

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In production AUTH_JWT_SECRET MUST be set to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("AUTH_JWT_SECRET", "dev_change_me")
    AUTH_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("AUTH_TOKEN_EXPIRE_MINUTES", "1440"))  # 1 day

    # First admin, created only while the users table is empty.
    # Clearing the email or password disables the bootstrap.
    AUTH_BOOTSTRAP_ADMIN_NAME: str = os.environ.get(
        "AUTH_BOOTSTRAP_ADMIN_NAME", "Platform Administrator"
    )
    AUTH_BOOTSTRAP_ADMIN_EMAIL: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_EMAIL", "admin@example.com")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "Admin@1234")
    AUTH_BOOTSTRAP_ENABLED: bool = _env_bool("AUTH_BOOTSTRAP_ENABLED", True) is True

    # -----------------
    # CORS (development)
    # -----------------
    # The React dev server runs on :5173 (Vite) or :3000 (CRA).
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
    )


def load_config() -> Config:
    return Config()
