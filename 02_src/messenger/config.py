"""Project-level configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "db.json"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_TOKEN_TTL_DAYS = 7
DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_PATH to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def token_ttl_days() -> int:
    """Access token lifetime in days (TOKEN_TTL_DAYS)."""
    return int(os.getenv("TOKEN_TTL_DAYS", str(DEFAULT_TOKEN_TTL_DAYS)))


def bcrypt_rounds() -> int:
    """Cost factor for password hashing (BCRYPT_ROUNDS)."""
    return int(os.getenv("BCRYPT_ROUNDS", str(DEFAULT_BCRYPT_ROUNDS)))


def cors_origins() -> list[str]:
    """Origins allowed to call the API (comma-separated CORS_ORIGINS)."""
    raw = os.getenv("CORS_ORIGINS")
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
