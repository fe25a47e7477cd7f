"""
Content Store - Configuration
All settings loaded from environment variables with sensible defaults.

Module-level values are only *defaults*.  The store itself never reads them
directly: build a :class:`StoreConfig` (usually via ``StoreConfig.from_env()``)
and hand it to ``ContentStore`` / ``create_app`` explicitly.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet

from dotenv import load_dotenv

# Load environment variables from .env file
_ = load_dotenv()

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
APP_ENV = os.getenv("APP_ENV", "development")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
DEBUG = os.getenv("DEBUG", "true").lower() == "true"
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")

if APP_ENV == "production" and SECRET_KEY == "change-me-in-production":
    raise RuntimeError(
        "SECRET_KEY must be changed from the default value in production. "
        "Set the SECRET_KEY environment variable to a random secret."
    )

# ---------------------------------------------------------------------------
# Authorization for the admin API
# ---------------------------------------------------------------------------
# Comma-separated principals allowed to modify content.  Empty means any
# authenticated principal may write.
ADMIN_PRINCIPALS = os.getenv("ADMIN_PRINCIPALS", "")
# Bearer token max age (seconds), default 1 day
TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", str(60 * 60 * 24)))

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
DATA_DIR = Path(
    os.getenv("DATA_DIR", os.path.join(tempfile.gettempdir(), "content_store"))
)
DB_PATH = Path(os.getenv("DB_PATH", os.path.join(DATA_DIR, "content.db")))

# ---------------------------------------------------------------------------
# Logging: stdout only
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


def parse_principals(raw: str) -> FrozenSet[str]:
    """Split a comma-separated principal list, dropping blanks."""
    return frozenset(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class StoreConfig:
    """Explicit configuration handed to the store and the admin API."""

    db_path: Path = DB_PATH
    secret_key: str = SECRET_KEY
    admin_principals: FrozenSet[str] = field(default_factory=frozenset)
    token_max_age: int = TOKEN_MAX_AGE
    log_level: str = LOG_LEVEL

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Build a config from the module-level environment defaults."""
        return cls(
            db_path=DB_PATH,
            secret_key=SECRET_KEY,
            admin_principals=parse_principals(ADMIN_PRINCIPALS),
            token_max_age=TOKEN_MAX_AGE,
            log_level="DEBUG" if DEBUG else LOG_LEVEL,
        )


def ensure_directories(config: StoreConfig) -> None:
    """Create the directory holding the SQLite database file."""
    Path(config.db_path).parent.mkdir(parents=True, exist_ok=True)
