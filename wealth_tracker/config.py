import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    # If python-dotenv isn't installed or .env isn't present, that's fine.
    pass


# Compiled-in fallback for APP_PASSWORD. This is NOT a secret: anyone who has
# read this file knows it. Always set APP_PASSWORD outside of local development.
INSECURE_DEFAULT_PASSWORD = "admin123"

DEFAULT_ASSET_TYPES = ("Stocks", "Mutual Funds", "Fixed Deposits")


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
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


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(s.strip() for s in raw.split(",") if s.strip())


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide APP_PASSWORD via environment variables or a .env file.
    The compiled-in default is insecure.
    """

    # -----------------
    # Storage
    # -----------------
    # Preferred for hosted setups: set WEALTH_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: DB_PATH for a single SQLite file.
    DB_DSN: str = (
        os.environ.get("WEALTH_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("DB_PATH", "./data/wealth.db")
    )

    # Seed names for an empty asset_types table (comma separated).
    SEED_ASSET_TYPES: tuple[str, ...] = _env_list("SEED_ASSET_TYPES", ",".join(DEFAULT_ASSET_TYPES))

    # -----------------
    # Auth (shared secret)
    # -----------------
    # The bearer token IS this password. There are no sessions and no expiry.
    APP_PASSWORD: str = os.environ.get("APP_PASSWORD") or INSECURE_DEFAULT_PASSWORD

    # -----------------
    # API server
    # -----------------
    API_HOST: str = os.environ.get("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.environ.get("API_PORT") or os.environ.get("PORT") or "5000")

    # Allow all origins unless narrowed (comma separated).
    CORS_ALLOW_ORIGINS: str = os.environ.get("CORS_ALLOW_ORIGINS", "*")

    # -----------------
    # Client / CLI
    # -----------------
    API_URL: str = os.environ.get("WEALTH_API_URL", "http://localhost:5000")
    API_TOKEN: str | None = os.environ.get("WEALTH_TOKEN") or None
    API_TIMEOUT_SECONDS: float = float(os.environ.get("WEALTH_API_TIMEOUT_SECONDS", "30"))

    # Print one line per API request handled.
    LOG_REQUESTS: bool = _env_bool("LOG_REQUESTS", False) is True

    @property
    def uses_insecure_password(self) -> bool:
        return self.APP_PASSWORD == INSECURE_DEFAULT_PASSWORD


def load_config() -> Config:
    return Config()
