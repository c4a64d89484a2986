"""Runtime settings from environment variables (optionally a .env at repo root)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from contactbook.infrastructure.sources import DEFAULT_GOOGLE_PAGE_SIZE

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def load_env_file() -> None:
    """Load .env from repo root or current dir (first one found)."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if not value:
        return default
    return value.lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


@dataclass(frozen=True)
class Settings:
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    # ISO region for phone keys, e.g. "US". None = digits only.
    default_region: str | None = None
    google_page_size: int = DEFAULT_GOOGLE_PAGE_SIZE
    import_check_names: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        neo4j_uri=_env("NEO4J_URI", "bolt://localhost:7687"),
        neo4j_user=_env("NEO4J_USER", "neo4j"),
        neo4j_password=_env("NEO4J_PASSWORD", "password"),
        default_region=_env("CONTACTS_DEFAULT_REGION").upper() or None,
        google_page_size=_env_int("GOOGLE_IMPORT_PAGE_SIZE", DEFAULT_GOOGLE_PAGE_SIZE),
        import_check_names=_env_bool("IMPORT_CHECK_NAMES"),
        log_level=_env("LOG_LEVEL", "INFO").upper() or "INFO",
    )
