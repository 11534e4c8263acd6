import logging
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_FILE = "library.db"


def database_file_from_env() -> str:
    """Resolve the SQLite file at call time so tests can point it elsewhere."""
    return os.getenv("LIBRARY_DB_FILE") or DEFAULT_DATABASE_FILE


@dataclass
class Settings:
    # Application
    app_name: str = os.getenv("APP_NAME", "Library Lending")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")

    # API
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    # Database
    database_timeout: float = float(os.getenv("DATABASE_TIMEOUT", "10"))  # seconds a writer waits for the lock

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def configure_logging() -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
