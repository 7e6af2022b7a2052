import logging
import os
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./bookings.db"
    sql_echo: bool = False
    db_busy_timeout: float = 30.0
    log_level: str = "INFO"
    skip_db_init: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            sql_echo=_env_bool("SQL_ECHO"),
            db_busy_timeout=float(os.getenv("DB_BUSY_TIMEOUT", cls.db_busy_timeout)),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            skip_db_init=os.getenv("SKIP_DB_INIT") == "1",
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
