import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

TRUTHY = ("1", "true", "yes", "on")
FALSY = ("0", "false", "no", "off")


class Settings:
    def __init__(
        self,
        db_path: Path,
        database_url: Optional[str],
        user_id: Optional[str],
        demo: bool,
        aggregates_enabled: bool,
        log_level: str,
    ) -> None:
        self.db_path = db_path
        self.database_url = database_url
        self.user_id = user_id
        self.demo = demo
        self.aggregates_enabled = aggregates_enabled
        self.log_level = log_level


def _flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    raise ValueError(f"{name} must be one of {', '.join(TRUTHY + FALSY)}, got '{value}'")


def default_db_path() -> Path:
    return Path.home() / ".pocketledger" / "pocketledger.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    db_path = os.getenv("POCKETLEDGER_DB_PATH")
    return Settings(
        db_path=Path(db_path) if db_path else default_db_path(),
        database_url=os.getenv("POCKETLEDGER_DATABASE_URL") or None,
        user_id=os.getenv("POCKETLEDGER_USER") or None,
        demo=_flag("POCKETLEDGER_DEMO", False),
        aggregates_enabled=_flag("POCKETLEDGER_AGGREGATES", True),
        log_level=os.getenv("POCKETLEDGER_LOG_LEVEL", "WARNING").upper(),
    )
