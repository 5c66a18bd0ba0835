"""Database factory functions for creating database instances."""

from pathlib import Path
from typing import Optional

from pocketledger.config import Settings, get_settings
from pocketledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None,
    user_id: Optional[str] = None,
    aggregates_enabled: bool = True,
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, uses
            POCKETLEDGER_DB_PATH, then defaults to ~/.pocketledger/pocketledger.db
        user_id: Authenticated user every operation is scoped to
        aggregates_enabled: Whether the aggregate procedures are available

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        path = get_settings().db_path
        path.parent.mkdir(parents=True, exist_ok=True)
        database_path = str(path)

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, user_id=user_id, aggregates_enabled=aggregates_enabled)


def create_database(
    settings: Optional[Settings] = None,
    database_path: Optional[str] = None,
    user_id: Optional[str] = None,
    aggregates_enabled: Optional[bool] = None,
) -> SQLAlchemyDatabase:
    """Create a database instance from settings.

    POCKETLEDGER_DATABASE_URL wins over any SQLite path; otherwise an explicit
    database_path wins over the configured one.

    Args:
        settings: Settings to read defaults from (defaults to get_settings())
        database_path: Optional SQLite file path
        user_id: Optional user ID overriding the configured one
        aggregates_enabled: Optional override for the aggregate procedures

    Returns:
        SQLAlchemyDatabase instance
    """
    settings = settings or get_settings()
    user_id = user_id or settings.user_id
    if aggregates_enabled is None:
        aggregates_enabled = settings.aggregates_enabled

    if settings.database_url:
        return SQLAlchemyDatabase(
            settings.database_url, user_id=user_id, aggregates_enabled=aggregates_enabled
        )

    if database_path is None:
        Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
        database_path = str(settings.db_path)
    return create_sqlite_database(
        database_path=database_path, user_id=user_id, aggregates_enabled=aggregates_enabled
    )
