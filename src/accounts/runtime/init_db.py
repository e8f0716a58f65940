"""Database initialization script."""

from src.accounts.core.services.database.db_session import DbSessionService
from src.accounts.runtime.context import get_config


def init_db() -> None:
    """Create all database tables."""
    service = DbSessionService(get_config())
    try:
        service.create_tables()
    finally:
        service.close()


if __name__ == "__main__":
    init_db()
