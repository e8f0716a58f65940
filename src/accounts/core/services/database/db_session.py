"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlmodel import Session, SQLModel, create_engine

from src.accounts.runtime.config.config_data import ConfigData


def _connect_args(config: ConfigData) -> dict:
    if config.database.is_sqlite:
        return {"check_same_thread": False, "timeout": 20}
    if config.database.url.startswith("postgresql"):
        return {
            "application_name": f"{config.app.name}_{config.app.environment}",
            "connect_timeout": 30,
        }
    return {}


def _pool_options(config: ConfigData) -> dict:
    db_config = config.database
    if db_config.is_sqlite:
        # In-memory SQLite needs one shared connection or each session sees an empty database
        return {"poolclass": StaticPool} if ":memory:" in db_config.url else {}
    return {
        "pool_size": db_config.pool_size,
        "max_overflow": db_config.max_overflow,
        "pool_timeout": db_config.pool_timeout,
        "pool_recycle": db_config.pool_recycle,
    }


class DbSessionService:
    def __init__(self, config: ConfigData):
        """Create the engine shared by every session this service hands out."""
        logger.info(
            "Configuring database engine for environment: {}", config.app.environment
        )
        self._engine = create_engine(
            config.database.url,
            echo=False,
            pool_pre_ping=True,
            connect_args=_connect_args(config),
            **_pool_options(config),
        )

    @property
    def engine(self):
        return self._engine

    def create_tables(self) -> None:
        """Create all tables registered on the SQLModel metadata."""
        from src.accounts.entities.core.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for scripts and tests."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Run ``SELECT 1``; return False on any database error."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed", error=str(e))
            return False

    def close(self) -> None:
        self._engine.dispose()
