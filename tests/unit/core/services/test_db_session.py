"""Unit tests for the database session service."""

from unittest.mock import patch

import pytest
from sqlalchemy import StaticPool
from sqlmodel import select

from src.accounts.core.services import DbSessionService
from src.accounts.entities.core.user import User, UserRepository, UserTable
from src.accounts.runtime.config.config_data import ConfigData, DatabaseConfig


@pytest.fixture
def memory_config() -> ConfigData:
    return ConfigData(database=DatabaseConfig(url="sqlite:///:memory:"))


class TestDbSessionService:
    def test_in_memory_database_uses_static_pool(self, memory_config):
        service = DbSessionService(memory_config)

        assert isinstance(service.engine.pool, StaticPool)
        service.close()

    def test_sessions_share_in_memory_database(self, memory_config):
        service = DbSessionService(memory_config)
        service.create_tables()

        with service.session_scope() as session:
            UserRepository(session).create_user(User.create(email="a@x.com"))

        with service.session_scope() as session:
            rows = session.exec(select(UserTable)).all()

        assert [row.email for row in rows] == ["a@x.com"]
        service.close()

    def test_session_scope_rolls_back_on_error(self, memory_config):
        service = DbSessionService(memory_config)
        service.create_tables()

        with pytest.raises(RuntimeError):
            with service.session_scope() as session:
                session.add(UserTable(email="a@x.com"))
                raise RuntimeError("abort")

        with service.session_scope() as session:
            assert session.exec(select(UserTable)).all() == []
        service.close()

    def test_health_check(self, memory_config):
        service = DbSessionService(memory_config)

        assert service.health_check() is True
        service.close()

    def test_health_check_reports_failure(self, memory_config):
        service = DbSessionService(memory_config)

        with patch.object(service.engine, "connect", side_effect=OSError("gone")):
            assert service.health_check() is False
        service.close()
