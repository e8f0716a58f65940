"""Unit tests for configuration loading and the context override system."""

import asyncio
import os
from pathlib import Path

import pytest

from src.accounts.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    CORSConfig,
    DatabaseConfig,
    IdentityProviderConfig,
    JWTConfig,
)
from src.accounts.runtime.config.config_template import (
    environment_overrides,
    load_config,
    load_templated_yaml,
    substitute_env_vars,
)
from src.accounts.runtime.context import (
    AppContext,
    get_config,
    get_context,
    set_config,
    with_context,
)

SHIPPED_CONFIG = Path(__file__).resolve().parents[3] / "config.yaml"


class TestSubstituteEnvVars:
    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("ACCOUNTS_TEST_VAR", raising=False)

        assert substitute_env_vars("url: ${ACCOUNTS_TEST_VAR:-fallback}") == "url: fallback"

    def test_environment_value_wins(self, monkeypatch):
        monkeypatch.setenv("ACCOUNTS_TEST_VAR", "from-env")

        assert substitute_env_vars("${ACCOUNTS_TEST_VAR:-fallback}") == "from-env"

    def test_required_variable_missing(self, monkeypatch):
        monkeypatch.delenv("ACCOUNTS_TEST_VAR", raising=False)

        with pytest.raises(ValueError, match="ACCOUNTS_TEST_VAR"):
            substitute_env_vars("${ACCOUNTS_TEST_VAR}")

    def test_required_variable_custom_message(self, monkeypatch):
        monkeypatch.delenv("ACCOUNTS_TEST_VAR", raising=False)

        with pytest.raises(ValueError, match="set me"):
            substitute_env_vars("${ACCOUNTS_TEST_VAR:?set me}")


class TestLoadTemplatedYaml:
    def test_loads_and_validates(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "test")
        monkeypatch.setenv("IDP_REALM", "staff")
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "config:\n"
            "  app:\n"
            "    environment: ${APP_ENVIRONMENT:-development}\n"
            "  identity_provider:\n"
            "    base_url: https://sso.example.com/\n"
            "    realm: ${IDP_REALM:-accounts}\n"
        )

        config = load_templated_yaml(config_file)

        assert config.app.environment == "test"
        assert config.identity_provider.realm_url == "https://sso.example.com/realms/staff"
        assert config.expected_issuer == "https://sso.example.com/realms/staff"

    def test_environment_prefixed_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "test")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./dev.db")
        monkeypatch.setenv("TEST_DATABASE_URL", "sqlite:///:memory:")
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            'config:\n  database:\n    url: "${DATABASE_URL:-sqlite:///./accounts.db}"\n'
        )

        config = load_templated_yaml(config_file)

        assert config.database.url == "sqlite:///:memory:"
        assert os.environ["DATABASE_URL"] == "sqlite:///./dev.db"

    def test_invalid_values_rejected(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "development")
        config_file = tmp_path / "config.yaml"
        config_file.write_text("config:\n  app:\n    environment: staging\n")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_templated_yaml(config_file)

    def test_invalid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("config: [unclosed\n")

        with pytest.raises(ValueError, match="Error parsing YAML"):
            load_templated_yaml(config_file)

    def test_shipped_config_accepts_memory_database(self, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "test")
        monkeypatch.setenv("TEST_DATABASE_URL", "sqlite:///:memory:")

        config = load_templated_yaml(SHIPPED_CONFIG)

        assert config.app.environment == "test"
        assert config.database.url == "sqlite:///:memory:"

    def test_shipped_config_keeps_secret_verbatim(self, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "development")
        monkeypatch.setenv("IDP_CLIENT_SECRET", "abc #def")

        config = load_templated_yaml(SHIPPED_CONFIG)

        assert config.identity_provider.client_secret == "abc #def"

    def test_shipped_config_unset_optionals_are_none(self, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "development")
        monkeypatch.delenv("IDP_CLIENT_SECRET", raising=False)
        monkeypatch.delenv("JWT_ISSUER", raising=False)
        monkeypatch.delenv("DEVELOPMENT_IDP_CLIENT_SECRET", raising=False)
        monkeypatch.delenv("DEVELOPMENT_JWT_ISSUER", raising=False)

        config = load_templated_yaml(SHIPPED_CONFIG)

        assert config.identity_provider.client_secret is None
        assert config.jwt.issuer is None

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "absent.yaml")

        assert config == ConfigData()


class TestEnvironmentOverrides:
    def test_maps_prefixed_variables(self):
        environ = {"TEST_DATABASE_URL": "sqlite:///:memory:", "LOG_LEVEL": "INFO"}

        assert environment_overrides("test", environ) == {
            "DATABASE_URL": "sqlite:///:memory:"
        }

    def test_process_environment_untouched(self, monkeypatch):
        monkeypatch.delenv("ACCOUNTS_TEST_VAR", raising=False)
        monkeypatch.setenv("TEST_ACCOUNTS_TEST_VAR", "override")

        overrides = environment_overrides("test")

        assert overrides["ACCOUNTS_TEST_VAR"] == "override"
        assert "ACCOUNTS_TEST_VAR" not in os.environ

    def test_substitution_reads_given_mapping(self, monkeypatch):
        monkeypatch.setenv("ACCOUNTS_TEST_VAR", "from-process")

        rendered = substitute_env_vars(
            "${ACCOUNTS_TEST_VAR:-fallback}", {"ACCOUNTS_TEST_VAR": "from-mapping"}
        )

        assert rendered == "from-mapping"


class TestRuntimeValidation:
    def _production(self, **overrides) -> ConfigData:
        values = {
            "app": AppConfig(
                environment="production", cors=CORSConfig(origins=["https://app.example.com"])
            ),
            "database": DatabaseConfig(url="postgresql://db/accounts"),
            "identity_provider": IdentityProviderConfig(client_secret="secret"),
            "jwt": JWTConfig(issuer="https://sso.example.com/realms/accounts"),
        }
        values.update(overrides)
        return ConfigData(**values)

    def test_complete_production_config_passes(self):
        self._production().validate_runtime()

    @pytest.mark.parametrize(
        ("override", "message"),
        [
            ({"identity_provider": IdentityProviderConfig()}, "IDP_CLIENT_SECRET"),
            ({"jwt": JWTConfig()}, "JWT_ISSUER"),
            ({"database": DatabaseConfig(url="sqlite:///./accounts.db")}, "SQLite"),
            (
                {"app": AppConfig(environment="production", cors=CORSConfig(origins=["*"]))},
                "CORS",
            ),
        ],
    )
    def test_production_misconfiguration(self, override, message):
        with pytest.raises(ValueError, match=message):
            self._production(**override).validate_runtime()

    def test_development_only_warns(self):
        ConfigData(app=AppConfig(environment="development")).validate_runtime()


class TestContextManager:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        context = get_context()

        assert isinstance(context, AppContext)
        assert context.config is get_config()

    def test_with_context_overrides_only_set_fields(self):
        original = get_config()

        with with_context(ConfigData(jwt=JWTConfig(clock_skew=5))):
            override = get_config()
            assert override.jwt.clock_skew == 5
            assert override.jwt.allowed_algorithms == original.jwt.allowed_algorithms
            assert override.identity_provider == original.identity_provider

        assert get_config() is original

    def test_nested_overrides(self):
        original = get_config()

        with with_context(ConfigData(jwt=JWTConfig(clock_skew=5))):
            with with_context(ConfigData(app=AppConfig(environment="test"))):
                inner = get_config()
                assert inner.jwt.clock_skew == 5
                assert inner.app.environment == "test"
            assert get_config().app.environment == original.app.environment

    def test_none_override_is_noop(self):
        original = get_config()

        with with_context(None):
            assert get_config() is original

    def test_rejects_non_config_override(self):
        with pytest.raises(ValueError, match="config_override must be ConfigData"):
            with with_context({"jwt": {}}):
                pass

    @pytest.mark.asyncio
    async def test_overrides_are_task_local(self):
        original_skew = get_config().jwt.clock_skew

        async def read_skew() -> int:
            return get_config().jwt.clock_skew

        with with_context(ConfigData(jwt=JWTConfig(clock_skew=1))):
            inside = await asyncio.create_task(read_skew())

        outside = await asyncio.create_task(read_skew())

        assert inside == 1
        assert outside == original_skew

    @pytest.mark.asyncio
    async def test_set_config_inside_task_does_not_leak(self):
        original = get_config()

        async def replace_config() -> None:
            set_config(ConfigData(app=AppConfig(name="other")))
            assert get_config().app.name == "other"

        await asyncio.create_task(replace_config())

        assert get_config() is original
