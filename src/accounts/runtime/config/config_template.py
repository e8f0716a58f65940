"""Load ``config.yaml`` with ``${VAR}`` placeholders resolved from the environment."""

import os
import re
from collections.abc import Mapping
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.accounts.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _resolve_placeholder(expression: str, environ: Mapping[str, str]) -> str:
    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return environ.get(name, default)

    name, _, hint = expression.partition(":?")
    value = environ.get(name)
    if value is None:
        detail = hint or "not set"
        raise ValueError(f"Required environment variable {name}: {detail}")
    return value


def substitute_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Replace every placeholder in ``text`` with values from ``environ``.

    ``environ`` defaults to ``os.environ``. ``${NAME:-default}`` falls back
    to ``default``; ``${NAME}`` and ``${NAME:?hint}`` raise ``ValueError``
    when ``NAME`` is unset.
    """
    values = os.environ if environ is None else environ
    return _PLACEHOLDER.sub(
        lambda match: _resolve_placeholder(match.group(1), values), text
    )


def environment_overrides(
    env_mode: str, environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Map ``<ENV>_NAME`` variables of the active environment onto ``NAME``.

    The process environment is left untouched.
    """
    values = os.environ if environ is None else environ
    prefix = f"{env_mode.upper()}_"
    overrides: dict[str, str] = {}
    for var_name, value in values.items():
        if not var_name.startswith(prefix) or var_name == prefix:
            continue
        target = var_name.removeprefix(prefix)
        overrides[target] = value
        logger.debug("Environment override applied", target=target, source=var_name)
    return overrides


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Parse ``file_path`` into :class:`ConfigData`.

    Raises ``ValueError`` for missing required variables, malformed YAML or
    values the model rejects.
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration", environment=env_mode, path=str(file_path))
    environ = {**os.environ, **environment_overrides(env_mode)}

    rendered = substitute_env_vars(Path(file_path).read_text(), environ)
    try:
        document = yaml.safe_load(rendered)
    except yaml.YAMLError as exc:
        raise ValueError(f"Error parsing YAML: {exc}") from exc
    if not document:
        raise ValueError(f"Configuration file {file_path} is empty")

    try:
        return ConfigData.model_validate(document.get("config") or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def load_config(file_path: Path) -> ConfigData:
    """Load config.yaml when present, falling back to model defaults."""
    if not file_path.exists():
        logger.warning("Configuration file not found; using defaults", path=str(file_path))
        return ConfigData()
    return load_templated_yaml(file_path)
