"""Shared pytest fixtures and helpers for the account service tests."""

from .api import *  # noqa: F401,F403
from .auth import *  # noqa: F401,F403
from .core import *  # noqa: F401,F403
