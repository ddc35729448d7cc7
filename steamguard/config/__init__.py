"""Configuration package for steamguard.

Settings come from environment variables and an optional ``.env`` file via
pydantic-settings; see :mod:`steamguard.config.settings`.
"""

from steamguard.config.settings import Settings

__all__ = ["Settings"]
