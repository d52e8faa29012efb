"""Configuration management using pydantic-settings.

**Not a singleton** -- each call to ``get_app_config()`` re-reads config
from disk.

Priority order (highest first):

1. Init kwargs (``AppConfig(strategy=...)``)
2. Override YAML (path from ``REALCLIENTIP_CONFIG_FILE`` env var)
3. Environment variables (``REALCLIENTIP_`` prefix, ``__`` for nesting)
4. ``.env`` dotenv file
5. Static YAML (``configs/config.yaml``)
6. File secrets

The override file path is resolved at import time.

Example::

    REALCLIENTIP_STRATEGY__TYPE=rightmost_trusted_count
    REALCLIENTIP_STRATEGY__HEADER=X-Forwarded-For
    REALCLIENTIP_STRATEGY__TRUSTED_COUNT=2
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import LoggingConfig, MiddlewareConfig, StrategyConfig

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"

_override_env = os.environ.get("REALCLIENTIP_CONFIG_FILE")
OVERRIDE_CONFIG_FILE: Optional[Path] = Path(_override_env) if _override_env else None

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "REALCLIENTIP_"

DEFAULT_ENCODING = "utf-8"


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    strategy: StrategyConfig = Field(
        default_factory=StrategyConfig,
        description="Client IP strategy matching the deployment topology",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )

    middleware: MiddlewareConfig = Field(
        default_factory=MiddlewareConfig,
        description="ASGI middleware settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings]

        # 2. Override YAML
        if OVERRIDE_CONFIG_FILE is not None and OVERRIDE_CONFIG_FILE.is_file():
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=OVERRIDE_CONFIG_FILE,
                )
            )

        # 3-4. Env vars and dotenv
        sources.append(env_settings)
        sources.append(dotenv_settings)

        # 5. Static YAML
        sources.append(YamlConfigSettingsSource(settings_cls))

        # 6. File secrets
        sources.append(file_secret_settings)

        return tuple(sources)


def get_app_config() -> AppConfig:
    """Get the application configuration, freshly read from all sources."""
    return AppConfig()
