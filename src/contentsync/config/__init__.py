"""Application configuration helpers."""

from __future__ import annotations

from .content_types import (
    DEFAULT_CONTENT_TYPES,
    ContentTypeDefinition,
    ContentTypeRegistry,
    get_content_type_registry,
)
from .env import env_flag, optional_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import ImportConfig, get_import_config, parse_duplicate_policy

__all__ = [
    "DEFAULT_CONTENT_TYPES",
    "ConfigurationError",
    "ContentTypeDefinition",
    "ContentTypeRegistry",
    "DatabaseConfig",
    "ImportConfig",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_content_type_registry",
    "get_database_config",
    "get_import_config",
    "get_storage_config",
    "optional_env_var",
    "parse_duplicate_policy",
]
