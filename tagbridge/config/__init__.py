"""Configuration module."""

from .settings import (
    Settings,
    get_settings,
    load_json_config,
    find_config_file,
)
from .changelog import (
    Category,
    ChangelogConfig,
    DEFAULT_CHANGELOG_CONFIG,
    DEFAULT_CONFIG_PATH,
    merge_config,
    load_changelog_config,
    create_sample_config,
)

__all__ = [
    "Settings",
    "get_settings",
    "load_json_config",
    "find_config_file",
    "Category",
    "ChangelogConfig",
    "DEFAULT_CHANGELOG_CONFIG",
    "DEFAULT_CONFIG_PATH",
    "merge_config",
    "load_changelog_config",
    "create_sample_config",
]
