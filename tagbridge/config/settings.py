"""Platform settings for tagbridge."""

import json
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import validator
from pydantic_settings import BaseSettings


DEFAULT_HOSTS = {
    "github": "https://api.github.com",
    "gitlab": "https://gitlab.com",
}


class Settings(BaseSettings):
    """Connection settings for the hosting platform."""

    platform: Literal["github", "gitlab"] = "github"
    host: Optional[str] = None
    token: Optional[str] = None
    project: Optional[str] = None

    @validator('host')
    def normalize_host(cls, v):
        """Ensure the host has a protocol and no trailing slash."""
        if v and not v.startswith(('http://', 'https://')):
            v = f"https://{v}"
        return v.rstrip('/') if v else v

    @property
    def api_host(self) -> str:
        return self.host or DEFAULT_HOSTS[self.platform]

    class Config:
        env_prefix = "TAGBRIDGE_"
        case_sensitive = False


def load_json_config(config_path: str) -> dict:
    """Load settings from a JSON file.

    Args:
        config_path: Path to JSON settings file

    Returns:
        Settings dictionary
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Error loading settings file {config_path}: {e}")


def find_config_file() -> Optional[str]:
    """Find a settings file in the usual locations.

    Returns:
        Path to settings file or None if not found
    """
    search_paths = [
        "tagbridge.json",
        ".tagbridge.json",
        "~/.config/tagbridge/config.json",
    ]

    for path_str in search_paths:
        path = Path(path_str).expanduser()
        if path.exists() and path.is_file():
            return str(path)

    return None


def get_settings(config_file: Optional[str] = None) -> Settings:
    """Load settings from a JSON file and environment variables.

    Environment variables take precedence over the file.

    Args:
        config_file: Optional path to JSON settings file

    Returns:
        Settings object
    """
    settings_data = {}

    json_config_path = config_file or find_config_file()
    if json_config_path:
        try:
            settings_data.update(load_json_config(json_config_path))
        except ValueError:
            # Unreadable settings files are ignored; env still applies
            pass

    env_settings = {
        'platform': os.getenv('TAGBRIDGE_PLATFORM'),
        'host': os.getenv('TAGBRIDGE_HOST'),
        'token': os.getenv('TAGBRIDGE_TOKEN') or os.getenv('GITHUB_TOKEN'),
        'project': os.getenv('TAGBRIDGE_PROJECT') or os.getenv('GITHUB_REPOSITORY'),
    }
    env_settings = {k: v for k, v in env_settings.items() if v is not None}
    settings_data.update(env_settings)

    known = {k: v for k, v in settings_data.items() if k in Settings.model_fields}
    return Settings(**known)
