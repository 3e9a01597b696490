"""Changelog configuration: built-in defaults merged with user overrides."""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, ValidationError, validator

from ..errors import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".github/release-changelog-builder-config.yml"


class Category(BaseModel):
    """A named bucket of pull requests selected by label."""

    title: str
    labels: Tuple[str, ...] = ()

    @validator('title')
    def title_not_blank(cls, v):
        if not v.strip():
            raise ValueError("category title must not be empty")
        return v

    def matches(self, tokens: FrozenSet[str]) -> bool:
        return any(label.lower() in tokens for label in self.labels)

    class Config:
        frozen = True


DEFAULT_CATEGORIES = (
    Category(title="🚀 Features", labels=("feature", "feat", "enhancement")),
    Category(title="🐛 Bug Fixes", labels=("fix", "bug", "hotfix")),
    Category(title="📚 Docs", labels=("doc", "docs", "documentation")),
    Category(title="🧪 Tests", labels=("test", "tests", "qa")),
    Category(title="🧹 Chores", labels=("chore", "maintenance", "refactor")),
    Category(title="📦 Dependencies", labels=("deps", "dependencies")),
)

DEFAULT_CHANGELOG_CONFIG = MappingProxyType({
    "template": "\n".join([
        "## 🔖 Release Preview",
        "Changes since $FROM_TAG → $TO_REF",
        "",
        "$CHANGES",
    ]),
    "empty_template": "_No merged pull requests found in this range._",
    "pr_template": "- $TITLE (#$NUMBER) by @$AUTHOR",
    "categories": DEFAULT_CATEGORIES,
    "ignore_labels": ("skip-changelog", "no-changelog"),
    "other_title": "Other changes",
    "style": "list",
    "table_header": "| PR | Title | Author |\n| --- | --- | --- |",
    "row_template": "| [#$NUMBER]($URL) | $TITLE | @$AUTHOR |",
    "group_by_author": False,
    "base_branch": None,
    "title_heuristics": True,
})

# Options where an explicitly empty list is a deliberate override
_EMPTY_ALLOWED = frozenset({"ignore_labels"})


class ChangelogConfig(BaseModel):
    """Resolved changelog configuration, immutable for the run."""

    template: str
    empty_template: str
    pr_template: str
    categories: Tuple[Category, ...]
    ignore_labels: FrozenSet[str]
    other_title: str
    style: Literal["list", "table"]
    table_header: str
    row_template: str
    group_by_author: bool
    base_branch: Optional[str]
    title_heuristics: bool

    @validator('categories')
    def unique_titles(cls, v):
        seen = set()
        for category in v:
            if category.title in seen:
                raise ValueError(f"duplicate category title: {category.title}")
            seen.add(category.title)
        return v

    @validator('other_title')
    def other_title_not_configured(cls, v, values):
        # categories is declared first, so it is in values unless it failed
        for category in values.get('categories') or ():
            if category.title == v:
                raise ValueError(f"category title collides with other_title: {v}")
        return v

    @validator('ignore_labels')
    def lowercase_labels(cls, v):
        return frozenset(label.lower() for label in v)

    @property
    def other_category(self) -> Category:
        return Category(title=self.other_title)

    @property
    def ordered_categories(self) -> Tuple[Category, ...]:
        """Configured categories followed by the catch-all category."""
        return self.categories + (self.other_category,)

    class Config:
        frozen = True


def _is_unset(key: str, value: Any) -> bool:
    if value is None:
        return True
    if key in _EMPTY_ALLOWED:
        return False
    return value == "" or value == [] or value == ()


def merge_config(raw: Optional[Dict[str, Any]] = None) -> ChangelogConfig:
    """Merge user overrides over the built-in defaults.

    Args:
        raw: Parsed configuration mapping, or None for pure defaults

    Returns:
        Validated changelog configuration

    Raises:
        ConfigurationError: If an override has the wrong shape
    """
    merged = dict(DEFAULT_CHANGELOG_CONFIG)
    for key, value in (raw or {}).items():
        if key not in merged:
            logger.debug(f"Ignoring unknown configuration option '{key}'")
            continue
        if _is_unset(key, value):
            continue
        merged[key] = value

    try:
        return ChangelogConfig(**merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid changelog configuration: {e}") from e


def _parse_config_text(text: str, config_path: str) -> Dict[str, Any]:
    try:
        if config_path.endswith(".json"):
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Malformed configuration at {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Malformed configuration at {config_path}: expected a mapping, got {type(data).__name__}"
        )
    return data


def load_changelog_config(config_path: Optional[str]) -> ChangelogConfig:
    """Load the changelog configuration file.

    Missing or unreadable files fall back to the defaults. Files that exist
    but cannot be parsed or validated are fatal.

    Args:
        config_path: Path to a YAML or JSON file, relative to the working directory

    Returns:
        Resolved changelog configuration
    """
    if not config_path:
        return merge_config()

    try:
        text = Path(config_path).read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.info(f"Configuration not found at {config_path}; using defaults")
        return merge_config()
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Malformed configuration at {config_path}: {e}") from e
    except OSError as e:
        logger.info(f"Failed to read configuration at {config_path}: {e}; using defaults")
        return merge_config()

    return merge_config(_parse_config_text(text, config_path))


def create_sample_config(path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write the default changelog configuration as YAML.

    Args:
        path: Path where to create the sample config file
    """
    defaults = merge_config()
    sample = {
        "template": defaults.template,
        "empty_template": defaults.empty_template,
        "pr_template": defaults.pr_template,
        "categories": [
            {"title": c.title, "labels": list(c.labels)} for c in defaults.categories
        ],
        "ignore_labels": sorted(defaults.ignore_labels),
    }

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, 'w', encoding='utf-8') as f:
        yaml.safe_dump(sample, f, allow_unicode=True, sort_keys=False)
