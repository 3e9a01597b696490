"""Render grouped pull requests into the changelog body."""

import functools
import re
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from dateutil.parser import isoparse

from ..config import ChangelogConfig
from .classifier import Grouping, group_by_author
from .models import PullRequest


OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@functools.lru_cache(maxsize=32)
def _placeholder_pattern(keys: Tuple[str, ...]):
    # Longest names first so $AUTHOR_URL is not read as $AUTHOR + "_URL"
    names = "|".join(re.escape(k) for k in sorted(keys, key=len, reverse=True))
    return re.compile(r"\$(?:\{\{?(?P<braced>%s)\}?\}|(?P<bare>%s))" % (names, names))


def substitute(template: str, values: Mapping[str, str]) -> str:
    """Replace ``$KEY``, ``${KEY}`` and ``${{KEY}}`` placeholders in one pass.

    Unknown placeholders are left untouched and substituted text is never
    scanned again.
    """
    if not values:
        return template
    pattern = _placeholder_pattern(tuple(sorted(values)))
    return pattern.sub(lambda m: values[m.group("braced") or m.group("bare")], template)


def escape_cell(value: str) -> str:
    """Make free text safe inside a markdown table cell."""
    return value.replace("\\", "\\\\").replace("|", "\\|").replace("\r", "").replace("\n", " ")


def merged_sort_key(pr: PullRequest) -> Tuple[datetime, int]:
    """Sort key for newest-first ordering; bad timestamps count as oldest."""
    merged = OLDEST
    if pr.merged_at:
        try:
            merged = isoparse(pr.merged_at)
        except (ValueError, OverflowError):
            merged = OLDEST
        if merged.tzinfo is None:
            merged = merged.replace(tzinfo=timezone.utc)
    return merged, pr.number


def sort_pull_requests(prs: Sequence[PullRequest]) -> List[PullRequest]:
    return sorted(prs, key=merged_sort_key, reverse=True)


def pull_request_values(pr: PullRequest, category_title: str, from_tag: str,
                        to_ref: str) -> Dict[str, str]:
    return {
        "TITLE": pr.title,
        "NUMBER": str(pr.number),
        "URL": pr.url,
        "AUTHOR": pr.author_login,
        "AUTHOR_URL": (pr.author.profile_url if pr.author else None) or "",
        "CATEGORY": category_title,
        "FROM_TAG": from_tag,
        "TO_REF": to_ref,
        "BRANCH": pr.head_ref or "",
        "BASE": pr.base_ref,
    }


def render_pull_request(template: str, pr: PullRequest, category_title: str,
                        from_tag: str, to_ref: str,
                        escape: Optional[Callable[[str], str]] = None) -> str:
    values = pull_request_values(pr, category_title, from_tag, to_ref)
    if escape:
        values = {key: escape(value) for key, value in values.items()}
    return substitute(template, values)


def _render_section(config: ChangelogConfig, heading: str, category_title: str,
                    prs: Sequence[PullRequest], from_tag: str, to_ref: str) -> str:
    if config.style == "table":
        rows = [
            render_pull_request(config.row_template, pr, category_title, from_tag, to_ref,
                                escape=escape_cell)
            for pr in sort_pull_requests(prs)
        ]
        return "\n".join([heading, config.table_header] + rows)

    entries = [
        render_pull_request(config.pr_template, pr, category_title, from_tag, to_ref)
        for pr in sort_pull_requests(prs)
    ]
    return "\n".join([heading] + entries)


def _render_categories(config: ChangelogConfig, grouped: Grouping, level: int,
                       from_tag: str, to_ref: str) -> List[str]:
    sections = []
    for category in config.ordered_categories:
        prs = grouped.get(category.title)
        if not prs:
            continue
        heading = f"{'#' * level} {category.title}"
        sections.append(_render_section(config, heading, category.title, prs, from_tag, to_ref))
    return sections


def render_changes(config: ChangelogConfig, grouped: Grouping, from_tag: str, to_ref: str) -> str:
    """Render the category sections, nested under authors when configured."""
    if not config.group_by_author:
        return "\n\n".join(_render_categories(config, grouped, 3, from_tag, to_ref))

    sections = []
    for login, by_category in group_by_author(grouped).items():
        subsections = _render_categories(config, by_category, 4, from_tag, to_ref)
        sections.append("\n\n".join([f"### @{login}"] + subsections))
    return "\n\n".join(sections)


def render_body(config: ChangelogConfig, grouped: Grouping, from_tag: str, to_ref: str) -> str:
    """Render the full changelog document.

    Args:
        config: Resolved changelog configuration
        grouped: Pull requests by category title
        from_tag: Previous tag
        to_ref: Head reference name

    Returns:
        Rendered body
    """
    count = sum(len(prs) for prs in grouped.values())
    values = {
        "FROM_TAG": from_tag,
        "TO_REF": to_ref,
        "COUNT": str(count),
    }
    if count:
        changes = render_changes(config, grouped, from_tag, to_ref)
    else:
        changes = substitute(config.empty_template, values)
    return substitute(config.template, dict(values, CHANGES=changes))
