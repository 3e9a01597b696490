"""Keep a single changelog comment up to date on a pull request."""

import logging
from typing import Tuple


DEFAULT_MARKER = "<!-- tag-release-bridge -->"

logger = logging.getLogger(__name__)


def with_marker(body: str, marker: str = DEFAULT_MARKER) -> str:
    return f"{marker}\n{body}"


def upsert_comment(source, issue: int, body: str, marker: str = DEFAULT_MARKER) -> Tuple[int, bool]:
    """Create the marked comment or replace the body of an existing one.

    When several comments carry the marker the first one listed is updated.

    Args:
        source: Platform client providing ``list_comments``, ``create_comment``
            and ``update_comment``
        issue: Pull request number
        body: Rendered changelog body
        marker: Token identifying the comment across runs

    Returns:
        Tuple of (comment id, created)
    """
    content = with_marker(body, marker)
    existing = next(
        (comment for comment in source.list_comments(issue) if marker in (comment.body or "")),
        None,
    )

    if existing:
        source.update_comment(issue, existing.id, content)
        logger.info(f"Updated existing comment (id: {existing.id})")
        return existing.id, False

    created = source.create_comment(issue, content)
    logger.info(f"Created new comment (id: {created.id})")
    return created.id, True
