"""Locate the tag a changelog range starts from."""

import logging
from typing import Optional, Sequence, Tuple

from .models import Comparison, Tag


logger = logging.getLogger(__name__)


def locate_previous_tag(source, tags: Sequence[Tag], head_sha: str) -> Optional[Tuple[str, Comparison]]:
    """Find the first tag, in listing order, that the head commit contains.

    Tags are compared one at a time and the scan stops at the first tag
    whose comparison is ``ahead`` or ``identical``, so the listing order
    (newest first from the platforms) decides which tag is nearest.

    Args:
        source: Platform client providing ``compare(base, head)``
        tags: Tags in listing order
        head_sha: Target commit

    Returns:
        Tuple of (tag name, its comparison with the head) or None if no
        tag is reachable
    """
    for tag in tags:
        comparison = source.compare(tag.name, head_sha)
        logger.debug(f"Compared {tag.name}...{head_sha}: {comparison.status}")
        if comparison.head_contains_base:
            return tag.name, comparison
    return None


def find_previous_tag(source, tags: Sequence[Tag], head_sha: str) -> Optional[str]:
    """Name of the previous tag, see ``locate_previous_tag``."""
    located = locate_previous_tag(source, tags, head_sha)
    return located[0] if located else None
