"""Changelog generation pipeline."""

import logging
import re
from typing import Optional

from ..config import ChangelogConfig
from ..errors import InvalidPatternError
from .classifier import group_pull_requests
from .collector import DEFAULT_BATCH_SIZE, collect_pull_requests, fetch_pull_request_details
from .models import ChangelogResult
from .renderer import render_body
from .tags import locate_previous_tag


DEFAULT_BRANCH_PATTERN = "release/.+"

logger = logging.getLogger(__name__)


def compile_branch_pattern(pattern: Optional[str]) -> re.Pattern:
    """Compile the branch pattern that gates the run.

    Raises:
        InvalidPatternError: If the pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern or DEFAULT_BRANCH_PATTERN)
    except re.error as e:
        raise InvalidPatternError(f"Invalid branch_pattern regex: {pattern} ({e})") from e


def branch_matches(pattern: re.Pattern, ref: str) -> bool:
    return bool(pattern.search(ref or ""))


def resolve_to_ref(head_ref: Optional[str], head_sha: str) -> str:
    """Name shown for the head: the branch, or the short SHA without one."""
    return head_ref or head_sha[:7]


def generate_changelog(source, config: ChangelogConfig, head_sha: str, to_ref: str,
                       batch_size: int = DEFAULT_BATCH_SIZE) -> ChangelogResult:
    """Generate the changelog between the previous tag and ``head_sha``.

    The source is a platform client exposing ``list_tags``, ``compare``,
    ``pull_requests_for_commit`` and ``pull_request_detail``. Any error it
    raises aborts the run. Running out of tags, commits or merged pull
    requests is not an error and yields an empty result.

    Args:
        source: Platform client
        config: Resolved changelog configuration
        head_sha: Target commit
        to_ref: Name of the head shown in the changelog
        batch_size: Concurrent platform requests per batch

    Returns:
        Body, previous tag and number of pull requests rendered
    """
    tags = source.list_tags()
    if not tags:
        logger.info("No tags found; skipping")
        return ChangelogResult()

    located = locate_previous_tag(source, tags, head_sha)
    if not located:
        logger.info(f"No reachable tag found from head \"{head_sha}\"; skipping comparison")
        return ChangelogResult()
    prev_tag, comparison = located
    logger.info(f"Previous tag: {prev_tag}")

    if not comparison.commits:
        logger.info(f"No commits found between {prev_tag} and {head_sha}")
        return ChangelogResult(prev_tag=prev_tag)
    logger.info(f"Found {len(comparison.commits)} commits between {prev_tag} and {head_sha}")

    merged = collect_pull_requests(source, comparison.commits, batch_size, config.base_branch)
    if not merged:
        logger.info("No merged PRs found in range for default branch")
        return ChangelogResult(prev_tag=prev_tag)

    detailed = fetch_pull_request_details(source, list(merged), batch_size)
    grouped, count = group_pull_requests(detailed, config)
    body = render_body(config, grouped, prev_tag, to_ref)
    logger.info(f"Rendered {count} pull requests in {len(grouped)} categories")

    return ChangelogResult(body=body, prev_tag=prev_tag, count=count)
