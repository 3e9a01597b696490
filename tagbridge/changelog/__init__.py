"""Changelog generation module."""

from .models import (
    Author,
    ChangelogResult,
    Comment,
    Comparison,
    PullRequest,
    Tag,
)
from .tags import find_previous_tag, locate_previous_tag
from .collector import (
    DEFAULT_BATCH_SIZE,
    collect_pull_requests,
    fetch_pull_request_details,
    run_in_batches,
)
from .classifier import classify, group_by_author, group_pull_requests, pull_request_tokens
from .renderer import render_body, substitute
from .generator import (
    compile_branch_pattern,
    branch_matches,
    generate_changelog,
    resolve_to_ref,
)
from .comment import DEFAULT_MARKER, upsert_comment

__all__ = [
    "Author",
    "ChangelogResult",
    "Comment",
    "Comparison",
    "PullRequest",
    "Tag",
    "find_previous_tag",
    "locate_previous_tag",
    "DEFAULT_BATCH_SIZE",
    "collect_pull_requests",
    "fetch_pull_request_details",
    "run_in_batches",
    "classify",
    "group_by_author",
    "group_pull_requests",
    "pull_request_tokens",
    "render_body",
    "substitute",
    "compile_branch_pattern",
    "branch_matches",
    "generate_changelog",
    "resolve_to_ref",
    "DEFAULT_MARKER",
    "upsert_comment",
]
