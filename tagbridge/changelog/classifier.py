"""Assign pull requests to changelog categories."""

import logging
import re
from typing import Dict, FrozenSet, Iterable, List, Tuple

from ..config import Category, ChangelogConfig
from .models import PullRequest


logger = logging.getLogger(__name__)

# Conventional commit prefix, e.g. "feat(api)!: add endpoint"
TITLE_PREFIX_RE = re.compile(r'^\s*([A-Za-z][\w-]*)(?:\([^)]*\))?!?:')

Grouping = Dict[str, List[PullRequest]]
AuthorGrouping = Dict[str, Grouping]


def pull_request_tokens(pr: PullRequest, title_heuristics: bool = True) -> FrozenSet[str]:
    """Lowercase tokens used to match a pull request against categories.

    Labels win. Without labels the conventional-commit type of the title and
    the first segment of the head branch are used instead.
    """
    labels = frozenset(label.lower() for label in pr.labels if label)
    if labels or not title_heuristics:
        return labels

    tokens = set()
    match = TITLE_PREFIX_RE.match(pr.title or "")
    if match:
        tokens.add(match.group(1).lower())
    if pr.head_ref and "/" in pr.head_ref:
        tokens.add(pr.head_ref.split("/", 1)[0].lower())
    return frozenset(tokens)


def is_ignored(tokens: FrozenSet[str], ignore_labels: FrozenSet[str]) -> bool:
    return not tokens.isdisjoint(ignore_labels)


def classify(tokens: FrozenSet[str], config: ChangelogConfig) -> Category:
    """Return the first configured category matching ``tokens``, else Other."""
    for category in config.categories:
        if category.matches(tokens):
            return category
    return config.other_category


def group_pull_requests(prs: Iterable[PullRequest],
                        config: ChangelogConfig) -> Tuple[Grouping, int]:
    """Group pull requests by category title.

    Ignored pull requests are dropped. Categories appear in configured order
    with Other last; empty categories are not present.

    Returns:
        Tuple of (grouping, number of pull requests grouped)
    """
    buckets: Grouping = {category.title: [] for category in config.ordered_categories}
    count = 0

    for pr in prs:
        tokens = pull_request_tokens(pr, config.title_heuristics)
        if is_ignored(tokens, config.ignore_labels):
            logger.info(f"Ignoring PR #{pr.number} ({', '.join(sorted(tokens))})")
            continue
        category = classify(tokens, config)
        buckets[category.title].append(pr)
        count += 1

    grouped = {title: members for title, members in buckets.items() if members}
    return grouped, count


def group_by_author(grouped: Grouping) -> AuthorGrouping:
    """Nest a category grouping under author logins.

    Logins sort ascending ignoring case, exact spelling breaking ties.
    """
    by_author: AuthorGrouping = {}
    for title, members in grouped.items():
        for pr in members:
            by_author.setdefault(pr.author_login, {}).setdefault(title, []).append(pr)
    return {login: by_author[login] for login in sorted(by_author, key=lambda l: (l.lower(), l))}
