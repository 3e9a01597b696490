"""Collect the merged pull requests behind a range of commits."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, TypeVar

from .models import PullRequest


T = TypeVar("T")
R = TypeVar("R")

# Requests in flight at once against the platform
DEFAULT_BATCH_SIZE = 5

logger = logging.getLogger(__name__)


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def run_in_batches(func: Callable[[T], R], items: Iterable[T],
                   batch_size: int = DEFAULT_BATCH_SIZE) -> List[R]:
    """Apply ``func`` to every item with at most ``batch_size`` calls in flight.

    Items of a batch run concurrently; the next batch starts only after the
    whole batch finished. Results come back in input order. The first
    exception raised by ``func`` propagates and no further batch is started.

    Args:
        func: Function to call for each item
        items: Items to process
        batch_size: Number of concurrent calls per batch

    Returns:
        List of results in input order
    """
    items = list(items)
    results: List[R] = []
    if not items:
        return results

    with ThreadPoolExecutor(max_workers=min(batch_size, len(items))) as executor:
        for batch in batched(items, batch_size):
            futures = [executor.submit(func, item) for item in batch]
            for future in futures:
                results.append(future.result())
    return results


def collect_pull_requests(source, commit_shas: Sequence[str],
                          batch_size: int = DEFAULT_BATCH_SIZE,
                          base_branch: Optional[str] = None) -> Dict[int, PullRequest]:
    """Resolve the merged pull requests associated with a range of commits.

    Args:
        source: Platform client providing ``pull_requests_for_commit(sha)``
        commit_shas: Commits in the range
        batch_size: Concurrent lookups per batch
        base_branch: Only keep pull requests merged into this branch

    Returns:
        Pull requests keyed by number, one entry per pull request
    """
    prs: Dict[int, PullRequest] = {}
    associations = run_in_batches(source.pull_requests_for_commit, commit_shas, batch_size)

    for sha, associated in zip(commit_shas, associations):
        for pr in associated:
            if not pr.is_merged:
                logger.debug(f"Skipping unmerged PR #{pr.number} from {sha}")
                continue
            if base_branch and pr.base_ref != base_branch:
                logger.debug(f"Skipping PR #{pr.number} merged into {pr.base_ref}")
                continue
            prs[pr.number] = pr

    return prs


def fetch_pull_request_details(source, numbers: Sequence[int],
                               batch_size: int = DEFAULT_BATCH_SIZE) -> List[PullRequest]:
    """Fetch full pull request records, preserving the order of ``numbers``."""
    return run_in_batches(source.pull_request_detail, numbers, batch_size)
