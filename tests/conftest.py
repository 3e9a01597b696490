from __future__ import annotations

import pytest

from tagbridge.changelog.models import PullRequest
from tests.fakes import FakeSource, make_pr


@pytest.fixture
def feature_pr() -> PullRequest:
    return make_pr(123, "feat: add feature", ["feature"], "2024-12-01T00:00:00Z", "alice",
                   head_ref="feature/new")


@pytest.fixture
def bug_pr() -> PullRequest:
    return make_pr(124, "fix: critical bug", ["bug"], "2024-12-02T00:00:00Z", "bob",
                   head_ref="bug/critical")


@pytest.fixture
def source(feature_pr: PullRequest, bug_pr: PullRequest) -> FakeSource:
    """Two tags, the newest not reachable, and two merged pull requests in range."""
    return FakeSource(
        tags=["v2.0.0", "v1.0.0"],
        statuses={"v2.0.0": "behind", "v1.0.0": "ahead"},
        commits=["c1", "c2"],
        prs_by_commit={"c1": [feature_pr], "c2": [bug_pr]},
    )
