"""Tests for tagbridge.changelog.tags."""

from __future__ import annotations

from tagbridge.changelog.tags import find_previous_tag, locate_previous_tag
from tests.fakes import FakeSource


def test_find_previous_tag_skips_tags_ahead_of_head(source: FakeSource) -> None:
    assert find_previous_tag(source, source.tags, "abc1234") == "v1.0.0"


def test_find_previous_tag_stops_at_first_reachable_tag() -> None:
    source = FakeSource(
        tags=["v3.0.0", "v2.0.0", "v1.0.0"],
        statuses={"v3.0.0": "behind", "v2.0.0": "ahead", "v1.0.0": "ahead"},
    )

    assert find_previous_tag(source, source.tags, "head") == "v2.0.0"
    assert [call[1] for call in source.calls_to("compare")] == ["v3.0.0", "v2.0.0"]


def test_find_previous_tag_accepts_identical_commit() -> None:
    source = FakeSource(tags=["v1.1.0"], statuses={"v1.1.0": "identical"})

    assert find_previous_tag(source, source.tags, "head") == "v1.1.0"


def test_find_previous_tag_list_order_beats_graph_distance() -> None:
    # v1.0.0 is listed first, so it wins even though v1.5.0 would be closer
    source = FakeSource(tags=["v1.0.0", "v1.5.0"], statuses={"v1.0.0": "ahead", "v1.5.0": "ahead"})

    assert find_previous_tag(source, source.tags, "head") == "v1.0.0"


def test_find_previous_tag_returns_none_when_nothing_reachable() -> None:
    source = FakeSource(tags=["v2.0.0", "v1.0.0"], statuses={"v2.0.0": "behind", "v1.0.0": "diverged"})

    assert find_previous_tag(source, source.tags, "head") is None


def test_find_previous_tag_without_tags_makes_no_calls() -> None:
    source = FakeSource()

    assert find_previous_tag(source, [], "head") is None
    assert source.calls == []


def test_locate_previous_tag_returns_winning_comparison() -> None:
    source = FakeSource(tags=["v2.0.0", "v1.0.0"], statuses={"v2.0.0": "behind"}, commits=["c1", "c2"])

    name, comparison = locate_previous_tag(source, source.tags, "head")

    assert name == "v1.0.0"
    assert comparison.commits == ["c1", "c2"]


def test_locate_previous_tag_none_when_unreachable() -> None:
    source = FakeSource(tags=["v1.0.0"], statuses={"v1.0.0": "diverged"})

    assert locate_previous_tag(source, source.tags, "head") is None
