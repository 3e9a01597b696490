"""Tests for tagbridge.changelog.renderer."""

from __future__ import annotations

from tagbridge.changelog.classifier import group_pull_requests
from tagbridge.changelog.renderer import (
    escape_cell,
    render_body,
    render_pull_request,
    sort_pull_requests,
    substitute,
)
from tagbridge.config import merge_config
from tests.fakes import make_pr


def test_substitute_supports_all_placeholder_forms() -> None:
    rendered = substitute("$TITLE ${TITLE} ${{TITLE}}", {"TITLE": "x"})

    assert rendered == "x x x"


def test_substitute_leaves_unknown_placeholders() -> None:
    assert substitute("$FOO and $TITLE", {"TITLE": "x"}) == "$FOO and x"


def test_substitute_prefers_longest_placeholder() -> None:
    rendered = substitute("$AUTHOR_URL/$AUTHOR", {"AUTHOR": "alice", "AUTHOR_URL": "https://u"})

    assert rendered == "https://u/alice"


def test_substitute_does_not_expand_substituted_text() -> None:
    rendered = substitute("$TITLE -> $TO_REF", {"TITLE": "mention $TO_REF", "TO_REF": "release/v1"})

    assert rendered == "mention $TO_REF -> release/v1"


def test_render_pull_request_default_template() -> None:
    pr = make_pr(123, "feat: add feature", ["feature"], login="alice")

    line = render_pull_request(merge_config().pr_template, pr, "Features", "v1.0.0", "release/v1")

    assert line == "- feat: add feature (#123) by @alice"


def test_render_pull_request_unknown_author() -> None:
    pr = make_pr(5, "anonymous", login=None)

    line = render_pull_request("$TITLE by $AUTHOR ($AUTHOR_URL)", pr, "Other", "v1", "main")

    assert line == "anonymous by unknown ()"


def test_sort_newest_first_with_bad_timestamps_last() -> None:
    prs = [
        make_pr(1, "old", merged_at="2024-01-01T00:00:00Z"),
        make_pr(2, "missing", merged_at=None),
        make_pr(3, "new", merged_at="2024-06-01T12:00:00+00:00"),
        make_pr(4, "garbage", merged_at="not a date"),
        make_pr(5, "naive", merged_at="2024-03-01T00:00:00"),
    ]

    ordered = [pr.number for pr in sort_pull_requests(prs)]

    assert ordered[:3] == [3, 5, 1]
    assert set(ordered[3:]) == {2, 4}
    assert ordered == [pr.number for pr in sort_pull_requests(list(reversed(prs)))]


def test_escape_cell_protects_table_separators() -> None:
    assert escape_cell("a | b\nc") == "a \\| b c"


def test_render_body_sections_in_category_order(feature_pr, bug_pr) -> None:
    config = merge_config()
    infra = make_pr(126, "ci: faster builds", ["infra"], "2024-12-03T00:00:00Z", "carol")
    grouped, _ = group_pull_requests([infra, bug_pr, feature_pr], config)

    body = render_body(config, grouped, "v1.0.0", "release/v1")

    assert body.startswith("## 🔖 Release Preview\nChanges since v1.0.0 → release/v1\n\n")
    features = body.index("### 🚀 Features\n- feat: add feature (#123) by @alice")
    fixes = body.index("### 🐛 Bug Fixes\n- fix: critical bug (#124) by @bob")
    other = body.index("### Other changes\n- ci: faster builds (#126) by @carol")
    assert features < fixes < other
    assert "### 📚 Docs" not in body


def test_render_body_orders_entries_newest_first() -> None:
    config = merge_config()
    older = make_pr(1, "feat: older", ["feature"], "2024-01-01T00:00:00Z")
    newer = make_pr(2, "feat: newer", ["feature"], "2024-02-01T00:00:00Z")
    grouped, _ = group_pull_requests([older, newer], config)

    body = render_body(config, grouped, "v1", "main")

    assert body.index("feat: newer") < body.index("feat: older")


def test_render_body_empty_grouping_uses_empty_template() -> None:
    config = merge_config({
        "template": "From $FROM_TAG to $TO_REF: $CHANGES",
        "empty_template": "nothing since $FROM_TAG",
    })

    body = render_body(config, {}, "v1.0.0", "release/v1")

    assert body == "From v1.0.0 to release/v1: nothing since v1.0.0"


def test_render_body_custom_templates(feature_pr, bug_pr) -> None:
    config = merge_config({
        "template": "Hello $FROM_TAG -> $TO_REF\n\n$CHANGES",
        "pr_template": "- [$CATEGORY] $TITLE by $AUTHOR",
        "categories": [
            {"title": "Features", "labels": ["feature"]},
            {"title": "Bug Fixes", "labels": ["bug"]},
        ],
    })
    grouped, _ = group_pull_requests([feature_pr, bug_pr], config)

    body = render_body(config, grouped, "v1.0.0", "release/v1")

    assert "Hello v1.0.0 -> release/v1" in body
    assert "- [Features] feat: add feature by alice" in body
    assert "- [Bug Fixes] fix: critical bug by bob" in body


def test_render_body_is_idempotent(feature_pr, bug_pr) -> None:
    config = merge_config()
    grouped, _ = group_pull_requests([feature_pr, bug_pr], config)

    first = render_body(config, grouped, "v1.0.0", "release/v1")
    second = render_body(config, grouped, "v1.0.0", "release/v1")

    assert first == second


def test_render_body_table_style_escapes_pipes() -> None:
    config = merge_config({"style": "table"})
    pr = make_pr(9, "feat: a | b", ["feature"], login="dana")
    grouped, _ = group_pull_requests([pr], config)

    body = render_body(config, grouped, "v1", "main")

    assert "### 🚀 Features\n| PR | Title | Author |\n| --- | --- | --- |\n" in body
    assert "| [#9](https://github.com/acme/demo/pull/9) | feat: a \\| b | @dana |" in body


def test_render_body_groups_by_author() -> None:
    config = merge_config({"group_by_author": True})
    prs = [
        make_pr(1, "feat: z", ["feature"], login="zoe"),
        make_pr(2, "fix: a", ["bug"], login="alice"),
        make_pr(3, "feat: a", ["feature"], login="alice"),
    ]
    grouped, _ = group_pull_requests(prs, config)

    body = render_body(config, grouped, "v1", "main")

    assert body.index("### @alice") < body.index("### @zoe")
    alice = body[body.index("### @alice"):body.index("### @zoe")]
    assert alice.index("#### 🚀 Features\n- feat: a (#3)") < alice.index("#### 🐛 Bug Fixes\n- fix: a (#2)")


def test_render_body_count_placeholder(feature_pr, bug_pr) -> None:
    config = merge_config({"template": "$COUNT changes\n$CHANGES"})
    grouped, _ = group_pull_requests([feature_pr, bug_pr], config)

    assert render_body(config, grouped, "v1", "main").startswith("2 changes\n")


def test_render_body_lists_each_pr_once_with_custom_fallback() -> None:
    config = merge_config({
        "categories": [{"title": "Other changes", "labels": ["misc"]}],
        "other_title": "Everything else",
    })
    prs = [make_pr(1, "tidy", ["misc"]), make_pr(2, "infra", ["infra"])]
    grouped, count = group_pull_requests(prs, config)

    body = render_body(config, grouped, "v1", "main")

    assert count == 2
    assert body.count("(#1)") == 1
    assert body.count("(#2)") == 1
    assert body.count("### Other changes") == 1
    assert "### Everything else\n- infra (#2)" in body
