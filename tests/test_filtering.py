"""Tests for severity-based collection."""

import logging

from farmcheck.factory import create_finding
from farmcheck.filtering import collect_by_severity, count_by_severity
from farmcheck.models import Finding, Severity


def _critical(name):
    return create_finding(name, severity=Severity.CRITICAL, warning_messages=[f"{name} is broken"])


def _chain(depth, leaf):
    """Wrap ``leaf`` in ``depth`` plain parents and return the outermost node."""
    node = leaf
    for i in range(depth):
        node = create_finding(f"level-{depth - i - 1}", children=[node])
    return node


class TestCollectBySeverity:
    def test_finds_all_depths_in_preorder(self):
        deep = _critical("depth-5")
        mid = _critical("depth-2")
        mid_parent = create_finding("depth-1", children=[mid])
        root = _critical("depth-0")
        root.add_child(mid_parent)
        root.add_child(_chain(4, deep))

        matches = collect_by_severity([root], Severity.CRITICAL)
        assert len(matches) == 3
        assert matches[0] is root
        assert matches[1] is mid
        assert matches[2] is deep

    def test_does_not_prune_at_non_matching_ancestor(self):
        child = _critical("child")
        parent = create_finding(
            "parent", severity=Severity.WARNING, warning_messages=["w"], children=[child]
        )
        assert collect_by_severity([parent], Severity.WARNING) == [parent]
        assert collect_by_severity([parent], Severity.CRITICAL) == [child]

    def test_exact_match_only(self):
        root = _critical("root")
        root.add_child(create_finding("warn", severity=Severity.WARNING, warning_messages=["w"]))
        matches = collect_by_severity([root], Severity.WARNING)
        assert [m.name for m in matches] == ["warn"]

    def test_matching_node_and_descendants_all_returned(self):
        grandchild = _critical("grandchild")
        child = _critical("child")
        child.add_child(grandchild)
        root = _critical("root")
        root.add_child(child)
        assert collect_by_severity([root], Severity.CRITICAL) == [root, child, grandchild]

    def test_forest_order_and_none_roots(self):
        a, b = _critical("a"), _critical("b")
        matches = collect_by_severity([None, a, None, b], Severity.CRITICAL)
        assert matches == [a, b]

    def test_empty_forest(self):
        assert collect_by_severity([], Severity.CRITICAL) == []

    def test_malformed_branch_is_contained(self, caplog):
        good = _critical("good")
        with caplog.at_level(logging.WARNING, logger="farmcheck.filtering"):
            matches = collect_by_severity([object(), good], Severity.CRITICAL)
        assert matches == [good]
        assert "malformed branch" in caplog.text

    def test_escalated_severity_is_seen(self):
        f = Finding("Certificates")
        f.add_warning("expires tomorrow", Severity.CRITICAL)
        assert collect_by_severity([f], Severity.CRITICAL) == [f]


class TestCountBySeverity:
    def test_counts_every_depth(self, farm_tree):
        counts = count_by_severity(farm_tree)
        assert counts[Severity.CRITICAL] == 1
        assert counts[Severity.WARNING] == 1
        assert counts[Severity.DEFAULT] == 3
        assert counts[Severity.INFORMATIONAL] == 0

    def test_malformed_root_is_contained(self, caplog):
        good = _critical("good")
        with caplog.at_level(logging.WARNING, logger="farmcheck.filtering"):
            counts = count_by_severity([object(), None, good])
        assert counts[Severity.CRITICAL] == 1
        assert sum(counts.values()) == 1
        assert "malformed branch while counting" in caplog.text
