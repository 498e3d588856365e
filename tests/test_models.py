"""Tests for the finding data model."""

import pytest

from farmcheck.errors import ValidationError
from farmcheck.models import DisplayFormat, Finding, Severity, escalate


class TestSeverity:
    def test_ordering(self):
        assert Severity.DEFAULT < Severity.INFORMATIONAL < Severity.WARNING < Severity.CRITICAL

    def test_rank_keeps_gaps(self):
        assert [s.rank for s in Severity] == [0, 1, 2, 4]

    def test_parse_is_case_insensitive(self):
        assert Severity.parse("critical") is Severity.CRITICAL
        assert Severity.parse(" Warning ") is Severity.WARNING
        assert Severity.parse(Severity.DEFAULT) is Severity.DEFAULT

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown severity"):
            Severity.parse("Severe")

    def test_escalate_returns_higher(self):
        assert escalate(Severity.WARNING, Severity.INFORMATIONAL) is Severity.WARNING
        assert escalate(Severity.INFORMATIONAL, Severity.CRITICAL) is Severity.CRITICAL
        assert escalate(Severity.DEFAULT, Severity.DEFAULT) is Severity.DEFAULT


class TestDisplayFormat:
    def test_parse(self):
        assert DisplayFormat.parse("list") is DisplayFormat.LIST
        assert DisplayFormat.parse(DisplayFormat.TABLE) is DisplayFormat.TABLE

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            DisplayFormat.parse("Grid")


class TestSeverityEscalation:
    def test_lower_assignment_is_ignored(self):
        f = Finding("Disk space", severity=Severity.WARNING)
        f.severity = Severity.INFORMATIONAL
        assert f.severity == Severity.WARNING

    def test_result_is_max_of_all_assignments(self):
        sequence = [Severity.INFORMATIONAL, Severity.CRITICAL, Severity.DEFAULT, Severity.WARNING]
        f = Finding("Certificates")
        for sev in sequence:
            f.severity = sev
        assert f.severity == max([Severity.DEFAULT] + sequence)
        assert f.severity == Severity.CRITICAL

    def test_string_assignment(self):
        f = Finding("Search")
        f.severity = "Warning"
        assert f.severity == Severity.WARNING

    def test_add_warning_escalates(self):
        f = Finding("Usage analytics")
        f.add_warning("Analytics folder is not shared", Severity.WARNING)
        assert f.warning_messages == ["Analytics folder is not shared"]
        assert f.severity == Severity.WARNING

    def test_add_warning_without_severity_keeps_level(self):
        f = Finding("Usage analytics")
        f.add_warning("Minor note")
        assert f.severity == Severity.DEFAULT


class TestChildren:
    def test_append_none_is_ignored(self):
        f = Finding("Farm")
        f.children.append(None)
        f.add_child(None)
        assert len(f.children) == 0

    def test_extend_and_insert_skip_none(self):
        f = Finding("Farm")
        a, b = Finding("A"), Finding("B")
        f.children.extend([a, None, b])
        f.children.insert(0, None)
        assert list(f.children) == [a, b]

    def test_constructor_drops_none(self):
        a = Finding("A")
        f = Finding("Farm", children=[None, a, None])
        assert list(f.children) == [a]
        assert a.parent is f

    def test_child_cannot_have_two_parents(self):
        child = Finding("Services")
        Finding("Server 1", children=[child])
        with pytest.raises(ValidationError, match="already belongs to 'Server 1'"):
            Finding("Server 2").add_child(child)

    def test_finding_cannot_contain_itself(self):
        f = Finding("Loop")
        with pytest.raises(ValidationError):
            f.add_child(f)

    def test_ancestor_cannot_become_child(self):
        root = Finding("Root")
        mid = Finding("Mid")
        leaf = Finding("Leaf")
        root.add_child(mid)
        mid.add_child(leaf)
        with pytest.raises(ValidationError):
            leaf.add_child(root)

    def test_non_finding_child_rejected(self):
        with pytest.raises(ValidationError, match="must be findings"):
            Finding("Farm").add_child("not a finding")

    def test_index_assignment_of_none_is_ignored(self):
        a = Finding("A")
        f = Finding("Farm", children=[a])
        f.children[0] = None
        assert list(f.children) == [a]
        assert a.parent is f

    def test_index_assignment_respects_ownership(self):
        shared = Finding("Shared")
        first = Finding("First", children=[shared])
        second = Finding("Second", children=[Finding("Other")])
        with pytest.raises(ValidationError, match="already belongs to 'First'"):
            second.children[0] = shared
        assert shared.parent is first
        assert [c.name for c in second.children] == ["Other"]

    def test_index_assignment_swaps_ownership(self):
        old, new = Finding("Old"), Finding("New")
        f = Finding("Farm", children=[old])
        f.children[0] = new
        assert list(f.children) == [new]
        assert new.parent is f
        assert old.parent is None

    def test_slice_assignment_rejected(self):
        f = Finding("Farm", children=[Finding("A")])
        with pytest.raises(ValidationError, match="Slice assignment"):
            f.children[:] = [Finding("B")]
        assert [c.name for c in f.children] == ["A"]

    def test_repeat_rejected(self):
        f = Finding("Farm", children=[Finding("A")])
        with pytest.raises(ValidationError):
            f.children *= 2

    def test_removed_children_can_be_reattached(self):
        a, b, c, d = Finding("A"), Finding("B"), Finding("C"), Finding("D")
        f = Finding("Farm", children=[a, b, c, d])
        assert f.children.pop() is d
        f.children.remove(c)
        del f.children[1]
        f.children.clear()
        assert len(f.children) == 0
        for child in (a, b, c, d):
            assert child.parent is None
        other = Finding("Other", children=[a, b, c, d])
        assert [x.parent for x in (a, b, c, d)] == [other] * 4

    def test_slice_delete_releases(self):
        a, b = Finding("A"), Finding("B")
        f = Finding("Farm", children=[a, b])
        del f.children[:]
        assert a.parent is None
        assert b.parent is None

    def test_duplicate_in_constructor_adopts_nothing(self):
        x = Finding("X")
        with pytest.raises(ValidationError, match="appears twice"):
            Finding("Farm", children=[x, x])
        assert x.parent is None
        Finding("Elsewhere").add_child(x)

    def test_failed_extend_adopts_nothing(self):
        a = Finding("A")
        owned = Finding("Owned")
        Finding("Owner", children=[owned])
        f = Finding("Farm")
        with pytest.raises(ValidationError):
            f.children.extend([a, owned])
        assert a.parent is None
        assert len(f.children) == 0


class TestFinding:
    def test_defaults(self):
        f = Finding("Topology")
        assert f.severity == Severity.DEFAULT
        assert f.description == []
        assert f.warning_messages == []
        assert f.reference_links == []
        assert f.payload is None
        assert f.format == DisplayFormat.TABLE
        assert f.expand is False
        assert f.parent is None

    def test_append_helpers(self):
        f = Finding("Topology")
        f.add_description("Three servers.")
        f.add_reference("https://example.com/kb/1")
        assert f.description == ["Three servers."]
        assert f.reference_links == ["https://example.com/kb/1"]

    def test_walk_is_preorder(self):
        c = Finding("C")
        b = Finding("B", children=[c])
        d = Finding("D")
        a = Finding("A", children=[b, d])
        assert [n.name for n in a.walk()] == ["A", "B", "C", "D"]

    def test_to_dict(self):
        child = Finding("Child", severity=Severity.INFORMATIONAL)
        f = Finding(
            "Parent",
            severity=Severity.WARNING,
            warning_messages=["check"],
            payload={"Servers": 3},
            format=DisplayFormat.LIST,
            children=[child],
        )
        data = f.to_dict()
        assert data["name"] == "Parent"
        assert data["severity"] == "Warning"
        assert data["format"] == "List"
        assert data["payload"] == {"Servers": 3}
        assert data["children"][0]["severity"] == "Informational"

    def test_to_dict_with_object_payload(self):
        class Server:
            def __init__(self):
                self.name = "APP01"
                self.role = "Application"

        data = Finding("Server", payload=Server(), format=DisplayFormat.LIST).to_dict()
        assert data["payload"] == {"name": "APP01", "role": "Application"}
