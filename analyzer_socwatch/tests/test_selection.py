"""
Comparison selection tests.
"""
import pytest

from analyzer_socwatch.core.selection import ComparisonSelection, SelectionResult
from analyzer_socwatch.errors import SelectionCapacityExceeded
from analyzer_socwatch.tests.conftest import make_profile


def _names(selection):
    return [e.key for e in selection]


class TestToggle:

    def test_add_then_remove_restores(self):
        sel = ComparisonSelection()
        a, b = make_profile("A"), make_profile("B")
        sel.toggle(a, "G1")
        before = _names(sel)

        assert sel.toggle(b, "G1") == SelectionResult.ADDED
        assert sel.toggle(b, "G1") == SelectionResult.REMOVED
        assert _names(sel) == before

    def test_insertion_order(self):
        sel = ComparisonSelection()
        for name in ("C", "A", "B"):
            sel.toggle(make_profile(name), "G")
        assert _names(sel) == [("G", "C"), ("G", "A"), ("G", "B")]

    def test_removal_keeps_order(self):
        sel = ComparisonSelection()
        profiles = [make_profile(n) for n in ("A", "B", "C", "D")]
        for p in profiles:
            sel.toggle(p, "G")
        sel.toggle(profiles[1], "G")
        assert _names(sel) == [("G", "A"), ("G", "C"), ("G", "D")]

    def test_same_name_different_group_distinct(self):
        sel = ComparisonSelection()
        p = make_profile("Same")
        assert sel.toggle(p, "G1") == SelectionResult.ADDED
        assert sel.toggle(p, "G2") == SelectionResult.ADDED
        assert len(sel) == 2
        assert sel.contains(p, "G1")
        assert sel.contains(p, "G2")
        assert not sel.contains(p, "G3")

    def test_key_matches_by_name(self):
        sel = ComparisonSelection()
        sel.toggle(make_profile("A"), "G")
        # a re-parsed profile with the same name is the same entry
        assert sel.toggle(make_profile("A", p_active=(1.0,)), "G") == SelectionResult.REMOVED
        assert len(sel) == 0


class TestCapacity:

    def _full(self):
        sel = ComparisonSelection()
        for name in ("A", "B", "C", "D"):
            sel.toggle(make_profile(name), "G")
        return sel

    def test_fifth_rejected(self):
        sel = self._full()
        before = _names(sel)
        assert sel.is_full()
        assert sel.toggle(make_profile("E"), "G") == SelectionResult.REJECTED_CAPACITY
        assert _names(sel) == before

    def test_full_still_allows_removal(self):
        sel = self._full()
        assert sel.toggle(make_profile("B"), "G") == SelectionResult.REMOVED
        assert sel.toggle(make_profile("E"), "G") == SelectionResult.ADDED
        assert _names(sel)[-1] == ("G", "E")

    def test_require_toggle_raises(self):
        sel = self._full()
        with pytest.raises(SelectionCapacityExceeded) as exc:
            sel.require_toggle(make_profile("E"), "G")
        assert exc.value.capacity == 4
        assert str(exc.value) == (
            "Maximum 4 games can be compared at once. Please deselect a game first."
        )

    def test_custom_capacity(self):
        sel = ComparisonSelection(capacity=1)
        sel.toggle(make_profile("A"), "G")
        assert sel.toggle(make_profile("B"), "G") == SelectionResult.REJECTED_CAPACITY


class TestBulkRemoval:

    def test_remove_matching_group(self):
        sel = ComparisonSelection()
        sel.toggle(make_profile("A"), "G1")
        sel.toggle(make_profile("B"), "G2")
        sel.toggle(make_profile("C"), "G1")
        assert sel.remove_matching("G1") == 2
        assert _names(sel) == [("G2", "B")]

    def test_remove_matching_profile(self):
        sel = ComparisonSelection()
        sel.toggle(make_profile("A"), "G1")
        sel.toggle(make_profile("B"), "G1")
        assert sel.remove_matching("G1", "B") == 1
        assert _names(sel) == [("G1", "A")]

    def test_remove_matching_nothing(self):
        sel = ComparisonSelection()
        sel.toggle(make_profile("A"), "G1")
        assert sel.remove_matching("G2") == 0
        assert len(sel) == 1

    def test_clear(self):
        sel = ComparisonSelection()
        sel.toggle(make_profile("A"), "G1")
        sel.clear()
        assert len(sel) == 0
        assert sel.entries == ()
