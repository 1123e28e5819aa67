"""
Store tests: workspace persistence under the two group keys.
"""
import json
import math

from analyzer_socwatch.core.workspace import Workspace
from analyzer_socwatch.io.schema import CoreType, Group, Insights, ThreadingModel
from analyzer_socwatch.io.store import (
    ACTIVE_KEY,
    ARCHIVED_KEY,
    JsonFileStore,
    MemoryStore,
    dump_groups,
    load_groups,
    load_workspace,
    save_workspace,
)
from analyzer_socwatch.tests.conftest import make_profile


def _workspace():
    ws = Workspace()
    ws.add_profiles("SKU_A", [make_profile("A1"), make_profile("A2", e_active=())])
    ws.add_profiles("SKU_B", [make_profile("B1")])
    ws.add_profiles("SKU_C", [make_profile("C1")])
    ws.archive("SKU_B")
    return ws


class TestRoundTrip:

    def test_groups_and_order(self):
        store = MemoryStore()
        save_workspace(_workspace(), store)
        loaded = load_workspace(store)

        assert [g.name for g in loaded.active] == ["SKU_A", "SKU_C"]
        assert [g.name for g in loaded.archived] == ["SKU_B"]
        assert loaded.archived[0].archived is True
        assert [p.name for p in loaded.get_group("SKU_A").profiles] == ["A1", "A2"]

    def test_profile_content(self):
        store = MemoryStore()
        original = _workspace()
        save_workspace(original, store)
        loaded = load_workspace(store)

        a1 = loaded.get_profile("SKU_A", 0)
        assert a1.model_dump() == original.get_profile("SKU_A", 0).model_dump()
        assert a1.core_type_map[0] == CoreType.P_CORE
        assert a1.insights.threading_ratio == 1.5

    def test_nan_survives(self):
        store = MemoryStore()
        save_workspace(_workspace(), store)

        raw = json.loads(store.get(ACTIVE_KEY))
        assert raw[0]["profiles"][1]["insights"]["e_core_activity_avg"] is None

        a2 = load_workspace(store).get_profile("SKU_A", 1)
        assert math.isnan(a2.insights.e_core_activity_avg)
        assert math.isnan(a2.insights.threading_ratio)
        assert a2.insights.p_core_activity_avg == 60.0

    def test_session_state_not_saved(self):
        ws = _workspace()
        ws.toggle_comparison("SKU_A", 0)
        ws.focus("SKU_A", 0)
        store = MemoryStore()
        save_workspace(ws, store)

        assert set(store.data) == {ACTIVE_KEY, ARCHIVED_KEY}
        loaded = load_workspace(store)
        assert len(loaded.selection) == 0
        assert loaded.focused is None
        assert loaded.comparison_mode is False

    def test_infinite_values_serialise_as_null(self):
        insights = Insights(
            p_core_activity_avg=1e300,
            e_core_activity_avg=1e-300,
            p_core_freq_avg=0.0,
            e_core_freq_avg=0.0,
            threading_ratio=float("inf"),
            threading_model=ThreadingModel.P_CORE_DOMINANT,
        )
        dumped = insights.model_dump(mode="json")
        assert dumped["threading_ratio"] is None
        assert dumped["p_core_activity_avg"] == 1e300
        assert "Infinity" not in dump_groups([
            Group(name="G", profiles=[make_profile().model_copy(update={"insights": insights})]),
        ])


class TestStoredInvariants:

    def test_empty_and_duplicate_groups_dropped(self):
        rows = [
            {"name": "G", "profiles": []},
            {"name": "G", "profiles": [], "archived": True},
            json.loads(dump_groups([Group(name="H", profiles=[make_profile("h1")])]))[0],
            json.loads(dump_groups([Group(name="H", profiles=[make_profile("h2")])]))[0],
        ]
        store = MemoryStore({ACTIVE_KEY: json.dumps(rows)})
        active = load_workspace(store).active

        assert [g.name for g in active] == ["H"]
        assert all(g.profiles for g in active)
        assert [p.name for p in active[0].profiles] == ["h1"]

    def test_archived_flag_follows_key(self):
        group = Group(name="G", profiles=[make_profile()], archived=True)
        store = MemoryStore({
            ACTIVE_KEY: dump_groups([group]),
            ARCHIVED_KEY: dump_groups([Group(name="A", profiles=[make_profile()])]),
        })
        ws = load_workspace(store)
        assert ws.active[0].archived is False
        assert ws.archived[0].archived is True

    def test_loaded_groups_remove_one_at_a_time(self):
        rows = json.loads(dump_groups([
            Group(name="G", profiles=[make_profile("a")]),
            Group(name="G", profiles=[make_profile("b")]),
        ]))
        ws = load_workspace(MemoryStore({ACTIVE_KEY: json.dumps(rows)}))
        ws.remove_group("G")
        assert ws.active == ()


class TestDegradedStore:

    def test_empty_store(self):
        ws = load_workspace(MemoryStore())
        assert ws.active == ()
        assert ws.archived == ()

    def test_malformed_json(self):
        store = MemoryStore({ACTIVE_KEY: "{not json", ARCHIVED_KEY: dump_groups([])})
        assert load_workspace(store).active == ()

    def test_wrong_shape(self):
        assert load_groups(json.dumps({"name": "x"}), ACTIVE_KEY) == []
        assert load_groups(json.dumps([{"profiles": []}]), ACTIVE_KEY) == []

    def test_one_bad_key_keeps_other(self):
        store = MemoryStore()
        save_workspace(_workspace(), store)
        store.set(ARCHIVED_KEY, "garbage")
        loaded = load_workspace(store)
        assert [g.name for g in loaded.active] == ["SKU_A", "SKU_C"]
        assert loaded.archived == ()


class TestJsonFileStore:

    def test_writes_and_reads(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        store = JsonFileStore(path)
        save_workspace(_workspace(), store)

        assert path.exists()
        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert set(on_disk) == {ACTIVE_KEY, ARCHIVED_KEY}

        loaded = load_workspace(JsonFileStore(path))
        assert [g.name for g in loaded.active] == ["SKU_A", "SKU_C"]

    def test_missing_file_reads_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "absent.json")
        assert store.get(ACTIVE_KEY) is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2", encoding="utf-8")
        assert load_workspace(JsonFileStore(path)).active == ()

    def test_non_object_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[]", encoding="utf-8")
        assert JsonFileStore(path).get(ACTIVE_KEY) is None
