"""
Tests del CompareStore.
"""

import json

from vitrina.compare import CompareStore, JsonFileStorage, MemoryStorage, STORAGE_KEY


class TestSelection:
    def test_starts_empty(self, store):
        assert store.ids == ()
        assert not store.is_full

    def test_add_preserves_insertion_order(self, store):
        assert store.add("property-2") == "added"
        assert store.add("property-1") == "added"
        assert store.ids == ("property-2", "property-1")

    def test_add_existing_is_idempotent(self, store):
        store.add("property-1")
        assert store.add("property-1") == "added"
        assert store.ids == ("property-1",)

    def test_limit_reached_leaves_set_unchanged(self, store):
        store.add("A")
        store.add("B")
        assert store.add("C") == "limit_reached"
        assert store.ids == ("A", "B")
        assert store.is_full

    def test_adding_present_id_when_full_is_not_a_limit(self, store):
        store.add("A")
        store.add("B")
        assert store.add("B") == "added"

    def test_add_remove_sequence(self):
        store = CompareStore(max_items=3)
        store.add("a")
        store.add("b")
        store.remove("a")
        store.add("c")
        store.add("b")
        store.add("d")
        assert store.ids == ("b", "c", "d")

    def test_remove_unknown_is_noop(self, store):
        store.add("A")
        store.remove("Z")
        assert store.ids == ("A",)

    def test_blank_ids_are_ignored(self, store):
        store.add("  ")
        store.add(None)
        assert store.ids == ()
        assert not store.is_selected("")

    def test_ids_are_stripped(self, store):
        store.add(" A ")
        assert store.is_selected("A")
        assert "A" in store

    def test_clear(self, store):
        store.add("A")
        store.add("B")
        store.clear()
        assert store.ids == ()


class TestReplace:
    def test_replace_keeps_position(self, store):
        store.add("A")
        store.add("B")
        store.replace("A", "C")
        assert store.ids == ("C", "B")

    def test_replace_missing_old_is_noop(self, store):
        store.add("A")
        store.replace("Z", "C")
        assert store.ids == ("A",)

    def test_replace_with_selected_id_is_noop(self, store):
        store.add("A")
        store.add("B")
        store.replace("A", "B")
        assert store.ids == ("A", "B")

    def test_replace_oldest(self, store):
        store.add("property-1")
        store.add("property-2")
        store.replace_oldest("property-3")
        assert store.ids == ("property-2", "property-3")

    def test_replace_oldest_with_selected_id_is_noop(self, store):
        store.add("property-1")
        store.add("property-2")
        store.replace_oldest("property-2")
        assert store.ids == ("property-1", "property-2")


class TestSubscriptions:
    def test_listener_receives_each_effective_mutation(self, store):
        seen = []
        store.subscribe(seen.append)

        store.add("A")
        store.add("A")
        store.remove("Z")
        store.add("B")
        store.clear()

        assert seen == [("A",), ("A", "B"), ()]

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.add("A")
        assert seen == []

    def test_failing_listener_does_not_break_mutation(self, store):
        def broken(ids):
            raise RuntimeError("boom")

        seen = []
        store.subscribe(broken)
        store.subscribe(seen.append)

        store.add("A")

        assert store.ids == ("A",)
        assert seen == [("A",)]


class TestPersistence:
    def test_mutations_are_saved_under_namespace(self, storage, store):
        store.add("property-1")
        assert storage.load(STORAGE_KEY) == ["property-1"]

    def test_restores_previous_selection(self):
        storage = MemoryStorage({STORAGE_KEY: ["A", "B"]})
        store = CompareStore(max_items=2, storage=storage)
        assert store.ids == ("A", "B")

    def test_restored_selection_is_deduplicated_and_capped(self):
        storage = MemoryStorage({STORAGE_KEY: ["A", "A", "B", "C"]})
        store = CompareStore(max_items=2, storage=storage)
        assert store.ids == ("A", "B")

    def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")

        store = CompareStore(storage=JsonFileStorage(path))
        assert store.ids == ()

        store.add("A")
        assert json.loads(path.read_text(encoding="utf-8")) == {STORAGE_KEY: ["A"]}

    def test_survives_reload_from_file(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        first = CompareStore(storage=JsonFileStorage(path))
        first.add("A")
        first.add("B")

        second = CompareStore(storage=JsonFileStorage(path))
        assert second.ids == ("A", "B")

    def test_other_keys_are_preserved(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"recent_searches": ["x"]}), encoding="utf-8")

        CompareStore(storage=JsonFileStorage(path)).add("A")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"recent_searches": ["x"], STORAGE_KEY: ["A"]}

    def test_save_failure_is_not_raised(self):
        class ReadOnlyStorage(MemoryStorage):
            def save(self, key, ids):
                raise OSError("read-only")

        store = CompareStore(storage=ReadOnlyStorage())
        store.add("A")
        assert store.ids == ("A",)
