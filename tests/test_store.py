"""Tests for the JSON activity log store."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from activity_tracker.config import get_messages
from activity_tracker.models import ActivityRecord
from activity_tracker.store import (
    CSV_HEADER,
    DELETE_ALL_PROMPT,
    DELETE_ONE_PROMPT,
    ActivityLogStore,
)


def make_record(activity_id: str, **overrides) -> ActivityRecord:
    fields = {
        "id": activity_id,
        "start_time": "2025-01-01T00:00:00Z",
        "end_time": "2025-01-01T01:00:00Z",
        "duration": 3600,
        "description": f"Task {activity_id}",
    }
    fields.update(overrides)
    return ActivityRecord(**fields)


def confirming(answer: bool, prompts: list):
    def _confirm(message: str) -> bool:
        prompts.append(message)
        return answer

    return _confirm


class TestList:
    def test_missing_file_is_empty(self, store):
        assert store.list() == []

    @pytest.mark.parametrize(
        "content",
        ["", "   \n", "{not json", "[]", '{"activities": {}}', '{"other": []}', "null"],
    )
    def test_unusable_content_is_empty(self, store, log_path, content):
        log_path.parent.mkdir(parents=True)
        log_path.write_text(content, encoding="utf-8")
        assert store.list() == []

    def test_non_object_entries_are_skipped(self, store, log_path):
        log_path.parent.mkdir(parents=True)
        log_path.write_text(
            json.dumps({"activities": [1, "x", {"id": "a", "duration": 5}]}),
            encoding="utf-8",
        )
        assert [record.id for record in store.list()] == ["a"]


class TestAppend:
    def test_append_then_list_returns_record_last(self, store):
        store.append(make_record("1"))
        before = len(store.list())
        record = make_record("2", files_modified=["src/app.py"], include_files=True)
        store.append(record)
        activities = store.list()
        assert len(activities) == before + 1
        assert activities[-1] == record

    def test_append_creates_directory_and_document(self, store, log_path):
        store.append(make_record("1"))
        document = json.loads(log_path.read_text(encoding="utf-8"))
        assert document == {
            "activities": [
                {
                    "id": "1",
                    "startTime": "2025-01-01T00:00:00Z",
                    "endTime": "2025-01-01T01:00:00Z",
                    "duration": 3600,
                    "description": "Task 1",
                    "filesModified": [],
                    "includeFiles": False,
                }
            ]
        }

    def test_append_over_corrupted_file_starts_fresh(self, store, log_path):
        log_path.parent.mkdir(parents=True)
        log_path.write_text("garbage", encoding="utf-8")
        store.append(make_record("1"))
        assert [record.id for record in store.list()] == ["1"]

    def test_write_errors_propagate(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = ActivityLogStore(blocker / "activity-log.json")
        with pytest.raises(OSError):
            store.append(make_record("1"))


class TestUpdate:
    def test_update_replaces_record_wholesale(self, store):
        store.append(make_record("1", tags=["old"]))
        store.append(make_record("2"))
        replacement = make_record("1", description="Rewritten", duration=10)
        assert store.update(replacement) is True
        assert store.list() == [replacement, make_record("2")]

    def test_update_unknown_id_leaves_store_unchanged(self, store, log_path):
        store.append(make_record("1"))
        before = log_path.read_text(encoding="utf-8")
        assert store.update(make_record("missing")) is False
        assert log_path.read_text(encoding="utf-8") == before
        assert store.list() == [make_record("1")]


class TestRemove:
    def test_declined_remove_leaves_store_untouched(self, store):
        prompts: list = []
        store.append(make_record("1"))
        store.confirm = confirming(False, prompts)
        assert store.remove("1") is False
        assert prompts == [DELETE_ONE_PROMPT]
        assert store.list() == [make_record("1")]

    def test_confirmed_remove_deletes_only_matching_id(self, store):
        for activity_id in ("1", "2", "3"):
            store.append(make_record(activity_id))
        store.confirm = confirming(True, [])
        assert store.remove("2") is True
        assert [record.id for record in store.list()] == ["1", "3"]

    def test_default_confirmation_declines(self, store):
        store.append(make_record("1"))
        assert store.remove("1") is False
        assert store.remove_all() is False
        assert len(store.list()) == 1

    def test_declined_remove_all_leaves_store_untouched(self, store):
        prompts: list = []
        store.append(make_record("1"))
        store.confirm = confirming(False, prompts)
        assert store.remove_all() is False
        assert prompts == [DELETE_ALL_PROMPT]
        assert len(store.list()) == 1

    def test_confirmed_remove_all_empties_store(self, store, log_path):
        store.append(make_record("1"))
        store.append(make_record("2"))
        store.confirm = confirming(True, [])
        assert store.remove_all() is True
        assert store.list() == []
        assert json.loads(log_path.read_text(encoding="utf-8")) == {"activities": []}


class TestExport:
    def test_export_writes_header_and_quoted_rows(self, store, tmp_path):
        messages: list = []
        store.notify = messages.append
        store.append(
            ActivityRecord(
                id="1",
                start_time="2025-01-01T00:00:00Z",
                end_time="2025-01-01T01:00:00Z",
                duration=3600,
                description="Build",
            )
        )
        path = store.export_csv()
        assert path == tmp_path / "activity-log.csv"
        assert path.read_text(encoding="utf-8") == (
            CSV_HEADER
            + "\n"
            + '1,"2025-01-01T00:00:00Z","2025-01-01T01:00:00Z",3600,"Build",""'
        )
        assert messages == [f"Activities exported to {path}"]

    def test_export_joins_files_and_keeps_fractional_durations(self, store):
        store.append(make_record("1", duration=12.5, files_modified=["a.py", "b/c.py"]))
        lines = store.export_csv().read_text(encoding="utf-8").splitlines()
        assert lines[1].endswith(',12.5,"Task 1","a.py;b/c.py"')

    def test_export_of_empty_log_only_notifies(self, store):
        messages: list = []
        store.notify = messages.append
        assert store.export_csv() is None
        assert messages == ["No activities to export."]
        assert not store.export_path.exists()


class TestTags:
    def test_add_tag_then_filter(self, store):
        store.append(make_record("1"))
        store.append(make_record("2"))
        assert store.add_tag("1", "urgent") is True
        assert [record.id for record in store.filter_by_tag("urgent")] == ["1"]
        assert store.filter_by_tag("missing") == []

    def test_add_tag_to_unknown_id_is_noop(self, store, log_path):
        store.append(make_record("1"))
        before = log_path.read_text(encoding="utf-8")
        assert store.add_tag("nope", "urgent") is False
        assert log_path.read_text(encoding="utf-8") == before

    def test_duplicate_tags_are_kept(self, store):
        store.append(make_record("1"))
        store.add_tag("1", "x")
        store.add_tag("1", "x")
        assert store.get("1").tags == ["x", "x"]

    def test_filter_is_exact_and_preserves_order(self, store):
        for activity_id, tags in (("1", ["x"]), ("2", ["X"]), ("3", ["xy"]), ("4", ["a", "x"])):
            store.append(make_record(activity_id, tags=tags))
        store.append(make_record("5"))
        assert [record.id for record in store.filter_by_tag("x")] == ["1", "4"]


def test_default_export_path_is_sibling_csv(tmp_path):
    store = ActivityLogStore(tmp_path / "log.json")
    assert store.export_path == tmp_path / "log.csv"


class TestStoredShape:
    @pytest.mark.parametrize("description", ["", None])
    def test_blank_description_round_trips(self, store, description):
        record = make_record("1", description=description)
        store.append(record)
        assert store.list()[-1] == record

    def test_missing_description_stays_missing(self, store, log_path):
        store.append(make_record("1", description=None))
        entry = json.loads(log_path.read_text(encoding="utf-8"))["activities"][0]
        assert "description" not in entry

    def test_other_entries_survive_rewrites(self, store, log_path):
        foreign = {"id": 7, "duration": -5, "project": "x", "description": "Legacy"}
        log_path.parent.mkdir(parents=True)
        log_path.write_text(
            json.dumps({"activities": [foreign, {"id": "1", "note": "keep"}]}),
            encoding="utf-8",
        )
        store.append(make_record("2"))
        store.add_tag("1", "urgent")
        store.update(make_record("2", description="Rewritten"))
        entries = json.loads(log_path.read_text(encoding="utf-8"))["activities"]
        assert entries[0] == foreign
        assert entries[1] == {"id": "1", "note": "keep", "tags": ["urgent"]}
        assert entries[2]["description"] == "Rewritten"

    def test_update_keeps_unmodelled_keys_of_target(self, store, log_path):
        log_path.parent.mkdir(parents=True)
        log_path.write_text(
            json.dumps({"activities": [{"id": "1", "project": "x", "tags": ["old"]}]}),
            encoding="utf-8",
        )
        replacement = make_record("1", duration=10)
        assert store.update(replacement) is True
        entry = json.loads(log_path.read_text(encoding="utf-8"))["activities"][0]
        assert entry["project"] == "x"
        assert "tags" not in entry
        assert store.list() == [replacement]

    def test_numeric_ids_are_addressable(self, store, log_path):
        log_path.parent.mkdir(parents=True)
        log_path.write_text(json.dumps({"activities": [{"id": 7}]}), encoding="utf-8")
        store.confirm = confirming(True, [])
        assert store.get("7") is not None
        assert store.remove("7") is True
        assert store.list() == []


def test_concurrent_appends_are_all_kept(store):
    count = 25
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda index: store.append(make_record(str(index))), range(count)))
    activities = store.list()
    assert len(activities) == count
    assert sorted(int(record.id) for record in activities) == list(range(count))


def test_prompts_and_notices_follow_message_table(tmp_path):
    prompts: list = []
    notices: list = []
    store = ActivityLogStore(
        tmp_path / "log.json",
        confirm=confirming(False, prompts),
        notify=notices.append,
        messages=get_messages("es"),
    )
    store.append(make_record("1"))
    store.remove("1")
    store.remove_all()
    assert prompts == [get_messages("es")["delete_one"], get_messages("es")["delete_all"]]
    empty = ActivityLogStore(
        tmp_path / "empty.json", notify=notices.append, messages=get_messages("es")
    )
    assert empty.export_csv() is None
    assert notices == ["No hay actividades para exportar."]
