import datetime

import pytest
from peewee import OperationalError

from worktimer.data.database import EntryStore, create_database, open_store
from worktimer.utils.errors import ConflictError, StoreError

from .conftest import T0


def test_ensure_employee_is_idempotent(store):
    store.ensure_employee("E1")
    store.ensure_employee("E1")

    Employee = store.Employee
    assert Employee.select().where(Employee.employee_id == "E1").count() == 1
    assert Employee.select().where(Employee.employee_id == "E2").count() == 0


def test_insert_and_count_running(store):
    store.ensure_employee("E1")
    assert store.count_running("E1") == 0

    entry = store.insert_running_entry("E1", T0)

    assert store.count_running("E1") == 1
    assert entry.is_running
    assert entry.end_time is None
    assert entry.duration is None
    assert entry.start_time == T0


def test_partial_index_rejects_second_running_entry(store):
    store.ensure_employee("E1")
    store.insert_running_entry("E1", T0)

    with pytest.raises(ConflictError):
        store.insert_running_entry("E1", T0 + datetime.timedelta(minutes=1))

    assert store.count_running("E1") == 1


def test_partial_index_allows_many_stopped_entries(store):
    store.ensure_employee("E1")
    for hour in range(3):
        start = T0 + datetime.timedelta(hours=hour)
        store.insert_running_entry("E1", start)
        assert store.close_running_entry("E1", start + datetime.timedelta(minutes=30)) == 1

    assert len(store.list_entries("E1")) == 3
    assert store.count_running("E1") == 0


def test_start_entry_raises_conflict_without_inserting(store):
    store.start_entry("E1", T0)

    with pytest.raises(ConflictError):
        store.start_entry("E1", T0 + datetime.timedelta(seconds=5))

    assert store.TimerEntryRecord.select().count() == 1


def test_close_running_entry_is_conditional(store):
    store.start_entry("E1", T0)
    end = T0 + datetime.timedelta(hours=1)

    assert store.close_running_entry("E1", end) == 1
    assert store.close_running_entry("E1", end + datetime.timedelta(hours=1)) == 0

    [entry] = store.list_entries("E1")
    assert entry.end_time == end


def test_close_running_entry_by_id_ignores_other_entries(store):
    first = store.start_entry("E1", T0)
    store.close_running_entry("E1", T0 + datetime.timedelta(minutes=10))
    store.start_entry("E1", T0 + datetime.timedelta(minutes=20))

    assert store.close_running_entry("E1", T0 + datetime.timedelta(minutes=30),
                                     entry_id=first.id) == 0
    assert store.count_running("E1") == 1


def test_list_entries_keeps_end_time_optional(store):
    store.start_entry("E1", T0)
    store.close_running_entry("E1", T0 + datetime.timedelta(hours=1))
    store.start_entry("E1", T0 + datetime.timedelta(hours=2))

    running, stopped = store.list_entries("E1")

    assert running.is_running and running.end_time is None and running.duration is None
    assert not stopped.is_running
    assert stopped.duration == datetime.timedelta(hours=1)


def test_list_entries_unknown_employee_is_empty(store):
    assert store.list_entries("nobody") == []


def test_get_running_entry(store):
    created = store.start_entry("E1", T0)

    assert store.get_running_entry("E1") == created
    assert store.get_running_entry("E2") is None

    store.close_running_entry("E1", T0 + datetime.timedelta(minutes=1))
    assert store.get_running_entry("E1") is None


def test_entry_ids_increase(store):
    first = store.start_entry("E1", T0)
    second = store.start_entry("E2", T0)

    assert second.id > first.id


def test_store_failure_is_wrapped(database_url):
    # Tables are never created because connect() is skipped
    unprepared = EntryStore(create_database(database_url))
    try:
        with pytest.raises(StoreError) as excinfo:
            unprepared.list_entries("E1")
        assert isinstance(excinfo.value.__cause__, OperationalError)
    finally:
        unprepared.close()


def test_open_store_as_context_manager(database_url):
    with open_store(database_url) as entry_store:
        entry_store.start_entry("E1", T0)
        assert entry_store.count_running("E1") == 1
    assert entry_store.db.is_closed()


def test_failed_start_registers_no_employee(store, monkeypatch):
    def failing_insert(employee_id, start_time):
        raise StoreError("disk full")

    monkeypatch.setattr(store, "insert_running_entry", failing_insert)

    with pytest.raises(StoreError):
        store.start_entry("NEW", T0)

    Employee = store.Employee
    assert Employee.select().where(Employee.employee_id == "NEW").count() == 0
    assert store.list_entries("NEW") == []


def test_stores_in_one_process_stay_separate(tmp_path):
    with open_store(f"sqlite:///{tmp_path / 'a.db'}") as first, \
            open_store(f"sqlite:///{tmp_path / 'b.db'}") as second:
        first.start_entry("E1", T0)

        assert second.list_entries("E1") == []
        assert second.count_running("E1") == 0
        assert len(first.list_entries("E1")) == 1

        second.start_entry("E1", T0 + datetime.timedelta(hours=1))
        [entry] = first.list_entries("E1")
        assert entry.start_time == T0


def test_connection_scope_closes_only_what_it_opened(database_url):
    entry_store = EntryStore(create_database(database_url))
    entry_store.connect()
    try:
        with entry_store.connection():
            entry_store.start_entry("E1", T0)
        assert not entry_store.db.is_closed()
    finally:
        entry_store.close()

    with entry_store.connection():
        assert not entry_store.db.is_closed()
        assert entry_store.count_running("E1") == 1
    assert entry_store.db.is_closed()
