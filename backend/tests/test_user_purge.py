import asyncio
import math
from contextlib import asynccontextmanager

from datacleaner.core import metrics
from datacleaner.services import user_purge


class _FakeStore:
    def __init__(self, *, tables: set[str] | None = None, fieldsets: dict[str, dict[int, list[int]]] | None = None):
        self.existing = set(tables or ())
        self.fieldsets = fieldsets or {}
        self.calls: list[tuple] = []
        self.transactions = 0

    async def set_field_list(self, table, field, value, key, values):
        self.calls.append(("set", table, key, list(values), field, value))

    async def get_fieldset_list(self, table, field, key, values):
        self.calls.append(("get", table, key, list(values)))
        mapping = self.fieldsets.get(table, {})
        return [parent_id for value in values for parent_id in mapping.get(value, [])]

    async def delete_records_list(self, table, key, values):
        self.calls.append(("delete", table, key, list(values)))

    async def table_exists(self, table):
        self.calls.append(("exists", table))
        return table in self.existing

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield

    def deletes(self, table: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == "delete" and call[1] == table]


class _Recorder:
    def __init__(self) -> None:
        self.updates: list[tuple[str, int, int]] = []

    def update_status(self, label: str, current: int, total: int) -> None:
        self.updates.append((label, current, total))


async def _noop_finalize(_user) -> None:
    return None


def test_chunked_splits_without_loss_or_duplicates() -> None:
    values = list(range(10))
    chunks = list(user_purge.chunked(values, 4))
    assert chunks == [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9]]
    assert list(user_purge.chunked([], 4)) == []


def test_progress_interval_never_zero() -> None:
    assert user_purge.progress_interval(0) == 1
    assert user_purge.progress_interval(1) == 1
    assert user_purge.progress_interval(3) == 1
    assert user_purge.progress_interval(10) == 2
    assert user_purge.progress_interval(100) == 20
    assert user_purge.progress_interval(1000) == 20


def test_undelete_users_is_noop_for_empty_input() -> None:
    store = _FakeStore()
    assert asyncio.run(user_purge.undelete_users(store, {})) == 0
    assert store.calls == []
    assert store.transactions == 0


def test_undelete_users_clears_flag_once_per_chunk() -> None:
    store = _FakeStore()
    total = user_purge.CHUNK_SIZE + 10
    users = {user_id: None for user_id in range(1, total + 1)}

    assert asyncio.run(user_purge.undelete_users(store, users)) == total

    updates = [call for call in store.calls if call[0] == "set"]
    assert len(updates) == 2
    assert all(call[1] == "user" and call[4] == "deleted" and call[5] is False for call in updates)
    assert sorted(user_id for call in updates for user_id in call[3]) == list(users)
    assert metrics.snapshot()["users_undeleted"] == total


def test_delete_users_issues_one_call_per_chunk_and_covers_every_id() -> None:
    store = _FakeStore()
    total = user_purge.CHUNK_SIZE * 2 + 1
    users = {user_id: None for user_id in range(1, total + 1)}
    finalized: list[object] = []

    async def finalize(user) -> None:
        finalized.append(user)

    deleted = asyncio.run(
        user_purge.delete_users(store, users, finalize=finalize, reporter=_Recorder(), task="Removing old users")
    )

    expected_chunks = math.ceil(total / user_purge.CHUNK_SIZE)
    assert deleted == total
    assert len(finalized) == total
    for table in ("user", "assign_submission", "assign_grades", "assign_user_flags"):
        calls = store.deletes(table)
        assert len(calls) == expected_chunks
        seen = [user_id for call in calls for user_id in call[3]]
        assert len(seen) == len(set(seen)) == total
        assert set(seen) == set(users)


def test_delete_users_removes_children_before_parents_and_users_last() -> None:
    store = _FakeStore(
        fieldsets={
            "assign_submission": {1: [11, 12]},
            "assign_grades": {2: [21]},
        }
    )

    async def finalize(user) -> None:
        store.calls.append(("finalize", user))

    asyncio.run(
        user_purge.delete_users(
            store, {1: "u1", 2: "u2"}, finalize=finalize, reporter=_Recorder(), task="Removing old users"
        )
    )

    names = [(call[0], call[1]) for call in store.calls]
    assert store.deletes("assignsubmission_file") == [("delete", "assignsubmission_file", "submission", [11, 12])]
    assert store.deletes("assignfeedback_editpdf_annot") == [("delete", "assignfeedback_editpdf_annot", "gradeid", [21])]
    assert names.index(("delete", "assignsubmission_onlinetext")) < names.index(("delete", "assign_submission"))
    assert names.index(("delete", "assignfeedback_comments")) < names.index(("delete", "assign_grades"))
    assert names.index(("finalize", "u2")) < names.index(("delete", "user"))
    assert names[-1] == ("delete", "user")


def test_delete_users_skips_child_deletes_when_no_parents_found() -> None:
    store = _FakeStore()

    asyncio.run(user_purge.delete_users(store, {5: None}, finalize=_noop_finalize, reporter=_Recorder(), task="t"))

    assert store.deletes("assignsubmission_file") == []
    assert store.deletes("assignfeedback_comments") == []
    assert store.deletes("assign_submission") == [("delete", "assign_submission", "userid", [5])]


def test_delete_users_skips_missing_optional_tables() -> None:
    store = _FakeStore(tables={"role_assignments", "message"})

    asyncio.run(user_purge.delete_users(store, {7: None}, finalize=_noop_finalize, reporter=_Recorder(), task="t"))

    assert store.deletes("role_assignments") == [("delete", "role_assignments", "userid", [7])]
    assert store.deletes("message") == [
        ("delete", "message", "useridfrom", [7]),
        ("delete", "message", "useridto", [7]),
    ]
    for table in ("log", "sessions", "message_read", "grade_grades"):
        assert ("exists", table) in store.calls
        assert store.deletes(table) == []


def test_delete_users_reports_progress_at_coarse_interval() -> None:
    store = _FakeStore()
    reporter = _Recorder()
    users = {user_id: None for user_id in range(1, 101)}

    asyncio.run(user_purge.delete_users(store, users, finalize=_noop_finalize, reporter=reporter, task="t"))

    assert 5 <= len(reporter.updates) <= 20
    assert reporter.updates[0] == ("t", 20, 100)
    assert reporter.updates[-1] == ("t", 100, 100)


def test_delete_users_reports_every_user_for_tiny_runs() -> None:
    reporter = _Recorder()

    asyncio.run(
        user_purge.delete_users(_FakeStore(), {1: None, 2: None, 3: None}, finalize=_noop_finalize, reporter=reporter, task="t")
    )

    assert reporter.updates == [("t", 1, 3), ("t", 2, 3), ("t", 3, 3)]


def test_delete_users_groups_finalize_loop_into_one_transaction() -> None:
    store = _FakeStore()
    users = {user_id: None for user_id in range(1, 4)}

    asyncio.run(user_purge.delete_users(store, users, finalize=_noop_finalize, reporter=_Recorder(), task="t"))

    # one cascade transaction, one finalize transaction, one user-row transaction
    assert store.transactions == 3
    assert metrics.snapshot()["users_deleted"] == 3


def test_delete_users_with_no_users_touches_nothing() -> None:
    store = _FakeStore()

    assert asyncio.run(user_purge.delete_users(store, {}, finalize=_noop_finalize, reporter=_Recorder(), task="t")) == 0
    assert store.calls == []
