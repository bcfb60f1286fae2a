"""Chunked cascade delete of user accounts.

Dependent rows are removed chunk by chunk before the user rows themselves, children always
before their parents. Each chunk's cascade commits on its own, so a failure part way through a
run leaves earlier chunks fully purged and later chunks untouched; re-running selects the
survivors again.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterator, Mapping, Sequence, TypeVar

from datacleaner.core import metrics
from datacleaner.services.cleaner import StatusReporter
from datacleaner.services.record_store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHUNK_SIZE = 65000
PROGRESS_DIVISOR = 20
MIN_PROGRESS_STEPS = 5

USER_TABLE = "user"

# (parent table, parent user column, [(child table, child column referencing parent id)])
LEAF_CHAINS: tuple[tuple[str, str, tuple[tuple[str, str], ...]], ...] = (
    (
        "assign_submission",
        "userid",
        (
            ("assignsubmission_file", "submission"),
            ("assignsubmission_onlinetext", "submission"),
        ),
    ),
    (
        "assign_grades",
        "userid",
        (
            ("assignfeedback_comments", "grade"),
            ("assignfeedback_file", "grade"),
            ("assignfeedback_editpdf_annot", "gradeid"),
            ("assignfeedback_editpdf_cmnt", "gradeid"),
        ),
    ),
)

DIRECT_TABLES: tuple[str, ...] = (
    "assign_user_flags",
    "assign_user_mapping",
    "assignfeedback_editpdf_quick",
)

# Optional tables; each is probed before use.
DEPENDENT_TABLES: dict[str, tuple[str, ...]] = {
    "userid": (
        "local_messages_sent",
        "block_leaderboard_data",
        "block_leaderboard_points",
        "assignment_submissions",
        "block_totara_stats",
        "config_log",
        "course_completion_crit_compl",
        "course_completions",
        "course_modules_completion",
        "facetoface_signups",
        "grade_grades",
        "grade_grades_history",
        "log",
        "logstore_standard_log",
        "message_contacts",
        "my_pages",
        "post",
        "prog_completion",
        "prog_pos_assignment",
        "prog_user_assignment",
        "report_builder_saved",
        "role_assignments",
        "scorm_scoes_track",
        "sessions",
        "stats_user_daily",
        "stats_user_monthly",
        "stats_user_weekly",
    ),
    "useridfrom": ("message", "message_read"),
    "useridto": ("message", "message_read"),
}

Finalizer = Callable[[Any], Awaitable[None]]


def chunked(values: Sequence[T], size: int = CHUNK_SIZE) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    step = max(1, int(size or CHUNK_SIZE))
    for start in range(0, len(values), step):
        yield list(values[start : start + step])


def progress_interval(total: int) -> int:
    """Number of processed users between two status updates, never below 1."""
    if total <= 0:
        return 1
    steps = max(total / PROGRESS_DIVISOR, MIN_PROGRESS_STEPS)
    return max(1, int(total / steps))


async def undelete_users(store: RecordStore, users: Mapping[Any, Any], *, chunk_size: int = CHUNK_SIZE) -> int:
    """Clear the soft-delete flag on every given user so they can be purged like the rest."""
    if not users:
        return 0

    userids = list(users.keys())
    for chunk in chunked(userids, chunk_size):
        async with store.transaction():
            await store.set_field_list(USER_TABLE, "deleted", False, "id", chunk)

    metrics.record_users_undeleted(len(userids))
    logger.info("users_undeleted", extra={"count": len(userids)})
    return len(userids)


async def _delete_leaf_chains(store: RecordStore, chunk: list[Any]) -> None:
    for parent_table, user_column, children in LEAF_CHAINS:
        parent_ids = await store.get_fieldset_list(parent_table, "id", user_column, chunk)
        if parent_ids:
            for child_table, child_column in children:
                await store.delete_records_list(child_table, child_column, parent_ids)
        await store.delete_records_list(parent_table, user_column, chunk)

    for table in DIRECT_TABLES:
        await store.delete_records_list(table, "userid", chunk)


async def _delete_registered_dependents(store: RecordStore, chunk: list[Any]) -> None:
    for column, tables in DEPENDENT_TABLES.items():
        for table in tables:
            if await store.table_exists(table):
                await store.delete_records_list(table, column, chunk)


async def delete_dependents(store: RecordStore, chunk: list[Any]) -> None:
    """Remove every row that references a user in ``chunk``; one transaction per chunk."""
    async with store.transaction():
        await _delete_leaf_chains(store, chunk)
        await _delete_registered_dependents(store, chunk)


async def _finalize_users(
    store: RecordStore,
    users: Mapping[Any, Any],
    *,
    finalize: Finalizer,
    reporter: StatusReporter,
    task: str,
) -> None:
    numusers = len(users)
    interval = progress_interval(numusers)

    # Grouped purely to save per-user commits; nothing relies on it being atomic.
    async with store.transaction():
        for index, user in enumerate(users.values(), start=1):
            await finalize(user)
            if index % interval == 0:
                reporter.update_status(task, index, numusers)


async def delete_users(
    store: RecordStore,
    users: Mapping[Any, Any],
    *,
    finalize: Finalizer,
    reporter: StatusReporter,
    task: str,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Purge ``users`` (id -> record) and everything that references them."""
    if not users:
        return 0

    chunks = list(chunked(list(users.keys()), chunk_size))
    for chunk in chunks:
        await delete_dependents(store, chunk)

    await _finalize_users(store, users, finalize=finalize, reporter=reporter, task=task)

    for chunk in chunks:
        async with store.transaction():
            await store.delete_records_list(USER_TABLE, "id", chunk)

    metrics.record_users_deleted(len(users))
    return len(users)
