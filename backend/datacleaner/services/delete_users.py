from __future__ import annotations

import hashlib
import logging
import time
from typing import Any, Callable

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from datacleaner.core import metrics
from datacleaner.core.config import Settings, settings as default_settings
from datacleaner.core.logging_config import cleaner_run
from datacleaner.models.user import User
from datacleaner.services import user_purge
from datacleaner.services.cleaner import LoggingStatusReporter, StatusReporter
from datacleaner.services.record_store import RecordStore, SqlRecordStore

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def _apply_criteria(stmt: sa.Select, criteria: dict[str, Any]) -> sa.Select:
    if "deleted" in criteria:
        stmt = stmt.where(User.deleted == bool(criteria["deleted"]))
    if criteria.get("last_access_before") is not None:
        stmt = stmt.where(User.last_access < int(criteria["last_access_before"]))
    if criteria.get("ignored_usernames"):
        stmt = stmt.where(User.username.not_in(list(criteria["ignored_usernames"])))
    if criteria.get("ignored_auths"):
        stmt = stmt.where(User.auth.not_in(list(criteria["ignored_auths"])))
    if criteria.get("ignored_ids"):
        stmt = stmt.where(User.id.not_in(list(criteria["ignored_ids"])))
    return stmt


async def get_users(session: AsyncSession, criteria: dict[str, Any]) -> dict[int, User]:
    """Return id -> user for everyone matching ``criteria``.

    Records already in the session are refreshed from the row so a flag changed by a bulk
    update is visible to the caller.
    """
    stmt = _apply_criteria(sa.select(User), criteria).order_by(User.id.asc())
    rows = (await session.execute(stmt.execution_options(populate_existing=True))).scalars().all()
    return {user.id: user for user in rows}


class UserFinalizer:
    """Per-user removal hook run inside the grouped finalize transaction.

    Marks the account deleted, scrubs the identifying fields and emits a ``user_deleted`` event.
    The row itself is dropped afterwards with the rest of its chunk.
    """

    def __init__(self, session: AsyncSession, *, clock: Callable[[], float] = time.time):
        self.session = session
        self.clock = clock

    async def __call__(self, user: User) -> None:
        now = int(self.clock())
        original_username = user.username

        user.deleted = True
        user.username = f"deleted-{user.id}.{now}"
        user.email = hashlib.md5(user.username.encode("utf-8")).hexdigest()
        user.time_modified = now
        self.session.add(user)

        logger.info("user_deleted", extra={"user_id": user.id, "username": original_username})


class DeleteUsersCleaner:
    task = "Removing old users"

    def __init__(
        self,
        session: AsyncSession,
        *,
        config: Settings | None = None,
        store: RecordStore | None = None,
        finalize: user_purge.Finalizer | None = None,
        reporter: StatusReporter | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.config = config or default_settings
        self.store = store or SqlRecordStore(session)
        self.finalize = finalize or UserFinalizer(session, clock=clock)
        self.reporter = reporter or LoggingStatusReporter()
        self.clock = clock

    def get_criteria(self, config: Settings) -> dict[str, Any]:
        criteria: dict[str, Any] = {}
        min_age_days = int(config.delete_users_minimum_age_days or 0)
        if min_age_days > 0:
            criteria["last_access_before"] = int(self.clock()) - min_age_days * SECONDS_PER_DAY
        if config.delete_users_ignored_usernames:
            criteria["ignored_usernames"] = list(config.delete_users_ignored_usernames)
        if config.delete_users_ignored_auths:
            criteria["ignored_auths"] = list(config.delete_users_ignored_auths)
        return criteria

    def update_status(self, label: str, current: int, total: int) -> None:
        self.reporter.update_status(label, current, total)

    async def find_candidates(self) -> dict[int, User]:
        """Users a run would purge right now, soft-deleted or not."""
        return await get_users(self.session, self.get_criteria(self.config))

    async def execute(self) -> int:
        with cleaner_run():
            metrics.record_cleaner_run("delete_users")
            logger.info("cleaner_started", extra={"task": self.task})
            chunk_size = int(self.config.purge_chunk_size or user_purge.CHUNK_SIZE)

            criteria = self.get_criteria(self.config)

            # Soft-deleted users are restored first so the finalize hook treats everyone alike.
            criteria["deleted"] = True
            users = await get_users(self.session, criteria)
            await user_purge.undelete_users(self.store, users, chunk_size=chunk_size)

            del criteria["deleted"]

            users = await get_users(self.session, criteria)
            numusers = len(users)

            if numusers:
                self.update_status(self.task, 0, numusers)
                await user_purge.delete_users(
                    self.store,
                    users,
                    finalize=self.finalize,
                    reporter=self,
                    task=self.task,
                    chunk_size=chunk_size,
                )
                self.update_status(self.task, numusers, numusers)

            logger.info("cleaner_finished", extra={"task": self.task, "deleted": numusers})
            return numusers
