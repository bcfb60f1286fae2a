from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from datacleaner.core.config import Settings

logger = logging.getLogger(__name__)


class StatusReporter(Protocol):
    def update_status(self, label: str, current: int, total: int) -> None: ...


@runtime_checkable
class Cleaner(Protocol):
    """What every cleaner exposes to the runner."""

    task: str

    async def execute(self) -> int: ...

    def get_criteria(self, config: Settings) -> dict[str, Any]: ...

    def update_status(self, label: str, current: int, total: int) -> None: ...


class LoggingStatusReporter:
    """Emit progress as structured log records."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def update_status(self, label: str, current: int, total: int) -> None:
        percent = int(current * 100 / total) if total else 100
        self.log.info(
            "cleaner_progress",
            extra={"task": label, "current": current, "total": total, "percent": percent},
        )

