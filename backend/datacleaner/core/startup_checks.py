from __future__ import annotations

import logging

from datacleaner.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _is_production(config: Settings) -> bool:
    env = (config.environment or "").strip().lower()
    return env in {"prod", "production"}


def _append_if(problems: list[str], *, condition: bool, message: str) -> None:
    if condition:
        problems.append(message)


def _validate_purge_settings(problems: list[str], config: Settings) -> None:
    _append_if(
        problems,
        condition=int(config.purge_chunk_size or 0) < 1,
        message="PURGE_CHUNK_SIZE must be a positive integer.",
    )
    _append_if(
        problems,
        condition=int(config.delete_users_minimum_age_days) < 0,
        message="DELETE_USERS_MINIMUM_AGE_DAYS must not be negative.",
    )


def validate_cleaner_execution(config: Settings | None = None) -> None:
    """
    Fail fast before any cleaner mutates data.

    Cleaners are destructive and meant for copies of production data, so a production
    environment must opt in explicitly with CLEANER_ALLOW_EXECUTION=1.
    """
    config = config or default_settings
    problems: list[str] = []
    _append_if(
        problems,
        condition=_is_production(config) and not bool(config.cleaner_allow_execution),
        message="Cleaners refuse to run in production unless CLEANER_ALLOW_EXECUTION=1.",
    )
    _validate_purge_settings(problems, config)

    if problems:
        raise RuntimeError("Cleaner execution checks failed:\n- " + "\n- ".join(problems))
    if _is_production(config):
        logger.warning("cleaner_production_override", extra={"environment": config.environment})
