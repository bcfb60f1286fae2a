import logging

import pytest

from datacleaner.core.config import Settings
from datacleaner.core.startup_checks import validate_cleaner_execution


def test_production_requires_explicit_opt_in() -> None:
    with pytest.raises(RuntimeError) as exc:
        validate_cleaner_execution(Settings(environment="production", cleaner_allow_execution=False))

    assert "Cleaners refuse to run in production unless CLEANER_ALLOW_EXECUTION=1." in str(exc.value)


def test_production_opt_in_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        validate_cleaner_execution(Settings(environment="prod", cleaner_allow_execution=True))

    assert any(record.getMessage() == "cleaner_production_override" for record in caplog.records)


def test_non_production_runs_without_opt_in() -> None:
    validate_cleaner_execution(Settings(environment="local", cleaner_allow_execution=False))


def test_invalid_purge_settings_are_reported() -> None:
    with pytest.raises(RuntimeError) as exc:
        validate_cleaner_execution(
            Settings(environment="local", purge_chunk_size=0, delete_users_minimum_age_days=-1)
        )

    message = str(exc.value)
    assert "PURGE_CHUNK_SIZE must be a positive integer." in message
    assert "DELETE_USERS_MINIMUM_AGE_DAYS must not be negative." in message
