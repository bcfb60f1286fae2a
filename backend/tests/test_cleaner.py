from datacleaner.core.config import Settings
from datacleaner.services.cleaner import Cleaner, LoggingStatusReporter
from datacleaner.services.delete_users import DeleteUsersCleaner
from datacleaner.services.environment_matrix import EnvironmentMatrixCleaner


def test_both_cleaners_satisfy_the_cleaner_interface() -> None:
    config = Settings(environment="staging")
    cleaners = [
        DeleteUsersCleaner(session=None, config=config, store=object(), finalize=object()),  # type: ignore[arg-type]
        EnvironmentMatrixCleaner(session=None, config=config),  # type: ignore[arg-type]
    ]

    for cleaner in cleaners:
        assert isinstance(cleaner, Cleaner)
        assert cleaner.task
        assert isinstance(cleaner.get_criteria(config), dict)

    assert cleaners[1].get_criteria(config) == {"environment": "staging"}


def test_status_reporter_is_not_a_cleaner() -> None:
    assert not isinstance(LoggingStatusReporter(), Cleaner)
