from collections import Counter
from threading import Lock
from typing import Dict, Counter as CounterType

_metrics: CounterType[str] = Counter()
_lock = Lock()


def _inc(key: str, amount: int = 1) -> None:
    with _lock:
        _metrics[key] += amount


def record_cleaner_run(task: str) -> None:
    _inc(f"cleaner_runs:{task}")


def record_users_undeleted(count: int) -> None:
    _inc("users_undeleted", count)


def record_users_deleted(count: int) -> None:
    _inc("users_deleted", count)


def record_config_values_applied(count: int) -> None:
    _inc("config_values_applied", count)


def snapshot() -> Dict[str, int]:
    with _lock:
        return dict(_metrics)


def reset() -> None:
    with _lock:
        _metrics.clear()
