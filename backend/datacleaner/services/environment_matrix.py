from __future__ import annotations

import logging
from typing import Any, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from datacleaner.core import metrics
from datacleaner.core.config import Settings, settings as default_settings
from datacleaner.core.logging_config import cleaner_run
from datacleaner.models.config import ConfigEntry, ConfigPlugin, EnvironmentMatrixValue
from datacleaner.schemas.environment_matrix import ConfigItem, EnvironmentMatrix, MatrixRow
from datacleaner.services.cleaner import LoggingStatusReporter, StatusReporter

logger = logging.getLogger(__name__)

CORE_PLUGIN = "core"
SEARCH_LIMIT = 100


def _normalize_plugin(plugin: str | None) -> str:
    value = (plugin or "").strip()
    return value or CORE_PLUGIN


def _require_environment(environment: str, environments: Sequence[str]) -> None:
    if environment not in environments:
        raise ValueError(f"Unknown environment: {environment}")


async def search(session: AsyncSession, term: str, *, limit: int = SEARCH_LIMIT) -> list[ConfigItem]:
    """Settings whose name (or plugin) contains ``term``, core settings first."""
    needle = (term or "").strip().lower()
    if not needle:
        return []
    limit_clean = max(1, min(int(limit or SEARCH_LIMIT), 1000))
    escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    like = f"%{escaped}%"

    core_rows = (
        await session.execute(
            sa.select(ConfigEntry.name, ConfigEntry.value)
            .where(ConfigEntry.name.ilike(like, escape="\\"))
            .order_by(ConfigEntry.name.asc())
            .limit(limit_clean)
        )
    ).all()
    plugin_rows = (
        await session.execute(
            sa.select(ConfigPlugin.plugin, ConfigPlugin.name, ConfigPlugin.value)
            .where(
                sa.or_(
                    ConfigPlugin.name.ilike(like, escape="\\"),
                    ConfigPlugin.plugin.ilike(like, escape="\\"),
                )
            )
            .order_by(ConfigPlugin.plugin.asc(), ConfigPlugin.name.asc())
            .limit(limit_clean)
        )
    ).all()

    items = [ConfigItem(plugin=CORE_PLUGIN, name=name, value=value) for name, value in core_rows]
    items.extend(ConfigItem(plugin=plugin, name=name, value=value) for plugin, name, value in plugin_rows)
    return items[:limit_clean]


async def _current_values(session: AsyncSession, keys: Sequence[tuple[str, str]]) -> dict[tuple[str, str], str]:
    names_by_plugin: dict[str, list[str]] = {}
    for plugin, name in keys:
        names_by_plugin.setdefault(plugin, []).append(name)

    current: dict[tuple[str, str], str] = {}
    for plugin, names in names_by_plugin.items():
        if plugin == CORE_PLUGIN:
            rows = await session.execute(
                sa.select(ConfigEntry.name, ConfigEntry.value).where(ConfigEntry.name.in_(names))
            )
        else:
            rows = await session.execute(
                sa.select(ConfigPlugin.name, ConfigPlugin.value).where(
                    ConfigPlugin.plugin == plugin, ConfigPlugin.name.in_(names)
                )
            )
        for name, value in rows.all():
            current[(plugin, name)] = value
    return current


async def load_matrix(session: AsyncSession, environments: Sequence[str]) -> EnvironmentMatrix:
    envs = list(environments)
    saved = (
        (
            await session.execute(
                sa.select(EnvironmentMatrixValue)
                .where(EnvironmentMatrixValue.environment.in_(envs))
                .order_by(EnvironmentMatrixValue.plugin.asc(), EnvironmentMatrixValue.name.asc())
            )
        )
        .scalars()
        .all()
    )

    per_key: dict[tuple[str, str], dict[str, str]] = {}
    for item in saved:
        per_key.setdefault((item.plugin, item.name), {})[item.environment] = item.value

    current = await _current_values(session, list(per_key.keys()))
    rows = [
        MatrixRow(
            plugin=plugin,
            name=name,
            current=current.get((plugin, name)),
            values={env: values.get(env) for env in envs},
        )
        for (plugin, name), values in per_key.items()
    ]
    return EnvironmentMatrix(environments=envs, rows=rows)


async def set_value(
    session: AsyncSession,
    *,
    environment: str,
    plugin: str | None,
    name: str,
    value: str | None,
    environments: Sequence[str],
) -> None:
    """Store the desired value of a setting for one environment; ``None`` removes it."""
    _require_environment(environment, environments)
    plugin_clean = _normalize_plugin(plugin)
    name_clean = (name or "").strip()
    if not name_clean:
        raise ValueError("Setting name is required")

    existing = (
        await session.execute(
            sa.select(EnvironmentMatrixValue).where(
                EnvironmentMatrixValue.environment == environment,
                EnvironmentMatrixValue.plugin == plugin_clean,
                EnvironmentMatrixValue.name == name_clean,
            )
        )
    ).scalar_one_or_none()

    if value is None:
        if existing is not None:
            await session.delete(existing)
    elif existing is not None:
        existing.value = value
        session.add(existing)
    else:
        session.add(EnvironmentMatrixValue(environment=environment, plugin=plugin_clean, name=name_clean, value=value))
    await session.commit()


async def _write_config(session: AsyncSession, *, plugin: str, name: str, value: str) -> None:
    if plugin == CORE_PLUGIN:
        entry = (await session.execute(sa.select(ConfigEntry).where(ConfigEntry.name == name))).scalar_one_or_none()
        if entry is None:
            session.add(ConfigEntry(name=name, value=value))
        else:
            entry.value = value
        return

    setting = (
        await session.execute(
            sa.select(ConfigPlugin).where(ConfigPlugin.plugin == plugin, ConfigPlugin.name == name)
        )
    ).scalar_one_or_none()
    if setting is None:
        session.add(ConfigPlugin(plugin=plugin, name=name, value=value))
    else:
        setting.value = value


class EnvironmentMatrixCleaner:
    task = "Applying environment matrix"

    def __init__(
        self,
        session: AsyncSession,
        *,
        config: Settings | None = None,
        environment: str | None = None,
        reporter: StatusReporter | None = None,
    ):
        self.session = session
        self.config = config or default_settings
        self.environment = environment
        self.reporter = reporter or LoggingStatusReporter()

    def get_criteria(self, config: Settings) -> dict[str, Any]:
        return {"environment": self.environment or config.environment}

    def update_status(self, label: str, current: int, total: int) -> None:
        self.reporter.update_status(label, current, total)

    async def execute(self) -> int:
        with cleaner_run():
            metrics.record_cleaner_run("environment_matrix")
            environment = self.get_criteria(self.config)["environment"]
            _require_environment(environment, self.config.environment_matrix_environments)
            logger.info("cleaner_started", extra={"task": self.task, "environment": environment})

            values = (
                (
                    await self.session.execute(
                        sa.select(EnvironmentMatrixValue)
                        .where(EnvironmentMatrixValue.environment == environment)
                        .order_by(EnvironmentMatrixValue.plugin.asc(), EnvironmentMatrixValue.name.asc())
                    )
                )
                .scalars()
                .all()
            )
            total = len(values)
            if total:
                self.update_status(self.task, 0, total)
            for item in values:
                await _write_config(self.session, plugin=item.plugin, name=item.name, value=item.value)
            await self.session.commit()
            if total:
                self.update_status(self.task, total, total)

            metrics.record_config_values_applied(total)
            logger.info("cleaner_finished", extra={"task": self.task, "environment": environment, "applied": total})
            return total
