import argparse
import asyncio
import json
import logging
import sys

from datacleaner.core.config import settings
from datacleaner.core.logging_config import configure_logging
from datacleaner.core.sentry import capture_exception, init_sentry
from datacleaner.core.startup_checks import validate_cleaner_execution
from datacleaner.db.session import SessionLocal
from datacleaner.services import environment_matrix
from datacleaner.services.cleaner import Cleaner
from datacleaner.services.delete_users import DeleteUsersCleaner

logger = logging.getLogger(__name__)


async def delete_users(*, dry_run: bool) -> int:
    async with SessionLocal() as session:
        cleaner = DeleteUsersCleaner(session, config=settings)
        if dry_run:
            candidates = await cleaner.find_candidates()
            print(f"Would delete {len(candidates)} users.")
            return len(candidates)
        deleted = await cleaner.execute()
    print(f"Deleted {deleted} users.")
    return deleted


async def env_matrix_search(term: str) -> None:
    async with SessionLocal() as session:
        items = await environment_matrix.search(session, term)
    print(json.dumps([item.model_dump() for item in items], indent=2))


async def env_matrix_show() -> None:
    async with SessionLocal() as session:
        matrix = await environment_matrix.load_matrix(session, settings.environment_matrix_environments)
    print(json.dumps(matrix.model_dump(), indent=2))


async def env_matrix_set(*, environment: str, plugin: str, name: str, value: str | None) -> None:
    async with SessionLocal() as session:
        await environment_matrix.set_value(
            session,
            environment=environment,
            plugin=plugin,
            name=name,
            value=value,
            environments=settings.environment_matrix_environments,
        )


async def env_matrix_apply(environment: str) -> int:
    async with SessionLocal() as session:
        cleaner: Cleaner = environment_matrix.EnvironmentMatrixCleaner(session, config=settings, environment=environment)
        applied = await cleaner.execute()
    print(f"Applied {applied} settings to {environment}.")
    return applied


def _add_delete_users_command(subparsers) -> None:
    delete_cmd = subparsers.add_parser("delete-users", help="Purge stale user accounts and their records")
    delete_cmd.add_argument("--dry-run", action="store_true", help="Only count the users that would be purged")


def _add_env_matrix_commands(subparsers) -> None:
    matrix = subparsers.add_parser("env-matrix", help="Compare and apply settings across environments")
    matrix_sub = matrix.add_subparsers(dest="matrix_command")

    search = matrix_sub.add_parser("search", help="Search current settings by name")
    search.add_argument("term", help="Case-insensitive search term")

    matrix_sub.add_parser("show", help="Print the saved matrix")

    set_cmd = matrix_sub.add_parser("set", help="Save (or clear) a setting for one environment")
    set_cmd.add_argument("environment")
    set_cmd.add_argument("plugin", help="Plugin name, or 'core' for site settings")
    set_cmd.add_argument("name")
    set_cmd.add_argument("value", nargs="?", default=None, help="Omit to remove the saved value")

    apply_cmd = matrix_sub.add_parser("apply", help="Write an environment's saved values into the settings")
    apply_cmd.add_argument("environment")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Data cleaner utilities")
    subparsers = parser.add_subparsers(dest="command")
    _add_delete_users_command(subparsers)
    _add_env_matrix_commands(subparsers)
    return parser


def _run_env_matrix_command(args: argparse.Namespace) -> bool:
    command = getattr(args, "matrix_command", None)
    if command == "search":
        asyncio.run(env_matrix_search(args.term))
        return True

    if command == "show":
        asyncio.run(env_matrix_show())
        return True

    if command == "set":
        asyncio.run(env_matrix_set(environment=args.environment, plugin=args.plugin, name=args.name, value=args.value))
        return True

    if command == "apply":
        validate_cleaner_execution(settings)
        asyncio.run(env_matrix_apply(args.environment))
        return True

    return False


def _run_cli_command(args: argparse.Namespace) -> bool:
    if args.command == "delete-users":
        if not args.dry_run:
            validate_cleaner_execution(settings)
        asyncio.run(delete_users(dry_run=bool(args.dry_run)))
        return True

    if args.command == "env-matrix":
        return _run_env_matrix_command(args)

    return False


def main():
    configure_logging(json_logs=settings.json_logs)
    init_sentry()
    parser = _build_parser()
    args = parser.parse_args()
    try:
        handled = _run_cli_command(args)
    except Exception as exc:
        logger.exception("cleaner_failed", extra={"command": args.command, "error": str(exc)})
        capture_exception(exc)
        sys.exit(1)
    if not handled:
        parser.print_help()


if __name__ == "__main__":
    main()
