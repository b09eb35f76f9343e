"""Migrate legacy per-locale columns into localised tables.

Usage:
    python -m backend.fluent.tasks.migrate --types types.yml --locale fr --locale de
    python -m backend.fluent.tasks.migrate --dry-run

Locales, manifest, root type and database default to the application
settings (LEGACY_LOCALES, LOCALISED_TYPES_FILE, MIGRATE_SUBCLASSES_OF,
DATABASE_URL).
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from backend.fluent.config import Settings, get_settings
from backend.fluent.db.engine import create_engine_from_settings
from backend.fluent.migration.errors import (
    InvalidIdentifierError,
    MigrationConfigError,
    PlanConflictError,
)
from backend.fluent.migration.planner import SchemaMigrationPlanner
from backend.fluent.migration.queries import UpsertDialect
from backend.fluent.migration.registry import load_registry
from backend.fluent.migration.runner import MigrationRunner

logger = logging.getLogger(__name__)

TITLE = "Convert legacy Fluent schema"
DESCRIPTION = "Migrates per-locale columns from the legacy Fluent layout into localised tables."

EXIT_OK = 0
EXIT_QUERY_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fluent-migrate", description=DESCRIPTION)
    parser.add_argument(
        "--root-type",
        default=settings.migrate_subclasses_of,
        help="Only migrate this content type and its subtypes",
    )
    parser.add_argument(
        "--types",
        default=settings.localised_types_file,
        help="YAML manifest of content types and their localised fields",
    )
    parser.add_argument(
        "--locale",
        action="append",
        dest="locales",
        help="Legacy locale to migrate (repeatable)",
    )
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument(
        "--dialect",
        choices=[d.value for d in UpsertDialect],
        default=None,
        help="Upsert flavour (default: taken from the database, mysql for dry runs)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated statements instead of executing them",
    )
    return parser


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    """Run the migration task.

    Returns:
        Process exit code
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    args = build_parser(settings).parse_args(argv)

    print(TITLE)
    try:
        if not args.types:
            raise MigrationConfigError("A type manifest is required (--types or LOCALISED_TYPES_FILE)")
        registry = load_registry(args.types)

        engine = None
        dialect = UpsertDialect.MYSQL
        if not args.dry_run:
            engine = create_engine_from_settings(settings, args.database_url)
            dialect = UpsertDialect.from_engine(engine)
        if args.dialect:
            dialect = UpsertDialect(args.dialect)

        planner = SchemaMigrationPlanner(registry, root_type=args.root_type, dialect=dialect)
        plan = planner.plan(args.locales or settings.legacy_locales)
    except (MigrationConfigError, PlanConflictError, InvalidIdentifierError) as e:
        logger.error(f"Migration aborted: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    report = MigrationRunner(engine).execute(plan, dry_run=args.dry_run)

    if args.dry_run:
        print(f"\nDry run: {report.dry_run} queries")
        return EXIT_OK

    print(f"\nDone: {report.executed} executed, {report.failed} failed")
    return EXIT_OK if report.ok else EXIT_QUERY_FAILED


if __name__ == "__main__":
    sys.exit(main())
