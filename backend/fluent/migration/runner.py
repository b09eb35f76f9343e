"""Execute (or print) a migration plan."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from backend.fluent.migration.planner import MigrationPlan
from backend.fluent.utils.metrics import record_migration_query

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    """Outcome of one run."""

    executed: int = 0
    failed: int = 0
    dry_run: int = 0
    errors: list[tuple[str, str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class MigrationRunner:
    """Runs planned queries one by one, reporting progress line by line.

    A failing query is reported and the run moves on to the next one;
    nothing is retried. Each query commits in its own transaction.
    """

    def __init__(self, engine: Engine | None, out: Callable[[str], None] = print) -> None:
        """Initialize runner.

        Args:
            engine: Engine to execute against (may be None for dry runs)
            out: Sink for progress lines
        """
        self._engine = engine
        self._out = out

    def execute(self, plan: MigrationPlan, dry_run: bool = False) -> MigrationReport:
        """Execute every query in ``plan`` in order.

        Args:
            plan: Planned queries
            dry_run: Print statement text instead of executing

        Returns:
            MigrationReport with per-outcome counts
        """
        if not dry_run and self._engine is None:
            raise ValueError("An engine is required unless running dry")

        report = MigrationReport()
        for locale in plan.locales():
            self._out(f"Running queries for locale '{locale}'")

            for query in plan.queries_for(locale):
                self._out(f"Updating table '{query.target_table}'")

                if dry_run:
                    self._out(query.to_sql())
                    report.dry_run += 1
                    record_migration_query("dry_run")
                    continue

                try:
                    with self._engine.begin() as conn:
                        conn.execute(query.statement())
                except SQLAlchemyError as e:
                    message = str(getattr(e, "orig", None) or e)
                    self._out(message)
                    logger.warning(
                        f"Migration query failed for {query.target_table}",
                        extra={
                            "structured": {
                                "locale": locale,
                                "table": query.target_table,
                                "error": message,
                            }
                        },
                    )
                    report.failed += 1
                    report.errors.append((locale, query.target_table, message))
                    record_migration_query("failed")
                else:
                    report.executed += 1
                    record_migration_query("executed")

        return report
