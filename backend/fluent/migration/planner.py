"""Plan the upserts that move legacy locale columns into localised tables.

Legacy content kept one column per locale (``Title_fr``, ``Title_de``, ...)
on the base tables. Localised content lives in ``<Table>_Localised``
(plus ``_Live`` and ``_Versions`` variants for versioned types), one row per
record and locale. The planner produces one upsert per locale and target
table; the runner executes or prints them.
"""

import logging
from collections.abc import Iterable, Iterator, Sequence

from backend.fluent.migration.errors import MigrationConfigError, PlanConflictError
from backend.fluent.migration.identifiers import validate_locale
from backend.fluent.migration.queries import MigrationQuery, UpsertDialect, build_query
from backend.fluent.migration.registry import DEFAULT_ROOT_TYPE, LocalisedTypeRegistry

logger = logging.getLogger(__name__)

VERSIONED_SUFFIXES = ("", "_Live", "_Versions")
UNVERSIONED_SUFFIXES = ("",)


class MigrationPlan:
    """Ordered, append-only collection of queries keyed by (locale, table)."""

    def __init__(self) -> None:
        self._queries: dict[str, dict[str, MigrationQuery]] = {}

    def add_locale(self, locale: str) -> None:
        self._queries.setdefault(locale, {})

    def add(self, query: MigrationQuery) -> bool:
        """Add a query to the plan.

        Returns:
            True if added, False if an identical query was already planned

        Raises:
            PlanConflictError: If a different query already targets the same
                table for the same locale
        """
        locale_queries = self._queries.setdefault(query.locale, {})
        existing = locale_queries.get(query.target_table)
        if existing is None:
            locale_queries[query.target_table] = query
            return True
        if existing == query:
            return False
        raise PlanConflictError(
            f"Conflicting queries for table '{query.target_table}' "
            f"in locale '{query.locale}': fields {existing.fields} vs {query.fields}"
        )

    def locales(self) -> list[str]:
        return list(self._queries)

    def queries_for(self, locale: str) -> list[MigrationQuery]:
        return list(self._queries.get(locale, {}).values())

    def __iter__(self) -> Iterator[tuple[str, MigrationQuery]]:
        for locale, queries in self._queries.items():
            for query in queries.values():
                yield locale, query

    def __len__(self) -> int:
        return sum(len(queries) for queries in self._queries.values())


class SchemaMigrationPlanner:
    """Builds a MigrationPlan from registered localised types."""

    def __init__(
        self,
        registry: LocalisedTypeRegistry,
        root_type: str = DEFAULT_ROOT_TYPE,
        dialect: UpsertDialect = UpsertDialect.MYSQL,
    ) -> None:
        self._registry = registry
        self._root_type = root_type
        self._dialect = dialect

    @property
    def root_type(self) -> str:
        return self._root_type

    def set_migrate_subclasses_of(self, root_type: str) -> "SchemaMigrationPlanner":
        """Restrict migration to ``root_type`` and its subtypes."""
        self._root_type = root_type
        return self

    def get_locales(self, locales: Iterable[str] | None) -> list[str]:
        """Validate the legacy locale list.

        Raises:
            MigrationConfigError: If no locale is configured
            InvalidIdentifierError: If a locale is not a safe column suffix
        """
        checked = [validate_locale(locale) for locale in (locales or [])]
        if not checked:
            raise MigrationConfigError("At least one legacy locale is required (LEGACY_LOCALES)")
        return checked

    def localised_types(self) -> list[str]:
        """Localised types under the configured root, in registration order."""
        if self._root_type not in self._registry:
            raise MigrationConfigError(f"Unknown root type: {self._root_type}")
        return [
            name
            for name in self._registry.subclasses_of(self._root_type)
            if self._registry.is_localised(name)
        ]

    def plan(self, locales: Sequence[str] | None) -> MigrationPlan:
        """Plan queries for every locale.

        Preconditions are checked before anything is generated, so a
        configuration error leaves no partial plan behind.
        """
        checked = self.get_locales(locales)
        types = self.localised_types()

        plan = MigrationPlan()
        for locale in checked:
            plan.add_locale(locale)
            for query in self._queries_for_locale(locale, types):
                if not plan.add(query):
                    logger.debug(f"Skipping duplicate query for {query.target_table} ({locale})")
        return plan

    def plan_for_locale(self, locale: str) -> list[MigrationQuery]:
        """Plan queries for a single locale."""
        return self.plan([locale]).queries_for(locale)

    def _queries_for_locale(self, locale: str, types: list[str]) -> Iterator[MigrationQuery]:
        for name in types:
            suffixes = (
                VERSIONED_SUFFIXES if self._registry.is_versioned(name) else UNVERSIONED_SUFFIXES
            )
            for table, fields in self._registry.localised_tables(name).items():
                if not fields:
                    continue
                for suffix in suffixes:
                    yield build_query(table, suffix, fields, locale, self._dialect)
