"""Legacy schema migration - re-exports for convenience."""

from backend.fluent.migration.errors import (
    InvalidIdentifierError,
    MigrationConfigError,
    PlanConflictError,
)
from backend.fluent.migration.planner import MigrationPlan, SchemaMigrationPlanner
from backend.fluent.migration.queries import MigrationQuery, UpsertDialect, build_query
from backend.fluent.migration.registry import (
    LocalisedType,
    LocalisedTypeRegistry,
    load_registry,
)
from backend.fluent.migration.runner import MigrationReport, MigrationRunner

__all__ = [
    "InvalidIdentifierError",
    "LocalisedType",
    "LocalisedTypeRegistry",
    "MigrationConfigError",
    "MigrationPlan",
    "MigrationQuery",
    "MigrationReport",
    "MigrationRunner",
    "PlanConflictError",
    "SchemaMigrationPlanner",
    "UpsertDialect",
    "build_query",
    "load_registry",
]
