"""Upsert statements copying legacy locale columns into localised tables."""

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Engine, TextClause, text

VERSIONS_SUFFIX = "_Versions"


class UpsertDialect(str, Enum):
    """SQL flavour used to express the upsert."""

    MYSQL = "mysql"
    SQLITE = "sqlite"

    @classmethod
    def from_engine(cls, engine: Engine) -> "UpsertDialect":
        """Pick the dialect matching a SQLAlchemy engine."""
        if engine.dialect.name == "sqlite":
            return cls.SQLITE
        return cls.MYSQL


def quote(name: str) -> str:
    return f"`{name}`"


@dataclass(frozen=True)
class MigrationQuery:
    """One upsert from a legacy table into its localised counterpart.

    Columns ``<field>_<locale>`` of ``source_table`` are copied into
    ``target_table`` as ``<field>`` with ``Locale = locale``. Rows already
    present for the same record and locale are updated in place.
    """

    target_table: str
    source_table: str
    id_column: str
    locale: str
    fields: tuple[str, ...]
    include_version: bool = False
    dialect: UpsertDialect = UpsertDialect.MYSQL

    @property
    def select_fields(self) -> str:
        """Legacy columns aliased to their localised names."""
        return ", ".join(
            f"{quote(f'{field}_{self.locale}')} AS {quote(field)}" for field in self.fields
        )

    @property
    def update_fields(self) -> str:
        """Assignments applied when the target row already exists."""
        if self.dialect is UpsertDialect.SQLITE:
            return ", ".join(f"{quote(field)} = excluded.{quote(field)}" for field in self.fields)
        return ", ".join(
            f"{quote(field)} = {quote(f'{field}_{self.locale}')}" for field in self.fields
        )

    @property
    def target_columns(self) -> list[str]:
        columns = ["ID", "RecordID", "Locale", *self.fields]
        if self.include_version:
            columns.insert(0, "Version")
        return columns

    @property
    def conflict_columns(self) -> list[str]:
        """Unique key of the localised table."""
        if self.include_version:
            return ["RecordID", "Locale", "Version"]
        return ["RecordID", "Locale"]

    def to_sql(self) -> str:
        """Literal statement text, as shown by a dry run."""
        return self._render("'" + self.locale.replace("'", "''") + "'")

    def statement(self) -> TextClause:
        """Executable statement with the locale bound as a parameter."""
        return text(self._render(":locale")).bindparams(locale=self.locale)

    def _render(self, locale_expr: str) -> str:
        version_selector = f"{quote('Version')}, " if self.include_version else ""
        columns = ", ".join(quote(column) for column in self.target_columns)
        lines = [
            f"INSERT INTO {quote(self.target_table)} ({columns})",
            "SELECT",
            f"    {version_selector}NULL AS {quote('ID')},",
            f"    {quote(self.id_column)} AS {quote('RecordID')},",
            f"    {locale_expr} AS {quote('Locale')},",
            f"    {self.select_fields}",
            f"FROM {quote(self.source_table)}",
        ]
        if self.dialect is UpsertDialect.SQLITE:
            conflict = ", ".join(quote(column) for column in self.conflict_columns)
            lines.append("WHERE true")
            lines.append(f"ON CONFLICT ({conflict}) DO UPDATE SET")
        else:
            lines.append("ON DUPLICATE KEY UPDATE")
        lines.append(f"    {self.update_fields};")
        return "\n".join(lines)


def build_query(
    table: str,
    suffix: str,
    fields: tuple[str, ...],
    locale: str,
    dialect: UpsertDialect = UpsertDialect.MYSQL,
) -> MigrationQuery:
    """Build the query for one table variant.

    Args:
        table: Base table name (e.g. ``Page``)
        suffix: Table variant suffix: ``""``, ``"_Live"`` or ``"_Versions"``
        fields: Localised field names in declaration order
        locale: Legacy locale whose columns are copied
        dialect: SQL flavour of the upsert

    Returns:
        MigrationQuery targeting ``<table>_Localised<suffix>``
    """
    is_versions = suffix == VERSIONS_SUFFIX
    return MigrationQuery(
        target_table=f"{table}_Localised{suffix}",
        source_table=f"{table}{suffix}",
        id_column="RecordID" if is_versions else "ID",
        locale=locale,
        fields=tuple(fields),
        include_version=is_versions,
        dialect=dialect,
    )
