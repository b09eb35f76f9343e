"""Registry of content types and the localised fields they declare."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from backend.fluent.migration.errors import MigrationConfigError
from backend.fluent.migration.identifiers import validate_identifier

logger = logging.getLogger(__name__)

DEFAULT_ROOT_TYPE = "DataObject"


@dataclass(frozen=True)
class LocalisedType:
    """A content type and the localised fields stored in its own tables."""

    name: str
    parent: str | None = None
    tables: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    versioned: bool = False
    localised: bool = False


class LocalisedTypeRegistry:
    """Explicit registry of content types, populated at startup.

    Types form a hierarchy through ``parent``. Localisation and versioning
    are inherited by subtypes, and a subtype's localised tables include
    those of its ancestors.
    """

    def __init__(self) -> None:
        self._types: dict[str, LocalisedType] = {}

    def register(
        self,
        name: str,
        parent: str | None = None,
        tables: Mapping[str, Sequence[str]] | None = None,
        versioned: bool = False,
        localised: bool | None = None,
    ) -> LocalisedType:
        """Register a content type.

        Args:
            name: Type name, unique within the registry
            parent: Name of an already registered parent type
            tables: Table name to localised field names, in field order
            versioned: Whether the type keeps ``_Live``/``_Versions`` tables
            localised: Whether the type is localised; defaults to whether it
                declares any localised field

        Returns:
            The registered type

        Raises:
            ValueError: On duplicate names, unknown parents, or a table
                already owned by an ancestor
            InvalidIdentifierError: If a table or field name is unsafe
        """
        if not name:
            raise ValueError("Type name must not be empty")
        if name in self._types:
            raise ValueError(f"Type already registered: {name}")
        if parent is not None and parent not in self._types:
            raise ValueError(f"Unknown parent type {parent!r} for {name!r}")

        checked: dict[str, tuple[str, ...]] = {}
        for table, fields in (tables or {}).items():
            validate_identifier(table, "table")
            owner = self._table_owner(table, parent)
            if owner is not None:
                raise ValueError(
                    f"Table {table!r} of {name!r} is already owned by ancestor {owner!r}"
                )
            checked[table] = tuple(validate_identifier(f, "field") for f in fields)

        if localised is None:
            localised = any(checked.values())

        entry = LocalisedType(
            name=name,
            parent=parent,
            tables=checked,
            versioned=versioned,
            localised=localised,
        )
        self._types[name] = entry
        return entry

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def get(self, name: str) -> LocalisedType:
        try:
            return self._types[name]
        except KeyError:
            raise KeyError(f"Unknown type: {name}") from None

    def ancestry(self, name: str) -> list[LocalisedType]:
        """The type and its ancestors, root first."""
        chain = []
        current: str | None = name
        while current is not None:
            entry = self.get(current)
            chain.append(entry)
            current = entry.parent
        chain.reverse()
        return chain

    def subclasses_of(self, root: str) -> list[str]:
        """Names of ``root`` and all its descendants, in registration order."""
        self.get(root)
        return [
            name
            for name in self._types
            if any(entry.name == root for entry in self.ancestry(name))
        ]

    def is_localised(self, name: str) -> bool:
        return any(entry.localised for entry in self.ancestry(name))

    def is_versioned(self, name: str) -> bool:
        return any(entry.versioned for entry in self.ancestry(name))

    def _table_owner(self, table: str, parent: str | None) -> str | None:
        """Name of the ancestor (from ``parent`` up) declaring ``table``, if any."""
        if parent is None:
            return None
        for entry in self.ancestry(parent):
            if table in entry.tables:
                return entry.name
        return None

    def localised_tables(self, name: str) -> dict[str, tuple[str, ...]]:
        """Table to localised fields for the type, ancestors' tables first.

        Each table belongs to exactly one type in the chain, so every table
        keeps the field list of its owner.
        """
        tables: dict[str, tuple[str, ...]] = {}
        for entry in self.ancestry(name):
            for table, fields in entry.tables.items():
                tables[table] = fields
        return tables


class TypeManifestEntry(BaseModel):
    """One content type in a YAML manifest."""

    name: str
    parent: str | None = None
    versioned: bool = False
    localised: bool | None = None
    tables: dict[str, list[str]] = Field(default_factory=dict)


class TypeManifest(BaseModel):
    """YAML manifest listing content types in parent-first order."""

    types: list[TypeManifestEntry]


def build_registry(manifest: TypeManifest) -> LocalisedTypeRegistry:
    """Register every manifest entry, in order."""
    registry = LocalisedTypeRegistry()
    for entry in manifest.types:
        registry.register(
            entry.name,
            parent=entry.parent,
            tables=entry.tables,
            versioned=entry.versioned,
            localised=entry.localised,
        )
    return registry


def load_registry(path: Path | str) -> LocalisedTypeRegistry:
    """Load a registry from a YAML manifest.

    Raises:
        MigrationConfigError: If the file is missing or does not describe
            a valid type hierarchy
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise MigrationConfigError(f"Cannot read type manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise MigrationConfigError(f"Invalid YAML in type manifest {path}: {e}") from e

    try:
        manifest = TypeManifest.model_validate(data or {})
        registry = build_registry(manifest)
    except (ValidationError, ValueError) as e:
        raise MigrationConfigError(f"Invalid type manifest {path}: {e}") from e

    logger.info(f"Loaded {len(registry)} content types from {path}")
    return registry
