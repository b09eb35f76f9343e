"""Unit tests for the localised type registry."""

from pathlib import Path

import pytest

from backend.fluent.migration.errors import InvalidIdentifierError, MigrationConfigError
from backend.fluent.migration.registry import LocalisedTypeRegistry, load_registry


@pytest.fixture
def registry() -> LocalisedTypeRegistry:
    registry = LocalisedTypeRegistry()
    registry.register("DataObject")
    registry.register("SiteTree", parent="DataObject", tables={"SiteTree": ["Title", "Content"]}, versioned=True)
    registry.register("Page", parent="SiteTree")
    registry.register("BlogPost", parent="Page", tables={"BlogPost": ["Summary"]})
    registry.register("Member", parent="DataObject", tables={"Member": []})
    return registry


def test_subclasses_include_root_in_registration_order(registry: LocalisedTypeRegistry) -> None:
    assert registry.subclasses_of("DataObject") == [
        "DataObject",
        "SiteTree",
        "Page",
        "BlogPost",
        "Member",
    ]
    assert registry.subclasses_of("Page") == ["Page", "BlogPost"]


def test_localisation_and_versioning_are_inherited(registry: LocalisedTypeRegistry) -> None:
    assert registry.is_localised("DataObject") is False
    assert registry.is_localised("Page") is True
    assert registry.is_versioned("BlogPost") is True
    assert registry.is_localised("Member") is False


def test_localised_tables_include_ancestors(registry: LocalisedTypeRegistry) -> None:
    assert registry.localised_tables("BlogPost") == {
        "SiteTree": ("Title", "Content"),
        "BlogPost": ("Summary",),
    }


def test_ancestry_is_root_first(registry: LocalisedTypeRegistry) -> None:
    assert [entry.name for entry in registry.ancestry("BlogPost")] == [
        "DataObject",
        "SiteTree",
        "Page",
        "BlogPost",
    ]


def test_register_rejects_duplicates_and_unknown_parents(registry: LocalisedTypeRegistry) -> None:
    with pytest.raises(ValueError, match="already registered"):
        registry.register("Page")

    with pytest.raises(ValueError, match="Unknown parent"):
        registry.register("Orphan", parent="Missing")


def test_register_rejects_unsafe_identifiers() -> None:
    registry = LocalisedTypeRegistry()

    with pytest.raises(InvalidIdentifierError):
        registry.register("Bad", tables={"Page`; DROP TABLE x": ["Title"]})

    with pytest.raises(InvalidIdentifierError):
        registry.register("AlsoBad", tables={"Page": ["Title Name"]})


def test_unknown_type_raises_key_error(registry: LocalisedTypeRegistry) -> None:
    with pytest.raises(KeyError):
        registry.get("Missing")


def test_load_registry_from_yaml(tmp_path: Path) -> None:
    manifest = tmp_path / "types.yml"
    manifest.write_text(
        """
types:
  - name: DataObject
  - name: SiteTree
    parent: DataObject
    versioned: true
    tables:
      SiteTree: [Title, MenuTitle]
  - name: Testimonial
    parent: DataObject
    tables:
      Testimonial: [Quote]
"""
    )

    registry = load_registry(manifest)

    assert len(registry) == 3
    assert registry.is_versioned("SiteTree") is True
    assert registry.localised_tables("Testimonial") == {"Testimonial": ("Quote",)}


def test_load_registry_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MigrationConfigError, match="Cannot read"):
        load_registry(tmp_path / "missing.yml")


def test_load_registry_invalid_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "types.yml"
    manifest.write_text("types:\n  - parent: DataObject\n")

    with pytest.raises(MigrationConfigError, match="Invalid type manifest"):
        load_registry(manifest)


def test_load_registry_rejects_forward_parent(tmp_path: Path) -> None:
    manifest = tmp_path / "types.yml"
    manifest.write_text("types:\n  - name: Page\n    parent: SiteTree\n  - name: SiteTree\n")

    with pytest.raises(MigrationConfigError):
        load_registry(manifest)


def test_subtype_cannot_redeclare_ancestor_table() -> None:
    """Test a subtype adding fields to an ancestor's table is rejected at registration."""
    registry = LocalisedTypeRegistry()
    registry.register("DataObject")
    registry.register("SiteTree", parent="DataObject", tables={"SiteTree": ["Title"]})

    with pytest.raises(ValueError, match="already owned by ancestor 'SiteTree'"):
        registry.register("Page", parent="SiteTree", tables={"SiteTree": ["MenuTitle"]})

    assert "Page" not in registry


def test_sibling_types_may_declare_own_tables(registry: LocalisedTypeRegistry) -> None:
    registry.register("Event", parent="Page", tables={"Event": ["Venue"]})

    assert registry.localised_tables("Event") == {
        "SiteTree": ("Title", "Content"),
        "Event": ("Venue",),
    }


def test_load_registry_rejects_redeclared_ancestor_table(tmp_path: Path) -> None:
    manifest = tmp_path / "types.yml"
    manifest.write_text(
        """
types:
  - name: SiteTree
    tables:
      SiteTree: [Title]
  - name: Page
    parent: SiteTree
    tables:
      SiteTree: [MenuTitle]
"""
    )

    with pytest.raises(MigrationConfigError, match="already owned"):
        load_registry(manifest)
