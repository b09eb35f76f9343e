"""Unit tests for SchemaMigrationPlanner."""

import pytest

from backend.fluent.migration.errors import (
    InvalidIdentifierError,
    MigrationConfigError,
    PlanConflictError,
)
from backend.fluent.migration.planner import MigrationPlan, SchemaMigrationPlanner
from backend.fluent.migration.queries import build_query
from backend.fluent.migration.registry import LocalisedTypeRegistry


def make_registry(versioned: bool = False) -> LocalisedTypeRegistry:
    registry = LocalisedTypeRegistry()
    registry.register("DataObject")
    registry.register(
        "Page", parent="DataObject", tables={"Page": ["Title", "Content"]}, versioned=versioned
    )
    return registry


def test_empty_locale_list_is_config_error() -> None:
    planner = SchemaMigrationPlanner(make_registry())

    with pytest.raises(MigrationConfigError):
        planner.plan([])

    with pytest.raises(MigrationConfigError):
        planner.plan(None)


def test_invalid_locale_is_rejected() -> None:
    planner = SchemaMigrationPlanner(make_registry())

    with pytest.raises(InvalidIdentifierError):
        planner.plan(["fr'; --"])


def test_unversioned_type_plans_one_query() -> None:
    plan = SchemaMigrationPlanner(make_registry()).plan(["fr"])

    queries = plan.queries_for("fr")
    assert len(queries) == 1
    query = queries[0]
    assert query.target_table == "Page_Localised"
    assert query.source_table == "Page"
    assert query.id_column == "ID"
    assert query.select_fields == "`Title_fr` AS `Title`, `Content_fr` AS `Content`"
    assert query.update_fields == "`Title` = `Title_fr`, `Content` = `Content_fr`"


def test_versioned_type_plans_three_tables() -> None:
    plan = SchemaMigrationPlanner(make_registry(versioned=True)).plan(["fr"])

    queries = plan.queries_for("fr")
    assert [q.target_table for q in queries] == [
        "Page_Localised",
        "Page_Localised_Live",
        "Page_Localised_Versions",
    ]
    versions = queries[2]
    assert versions.id_column == "RecordID"
    assert versions.include_version is True
    assert queries[1].id_column == "ID"


def test_plan_is_ordered_by_locale() -> None:
    plan = SchemaMigrationPlanner(make_registry()).plan(["fr", "de"])

    assert plan.locales() == ["fr", "de"]
    assert [(locale, q.locale) for locale, q in plan] == [("fr", "fr"), ("de", "de")]
    assert len(plan) == 2


def test_non_localised_types_and_empty_tables_are_skipped() -> None:
    registry = make_registry()
    registry.register("Member", parent="DataObject", tables={"Member": ["Email"]}, localised=False)
    registry.register("Tag", parent="DataObject", tables={"Tag": []}, localised=True)

    plan = SchemaMigrationPlanner(registry).plan(["fr"])

    assert [q.target_table for q in plan.queries_for("fr")] == ["Page_Localised"]


def test_subtype_sharing_ancestor_table_is_deduplicated() -> None:
    registry = make_registry(versioned=True)
    registry.register("BlogPost", parent="Page", tables={"BlogPost": ["Summary"]})

    plan = SchemaMigrationPlanner(registry).plan(["fr"])

    assert [q.target_table for q in plan.queries_for("fr")] == [
        "Page_Localised",
        "Page_Localised_Live",
        "Page_Localised_Versions",
        "BlogPost_Localised",
        "BlogPost_Localised_Live",
        "BlogPost_Localised_Versions",
    ]


def test_conflicting_target_table_fails_loudly() -> None:
    registry = make_registry()
    registry.register("Other", parent="DataObject", tables={"Page": ["Summary"]})

    with pytest.raises(PlanConflictError, match="Page_Localised"):
        SchemaMigrationPlanner(registry).plan(["fr"])


def test_root_type_restricts_planned_types() -> None:
    registry = make_registry()
    registry.register("Testimonial", parent="DataObject", tables={"Testimonial": ["Quote"]})
    planner = SchemaMigrationPlanner(registry).set_migrate_subclasses_of("Testimonial")

    assert planner.root_type == "Testimonial"
    assert [q.target_table for q in planner.plan_for_locale("fr")] == ["Testimonial_Localised"]


def test_unknown_root_type_is_config_error() -> None:
    planner = SchemaMigrationPlanner(make_registry(), root_type="Missing")

    with pytest.raises(MigrationConfigError, match="Unknown root type"):
        planner.plan(["fr"])


def test_locale_without_queries_still_listed() -> None:
    registry = LocalisedTypeRegistry()
    registry.register("DataObject")

    plan = SchemaMigrationPlanner(registry).plan(["fr"])

    assert plan.locales() == ["fr"]
    assert plan.queries_for("fr") == []


def test_plan_add_reports_duplicates() -> None:
    plan = MigrationPlan()
    query = build_query("Page", "", ("Title",), "fr")

    assert plan.add(query) is True
    assert plan.add(build_query("Page", "", ("Title",), "fr")) is False
    assert len(plan) == 1


def test_hierarchy_plans_each_table_from_its_owner() -> None:
    """Test a registered hierarchy always yields a plan without conflicts."""
    registry = LocalisedTypeRegistry()
    registry.register("DataObject")
    registry.register("SiteTree", parent="DataObject", tables={"SiteTree": ["Title"]})
    registry.register("Page", parent="SiteTree", tables={"Page": ["MenuTitle"]})

    queries = SchemaMigrationPlanner(registry).plan_for_locale("fr")

    assert [(q.target_table, q.fields) for q in queries] == [
        ("SiteTree_Localised", ("Title",)),
        ("Page_Localised", ("MenuTitle",)),
    ]
