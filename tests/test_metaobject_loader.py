"""Tests for metaobject definition and entry migration."""

import pytest

from shop_migrate.loaders import DefinitionPhase, MetaobjectLoader
from shop_migrate.models import ConflictMode

HEX_FIELD = {
    "key": "hex",
    "name": "Hex",
    "type": {"name": "single_line_text_field"},
    "required": True,
    "description": None,
    "validations": [],
}


def statuses(result):
    return [r.status.value for r in result.results]


@pytest.fixture
def color(source):
    definition = source.add_definition("color", "Color", [HEX_FIELD], id_="gid://shopify/MetaobjectDefinition/1")
    source.add_entry("color", "red", [{"key": "hex", "value": "#f00", "type": "single_line_text_field"}])
    source.add_entry("color", "blue", [
        {"key": "hex", "value": "#00f", "type": "single_line_text_field"},
        {"key": "label", "value": "", "type": "single_line_text_field"},
    ])
    return definition


def load(source, target, ids, **kwargs):
    loader = MetaobjectLoader(source, target, **kwargs)
    return loader, loader.load(ids)


class TestDefinitions:
    """Test the define-target phase."""

    def test_definition_created_before_entries(self, source, target, color):
        loader, result = load(source, target, [color["id"]])

        assert [r.title for r in result.results] == ["Definition: Color", "Color: red", "Color: blue"]
        assert statuses(result) == ["created", "created", "created"]
        assert [w[1] for w in target.writes] == [
            "metaobjectDefinitionCreate", "metaobjectCreate", "metaobjectCreate"
        ]
        assert loader.phases == {"color": DefinitionPhase.DONE}

    def test_definition_create_input(self, source, target, color):
        load(source, target, [color["id"]])

        definition = target.writes[0][2]["definition"]
        assert definition == {
            "type": "color",
            "name": "Color",
            "fieldDefinitions": [
                {"key": "hex", "name": "Hex", "type": "single_line_text_field", "required": True}
            ],
            "access": {"storefront": "PUBLIC_READ"},
        }

    def test_existing_definition_is_skipped_but_entries_sync(self, source, target, color):
        target.add_definition("color", "Color")
        _, result = load(source, target, [color["id"]])

        assert result.results[0].status.value == "skipped"
        assert result.results[0].message == "already exists"
        assert statuses(result)[1:] == ["created", "created"]
        assert "metaobjectDefinitionCreate" not in [w[1] for w in target.writes]

    def test_user_errors_abort_entries(self, source, target, color):
        target.user_errors["metaobjectDefinitionCreate"] = [
            {"field": ["definition", "type"], "message": "Type is reserved"}
        ]
        loader, result = load(source, target, [color["id"]])

        assert statuses(result) == ["error"]
        assert result.results[0].message == "Type is reserved"
        assert [w[1] for w in target.writes] == ["metaobjectDefinitionCreate"]
        assert loader.phases == {"color": DefinitionPhase.ABORTED}

    def test_transport_failure_aborts_entries(self, source, target, color):
        target.fail("GRAPHQL", "metaobjectDefinitionCreate")
        loader, result = load(source, target, [color["id"]])

        assert statuses(result) == ["error"]
        assert loader.phases["color"] == DefinitionPhase.ABORTED

    def test_only_selected_definitions(self, source, target, color):
        source.add_definition("size", "Size")
        _, result = load(source, target, [color["id"]])
        assert "Definition: Size" not in [r.title for r in result.results]

    def test_aborted_definition_does_not_stop_the_next(self, source, target, color):
        size = source.add_definition("size", "Size")
        source.add_entry("size", "large")
        target.fail("GRAPHQL", "metaobjectDefinitionCreate")
        target.add_definition("size", "Size")

        loader, result = load(source, target, [color["id"], size["id"]])

        assert loader.phases == {"color": DefinitionPhase.ABORTED, "size": DefinitionPhase.DONE}
        assert statuses(result) == ["error", "skipped", "created"]


class TestEntries:
    """Test the sync-entries phase."""

    def test_empty_fields_are_dropped(self, source, target, color):
        load(source, target, [color["id"]])

        blue = [w for w in target.writes if w[1] == "metaobjectCreate"][1][2]["metaobject"]
        assert blue == {"type": "color", "handle": "blue", "fields": [{"key": "hex", "value": "#00f"}]}

    def test_existing_entry_skipped(self, source, target, color):
        target.add_definition("color", "Color")
        target.add_entry("color", "red")
        _, result = load(source, target, [color["id"]], conflict_mode=ConflictMode.SKIP)

        assert statuses(result) == ["skipped", "skipped", "created"]

    def test_existing_entry_overwritten(self, source, target, color):
        target.add_definition("color", "Color")
        existing = target.add_entry("color", "red", id_="gid://shopify/Metaobject/900")
        _, result = load(source, target, [color["id"]], conflict_mode=ConflictMode.OVERWRITE)

        assert statuses(result) == ["skipped", "updated", "created"]
        update = [w for w in target.writes if w[1] == "metaobjectUpdate"][0][2]
        assert update == {"id": existing["id"], "metaobject": {"fields": [{"key": "hex", "value": "#f00"}]}}

    def test_entry_user_errors_are_contained(self, source, target, color):
        target.user_errors["metaobjectCreate"] = [{"field": ["handle"], "message": "Handle taken"}]
        _, result = load(source, target, [color["id"]])

        assert statuses(result) == ["created", "error", "error"]
        assert result.results[1].message == "Handle taken"

    def test_dry_run_predicts_without_writing(self, source, target, color):
        target.add_definition("color", "Color")
        target.add_entry("color", "red")
        _, result = load(source, target, [color["id"]], dry_run=True)

        assert statuses(result) == ["skipped", "updated", "created"]
        assert all(r.message == "dry run" for r in result.results[1:])
        assert target.writes == []

    def test_dry_run_of_new_definition_predicts_entries(self, source, target, color):
        _, result = load(source, target, [color["id"]], dry_run=True)

        assert statuses(result) == ["created", "created", "created"]
        assert target.writes == []

    def test_entry_fetch_failure_is_reported_for_the_entries(self, source, target, color):
        source.fail("GRAPHQL", "metaobjects(")
        loader, result = load(source, target, [color["id"]])

        assert statuses(result) == ["created", "error"]
        assert [r.title for r in result.results] == ["Definition: Color", "Color: entries"]
        assert "boom" in result.results[1].message
        assert loader.phases == {"color": DefinitionPhase.ABORTED}
