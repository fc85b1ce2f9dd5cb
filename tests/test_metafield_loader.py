"""Tests for metafield migration."""

import pytest

from conftest import SOURCE, TARGET
from shop_migrate.loaders import MetafieldLoader
from shop_migrate.models import ConflictMode, EntityKind, MigrationRequest


def metafield(namespace, key, value, type_="single_line_text_field", **extra):
    return dict(namespace=namespace, key=key, value=value, type=type_, **extra)


def statuses(result):
    return [r.status.value for r in result.results]


@pytest.fixture
def mug(source, target):
    product = source.add("products", id=101, handle="mug", title="Mug")
    source.metafields[("products", "101")].extend([
        metafield("custom", "color", "red", id=1),
        metafield("specs", "size", "large", id=2),
    ])
    return product


class TestMetafields:
    """Test per-owner metafield sync."""

    def test_metafields_created_on_matched_owner(self, source, target, mug):
        target_mug = target.add("products", id=555, handle="mug")
        result = MetafieldLoader(source, target).load(["101"])

        assert statuses(result) == ["created"]
        assert result.results[0].title == "Metafields (Mug)"
        assert result.results[0].message == "2 created, 0 updated, 0 skipped, 0 errors"
        assert [w[:2] for w in target.writes] == [
            ("POST", "/admin/api/2024-01/products/555/metafields.json"),
            ("POST", "/admin/api/2024-01/products/555/metafields.json"),
        ]
        assert target.writes[0][2] == {"metafield": metafield("custom", "color", "red")}
        assert len(target.metafields[("products", str(target_mug["id"]))]) == 2

    def test_existing_metafield_updated_aggregate_still_created(self, source, target, mug):
        target.add("products", id=555, handle="mug")
        target.metafields[("products", "555")].append(metafield("custom", "color", "blue", id=70))

        result = MetafieldLoader(source, target, conflict_mode=ConflictMode.OVERWRITE).load(["101"])

        assert statuses(result) == ["created"]
        assert result.results[0].message == "1 created, 1 updated, 0 skipped, 0 errors"
        put = target.writes_of("PUT")[0]
        assert put[1] == "/admin/api/2024-01/products/555/metafields/70.json"
        assert put[2] == {"metafield": {"id": 70, "value": "red", "type": "single_line_text_field"}}

    def test_existing_metafield_skipped(self, source, target, mug):
        target.add("products", id=555, handle="mug")
        target.metafields[("products", "555")].append(metafield("custom", "color", "blue", id=70))

        result = MetafieldLoader(source, target, conflict_mode=ConflictMode.SKIP).load(["101"])

        assert result.results[0].message == "1 created, 0 updated, 1 skipped, 0 errors"
        assert target.writes_of("PUT") == []

    def test_target_owner_missing_is_an_error(self, source, target, mug):
        for mode in (ConflictMode.OVERWRITE, ConflictMode.SKIP):
            result = MetafieldLoader(source, target, conflict_mode=mode).load(["101"])
            assert statuses(result) == ["error"]
            assert result.results[0].message == "target resource not found"
        assert target.writes == []

    def test_owner_without_metafields_is_skipped(self, source, target):
        source.add("products", id=7, handle="plain")
        result = MetafieldLoader(source, target).load(["7"])

        assert statuses(result) == ["skipped"]
        assert result.results[0].message == "no metafields"
        assert result.results[0].title == "Metafields (products #7)"

    def test_owner_without_handle_is_an_error(self, source, target):
        source.add("products", id=8, title="No handle")
        source.metafields[("products", "8")].append(metafield("custom", "color", "red"))

        result = MetafieldLoader(source, target).load(["8"])

        assert statuses(result) == ["error"]
        assert result.results[0].message == "no handle found"

    def test_failing_field_marks_owner_as_error(self, source, target, mug):
        target.add("products", id=555, handle="mug")
        target.fail("POST", "products/555/metafields.json")

        result = MetafieldLoader(source, target).load(["101"])

        assert statuses(result) == ["error"]
        assert result.results[0].message == "0 created, 0 updated, 0 skipped, 2 errors"

    def test_dry_run_predicts_tally(self, source, target, mug):
        target.add("products", id=555, handle="mug")
        target.metafields[("products", "555")].append(metafield("custom", "color", "blue", id=70))

        result = MetafieldLoader(source, target, dry_run=True).load(["101"])

        assert result.results[0].message == "dry run: 1 created, 1 updated, 0 skipped, 0 errors"
        assert target.writes == []

    def test_unreadable_owner_is_contained(self, source, target, mug):
        source.add("products", id=102, handle="cap")
        source.metafields[("products", "102")].append(metafield("custom", "color", "blue"))
        target.add("products", id=556, handle="cap")
        source.fail("GET", "products/101.json")

        result = MetafieldLoader(source, target).load(["101", "102"])

        assert statuses(result) == ["error", "created"]


class TestOwnerResolution:
    """Test target owner lookup by handle."""

    def test_filtered_lookup(self, target):
        target.add("products", id=555, handle="mug")
        loader = MetafieldLoader(target, target)

        assert loader.resolve_target_owner("mug")["id"] == 555
        assert target.reads == ["/admin/api/2024-01/products.json?handle=mug&limit=1"]

    def test_falls_back_to_full_scan(self, target):
        target.add("products", id=555, handle="mug")
        target.fail("GET", "products.json?handle=")
        loader = MetafieldLoader(target, target)

        assert loader.resolve_target_owner("mug")["id"] == 555
        assert target.reads[-1] == "/admin/api/2024-01/products.json?limit=250"

    def test_collections_check_both_sub_types(self, target):
        target.add("smart_collections", id=9, handle="sale")
        loader = MetafieldLoader(target, target, owner_type="collections")

        assert loader.resolve_target_owner("sale")["id"] == 9

    def test_collections_scan_fallback(self, target):
        target.add("smart_collections", id=9, handle="sale")
        target.fail("GET", "collections.json?handle=")
        loader = MetafieldLoader(target, target, owner_type="collections")

        assert loader.resolve_target_owner("sale")["id"] == 9

    def test_unknown_owner_type(self, source, target):
        with pytest.raises(ValueError):
            MetafieldLoader(source, target, owner_type="metaobjects")


def test_collection_metafields_through_orchestrator(orchestrator, source, target):
    source.add("custom_collections", id=3, handle="summer", title="Summer")
    source.metafields[("collections", "3")].append(metafield("custom", "banner", "sunny"))
    target.add("custom_collections", id=40, handle="summer")

    report = orchestrator.migrate(MigrationRequest(
        source=SOURCE,
        target=TARGET,
        entity_kind=EntityKind.METAFIELDS,
        item_ids=["3"],
        owner_type_hint="collections",
    ))

    assert [r.status.value for r in report.results] == ["created"]
    assert target.writes_of("POST")[0][1] == "/admin/api/2024-01/collections/40/metafields.json"
