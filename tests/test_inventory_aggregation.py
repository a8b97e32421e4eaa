"""Tests for joining variants with their per-location inventory levels."""

from copy import deepcopy

import pytest

from core.errors import DomainError
from factories import FakeResponse, make_level, make_product, make_variant
from services.inventory import (
    aggregate_inventory,
    collect_inventory_item_ids,
    fetch_products,
    group_levels_by_item,
    update_stock,
)


class TestCollectInventoryItemIds:
    def test_unique_in_first_seen_order(self):
        products = [
            make_product(1, variants=[make_variant(10, 100), make_variant(11, 101)]),
            make_product(2, variants=[make_variant(20, 101), make_variant(21, 200)]),
        ]
        assert collect_inventory_item_ids(products) == [100, 101, 200]

    def test_variants_without_item_are_skipped(self):
        products = [make_product(1, variants=[make_variant(10, None)])]
        assert collect_inventory_item_ids(products) == []


class TestGroupLevelsByItem:
    def test_groups_by_inventory_item(self):
        levels = [make_level(100, 1, 5), make_level(100, 2, 12), make_level(200, 1, 0)]
        grouped = group_levels_by_item(levels)
        assert [r["location_id"] for r in grouped[100]] == [1, 2]
        assert grouped[200] == [{"location_id": 1, "location_name": "Location 1", "available": 0}]

    def test_duplicate_location_keeps_first(self):
        levels = [make_level(100, 1, 5), make_level(100, 1, 99)]
        assert group_levels_by_item(levels)[100] == [
            {"location_id": 1, "location_name": "Location 1", "available": 5}
        ]

    def test_location_name_resolution(self):
        levels = [
            make_level(100, 1, 5, location_name="Warehouse"),
            make_level(100, 2, 5),
            make_level(100, 3, 5),
        ]
        grouped = group_levels_by_item(levels, {2: "Shop floor", 1: "ignored"})
        assert [r["location_name"] for r in grouped[100]] == ["Warehouse", "Shop floor", "Location 3"]


class TestAggregateInventory:
    def test_variants_carry_inventory_by_location(self):
        products = [make_product(1, variants=[make_variant(10, 100), make_variant(11, 101)])]
        levels = [make_level(100, 1, 5), make_level(100, 2, 12)]

        result = aggregate_inventory(products, levels)

        first, second = result[0]["variants"]
        assert [(r["location_id"], r["available"]) for r in first["inventory_by_location"]] == [(1, 5), (2, 12)]
        assert second["inventory_by_location"] == []

    def test_native_fields_pass_through(self):
        products = [make_product(1, variants=[make_variant(10, 100, barcode="123")], handle="t-shirt")]
        result = aggregate_inventory(products, [])
        assert result[0]["handle"] == "t-shirt"
        assert result[0]["variants"][0]["barcode"] == "123"

    def test_inputs_are_not_mutated(self):
        products = [make_product(1, variants=[make_variant(10, 100)])]
        levels = [make_level(100, 1, 5)]
        snapshot = (deepcopy(products), deepcopy(levels))

        aggregate_inventory(products, levels)

        assert (products, levels) == snapshot

    def test_idempotent(self):
        products = [make_product(1, variants=[make_variant(10, 100), make_variant(11, 100)])]
        levels = [make_level(100, 1, 5), make_level(100, 1, 8), make_level(100, 2, 0)]
        assert aggregate_inventory(products, levels) == aggregate_inventory(products, levels)

    def test_shared_item_records_are_independent_copies(self):
        products = [make_product(1, variants=[make_variant(10, 100), make_variant(11, 100)])]
        result = aggregate_inventory(products, [make_level(100, 1, 5)])
        a, b = result[0]["variants"]
        a["inventory_by_location"][0]["available"] = 50
        assert b["inventory_by_location"][0]["available"] == 5


class TestFetchProducts:
    def test_single_inventory_request(self, shopify, session):
        session.add(
            "GET",
            "products.json",
            FakeResponse(200, {"products": [make_product(1, variants=[make_variant(10, 100), make_variant(11, 101)])]}),
        )
        session.add(
            "GET",
            "inventory_levels.json",
            FakeResponse(200, {"inventory_levels": [make_level(100, 1, 5, location_name="Shop")]}),
        )

        products = fetch_products(shopify)

        assert session.paths() == [("GET", "products.json"), ("GET", "inventory_levels.json")]
        assert products[0]["variants"][0]["inventory_by_location"][0]["location_name"] == "Shop"

    def test_location_names_looked_up_when_missing(self, shopify, session):
        session.add("GET", "products.json", FakeResponse(200, {"products": [make_product(1, variants=[make_variant(10, 100)])]}))
        session.add("GET", "inventory_levels.json", FakeResponse(200, {"inventory_levels": [make_level(100, 7, 5)]}))
        session.add("GET", "locations.json", FakeResponse(200, {"locations": [{"id": 7, "name": "Back room"}]}))

        products = fetch_products(shopify)

        assert products[0]["variants"][0]["inventory_by_location"][0]["location_name"] == "Back room"

    def test_no_inventory_request_without_variants(self, shopify, session):
        session.add("GET", "products.json", FakeResponse(200, {"products": [make_product(1, variants=[])]}))
        assert fetch_products(shopify)[0]["variants"] == []
        assert session.paths() == [("GET", "products.json")]


class TestUpdateStock:
    def test_sets_given_location(self, shopify, session):
        session.add("GET", "variants/10.json", FakeResponse(200, {"variant": make_variant(10, 100)}))
        session.add(
            "POST",
            "inventory_levels/set.json",
            FakeResponse(200, {"inventory_level": make_level(100, 7, 4)}),
        )

        level = update_stock(shopify, 10, 7, 4)

        assert level["location_id"] == 7
        assert session.calls[-1]["json"] == {"location_id": 7, "inventory_item_id": 100, "available": 4}

    def test_defaults_to_first_location(self, shopify, session):
        session.add("GET", "variants/10.json", FakeResponse(200, {"variant": make_variant(10, 100)}))
        session.add(
            "GET",
            "inventory_levels.json",
            FakeResponse(200, {"inventory_levels": [make_level(100, 3, 1), make_level(100, 4, 2)]}),
        )
        session.add("POST", "inventory_levels/set.json", FakeResponse(200, {"inventory_level": make_level(100, 3, 9)}))

        level = update_stock(shopify, 10, None, 9)

        assert level["location_id"] == 3
        assert session.calls[-1]["json"]["location_id"] == 3

    def test_no_location_available(self, shopify, session):
        session.add("GET", "variants/10.json", FakeResponse(200, {"variant": make_variant(10, 100)}))
        session.add("GET", "inventory_levels.json", FakeResponse(200, {"inventory_levels": []}))

        with pytest.raises(DomainError, match="No inventory location found"):
            update_stock(shopify, 10, None, 9)
        assert ("POST", "inventory_levels/set.json") not in session.paths()

    def test_unknown_variant(self, shopify, session):
        with pytest.raises(DomainError) as exc:
            update_stock(shopify, 999, 1, 9)
        assert exc.value.status_code == 404
