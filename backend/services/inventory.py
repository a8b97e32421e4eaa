"""
Inventory aggregation and stock writes against the vendor API.

Products come back from Shopify without stock; stock lives in inventory levels
keyed by inventory_item_id (one level per item per location). We join the two so
every variant carries `inventory_by_location`.
"""

from copy import deepcopy
from typing import Dict, Iterable, List, Mapping, Optional

from core.errors import DomainError
from core.logging import get_logger
from core.shopify_client import ShopifyClient

logger = get_logger(__name__)


def collect_inventory_item_ids(products: Iterable[dict]) -> List[int]:
    """Unique inventory item ids, in first-seen order."""
    seen = set()
    out: List[int] = []
    for product in products:
        for variant in product.get("variants") or []:
            item_id = variant.get("inventory_item_id")
            if item_id is None or item_id in seen:
                continue
            seen.add(item_id)
            out.append(item_id)
    return out


def _location_name(level: Mapping, location_names: Mapping) -> str:
    location_id = level.get("location_id")
    return level.get("location_name") or location_names.get(location_id) or f"Location {location_id}"


def group_levels_by_item(
    levels: Iterable[Mapping],
    location_names: Optional[Mapping[int, str]] = None,
) -> Dict[int, List[dict]]:
    """
    Build inventory_item_id -> [{location_id, location_name, available}].

    When the same item reports a location twice, the first record wins.
    """
    location_names = location_names or {}
    grouped: Dict[int, List[dict]] = {}
    seen_locations: Dict[int, set] = {}
    for level in levels:
        item_id = level.get("inventory_item_id")
        location_id = level.get("location_id")
        records = grouped.setdefault(item_id, [])
        seen = seen_locations.setdefault(item_id, set())
        if location_id in seen:
            continue
        seen.add(location_id)
        records.append(
            {
                "location_id": location_id,
                "location_name": _location_name(level, location_names),
                "available": level.get("available"),
            }
        )
    return grouped


def attach_inventory(products: Iterable[dict], levels_by_item: Mapping[int, List[dict]]) -> List[dict]:
    """Return copies of `products` whose variants carry `inventory_by_location`."""
    out = []
    for product in products:
        enriched = deepcopy(dict(product))
        enriched["variants"] = [
            {
                **variant,
                "inventory_by_location": deepcopy(levels_by_item.get(variant.get("inventory_item_id"), [])),
            }
            for variant in enriched.get("variants") or []
        ]
        out.append(enriched)
    return out


def aggregate_inventory(
    products: Iterable[dict],
    levels: Iterable[Mapping],
    location_names: Optional[Mapping[int, str]] = None,
) -> List[dict]:
    return attach_inventory(products, group_levels_by_item(levels, location_names))


def fetch_products(client: ShopifyClient) -> List[dict]:
    """Active products with per-location stock on every variant."""
    products = client.list_active_products()
    item_ids = collect_inventory_item_ids(products)

    levels: List[dict] = []
    location_names: Dict[int, str] = {}
    if item_ids:
        # one request for every item
        levels = client.list_inventory_levels(item_ids)
        if any(not level.get("location_name") for level in levels):
            location_names = {loc["id"]: loc.get("name") for loc in client.list_locations() if "id" in loc}

    logger.info(
        "Fetched products",
        products=len(products),
        inventory_items=len(item_ids),
        inventory_levels=len(levels),
    )
    return aggregate_inventory(products, levels, location_names)


def update_stock(
    client: ShopifyClient,
    variant_id: int | str,
    location_id: Optional[int],
    quantity: int,
) -> dict:
    """
    Blind-set the available quantity of a variant at one location.

    Without a location the first location holding the item is used.
    Returns the vendor's inventory level plus the resolved `location_id`.
    """
    variant = client.get_variant(variant_id)
    inventory_item_id = variant.get("inventory_item_id")
    if inventory_item_id is None:
        raise DomainError(f"Variant {variant_id} has no inventory item")

    target_location_id = location_id
    if not target_location_id:
        levels = client.list_inventory_levels([inventory_item_id])
        if not levels:
            raise DomainError("No inventory location found for this product")
        target_location_id = levels[0]["location_id"]

    logger.info(
        "Setting inventory level",
        variant_id=str(variant_id),
        inventory_item_id=inventory_item_id,
        location_id=target_location_id,
        quantity=quantity,
    )
    level = client.set_inventory_level(target_location_id, inventory_item_id, quantity)
    return {**level, "location_id": target_location_id}
