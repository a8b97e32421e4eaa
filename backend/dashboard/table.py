from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from core.config import settings

SORT_KEYS = ("title", "vendor", "product_type", "tags", "price", "stock")
ASCENDING = "ascending"
DESCENDING = "descending"


@dataclass
class ProductFilters:
    name: str = ""
    vendor: str = ""
    type: str = ""
    tag: str = ""
    min_stock: Optional[int] = None


@dataclass
class SortConfig:
    key: str = "title"
    direction: str = ASCENDING

    def toggle(self, key: str) -> "SortConfig":
        """Same key flips the direction, a new key starts ascending."""
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        if self.key == key and self.direction == ASCENDING:
            return SortConfig(key, DESCENDING)
        return SortConfig(key, ASCENDING)


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _locations(product: dict):
    for variant in product.get("variants") or []:
        for location in variant.get("inventory_by_location") or []:
            yield variant, location


def _available(location: dict) -> int:
    return location.get("available") or 0


def total_stock(product: dict) -> int:
    return sum(_available(location) for _, location in _locations(product))


def lowest_price(product: dict) -> Optional[float]:
    prices = []
    for variant in product.get("variants") or []:
        try:
            prices.append(float(variant.get("price")))
        except (TypeError, ValueError):
            continue
    return min(prices) if prices else None


def matches(product: dict, filters: ProductFilters) -> bool:
    if filters.name and not _contains(product.get("title"), filters.name):
        return False
    if filters.vendor and not _contains(product.get("vendor"), filters.vendor):
        return False
    if filters.type and not _contains(product.get("product_type"), filters.type):
        return False
    if filters.tag and not _contains(product.get("tags"), filters.tag):
        return False
    if filters.min_stock is not None:
        if not any(_available(location) >= filters.min_stock for _, location in _locations(product)):
            return False
    return True


def _sort_value(product: dict, key: str) -> Any:
    if key == "stock":
        return total_stock(product)
    if key == "price":
        return lowest_price(product)
    value = product.get(key)
    if isinstance(value, str):
        return value.lower()
    return value


def sort_products(products: List[dict], sort: SortConfig) -> List[dict]:
    present = [p for p in products if _sort_value(p, sort.key) is not None]
    missing = [p for p in products if _sort_value(p, sort.key) is None]
    present.sort(key=lambda p: _sort_value(p, sort.key), reverse=sort.direction == DESCENDING)
    # missing values always go last
    return present + missing


def visible_products(products: List[dict], filters: ProductFilters, sort: SortConfig) -> List[dict]:
    return sort_products([p for p in products if matches(p, filters)], sort)


def is_low(location: dict, threshold: int) -> bool:
    available = _available(location)
    return available <= 0 or available < threshold


def low_stock_products(products: List[dict], threshold: Optional[int] = None) -> List[dict]:
    """Products with at least one variant location under the threshold."""
    threshold = settings.low_stock_threshold if threshold is None else threshold
    return [p for p in products if any(is_low(location, threshold) for _, location in _locations(p))]


def low_stock_lines(product: dict, threshold: Optional[int] = None) -> List[Tuple[dict, dict]]:
    """(variant, location) pairs under the threshold, for the detail line."""
    threshold = settings.low_stock_threshold if threshold is None else threshold
    return [(variant, location) for variant, location in _locations(product) if is_low(location, threshold)]


def product_image(product: dict) -> Optional[dict]:
    if product.get("image"):
        return product["image"]
    images = product.get("images") or []
    return images[0] if images else None


def variant_image(product: dict, variant: dict) -> Optional[dict]:
    image_id = variant.get("image_id")
    if not image_id:
        return None
    for image in product.get("images") or []:
        if image.get("id") == image_id:
            return image
    return None


def format_price(price: Any) -> str:
    try:
        return f"{float(price):.2f} €"
    except (TypeError, ValueError):
        return "—"


def format_options(product: dict) -> str:
    options = product.get("options") or []
    if not options:
        return "—"
    return "; ".join(f"{opt.get('name')}: {', '.join(opt.get('values') or [])}" for opt in options)


def stock_rows(product: dict) -> List[Dict[str, Any]]:
    """One row per variant location, as the table shows them."""
    return [
        {
            "variant_id": variant.get("id"),
            "variant": variant.get("title"),
            "sku": variant.get("sku") or "—",
            "price": format_price(variant.get("price")),
            "location_id": location.get("location_id"),
            "location": location.get("location_name"),
            "available": location.get("available"),
            "image": (variant_image(product, variant) or {}).get("src"),
        }
        for variant, location in _locations(product)
    ]
