"""
Command line dashboard for the stock gateway.

Usage:
    stock-dashboard list [--name shirt] [--sort stock --desc]
    stock-dashboard low-stock
    stock-dashboard set-stock 4242 12 [--location 77]
"""

import argparse
import sys
from typing import List, Optional

from core.config import settings
from core.errors import DomainError, EditInProgressError, TransportError, ValidationError
from core.logging import configure_logging
from dashboard.api import DashboardApiClient
from dashboard.edits import EditTracker, parse_quantity
from dashboard.table import (
    ASCENDING,
    DESCENDING,
    SORT_KEYS,
    ProductFilters,
    SortConfig,
    format_options,
    low_stock_lines,
    low_stock_products,
    product_image,
    stock_rows,
    visible_products,
)


def _print_products(products: List[dict]) -> None:
    if not products:
        print("No products.")
        return
    for product in products:
        image = product_image(product)
        print(f"{product.get('title')}  [{product.get('vendor') or '—'} / {product.get('product_type') or '—'}]")
        print(f"  tags: {product.get('tags') or '—'}   options: {format_options(product)}")
        if image:
            print(f"  image: {image.get('src')}")
        for row in stock_rows(product):
            print(
                f"    {row['variant_id']:>14}  {row['variant'] or '':<24} {row['sku']:<16} "
                f"{row['price']:>10}  {row['location'] or '':<20} {row['available']}"
                + (f"  image: {row['image']}" if row["image"] else "")
            )


def cmd_list(args, api: DashboardApiClient) -> int:
    products = api.list_products()
    filters = ProductFilters(
        name=args.name,
        vendor=args.vendor,
        type=args.type,
        tag=args.tag,
        min_stock=args.min_stock,
    )
    sort = SortConfig(args.sort, DESCENDING if args.desc else ASCENDING)
    _print_products(visible_products(products, filters, sort))
    return 0


def cmd_low_stock(args, api: DashboardApiClient) -> int:
    products = api.list_products()
    low = low_stock_products(products, args.threshold)
    if not low:
        print("No low-stock products.")
        return 0
    print(f"{len(low)} product(s) low on stock (under {args.threshold} units):")
    for product in low:
        details = " ".join(
            f"— {variant.get('title')} @ {location.get('location_name')} (Stock: {location.get('available')})"
            for variant, location in low_stock_lines(product, args.threshold)
        )
        print(f"  {product.get('title')} {details}")
    return 0


def _first_location(products: List[dict], variant_id: int) -> Optional[int]:
    for product in products:
        for variant in product.get("variants") or []:
            if variant.get("id") == variant_id and variant.get("inventory_by_location"):
                return variant["inventory_by_location"][0].get("location_id")
    return None


def cmd_set_stock(args, api: DashboardApiClient) -> int:
    # validated before anything goes over the wire
    quantity = parse_quantity(args.quantity)

    products = api.list_products()
    location_id = args.location if args.location is not None else _first_location(products, args.variant_id)
    if location_id is None:
        print(f"No stock location found for variant {args.variant_id}", file=sys.stderr)
        return 1

    tracker = EditTracker(products, api.set_stock)
    try:
        before = tracker.displayed_stock(args.variant_id, location_id)
    except KeyError as e:
        print(str(e.args[0]), file=sys.stderr)
        return 1
    tracker.begin_edit(args.variant_id, location_id)
    tracker.submit_edit(quantity)
    after = tracker.displayed_stock(args.variant_id, location_id)
    print(f"Stock confirmed: variant {args.variant_id} @ location {location_id}: {before} -> {after}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stock-dashboard", description="Shopify stock dashboard")
    parser.add_argument("--api-url", default=settings.dashboard_api_url, help="Gateway base URL")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List products with stock per location")
    p_list.add_argument("--name", default="")
    p_list.add_argument("--vendor", default="")
    p_list.add_argument("--type", default="")
    p_list.add_argument("--tag", default="")
    p_list.add_argument("--min-stock", type=int, default=None)
    p_list.add_argument("--sort", choices=SORT_KEYS, default="title")
    p_list.add_argument("--desc", action="store_true")
    p_list.set_defaults(func=cmd_list)

    p_low = sub.add_parser("low-stock", help="Show products with low stock")
    p_low.add_argument("--threshold", type=int, default=settings.low_stock_threshold)
    p_low.set_defaults(func=cmd_low_stock)

    p_set = sub.add_parser("set-stock", help="Set the available quantity of a variant")
    p_set.add_argument("variant_id", type=int)
    p_set.add_argument("quantity")
    p_set.add_argument("--location", type=int, default=None)
    p_set.set_defaults(func=cmd_set_stock)

    return parser


def main(argv: Optional[List[str]] = None, api: Optional[DashboardApiClient] = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout carries the table, logs go to stderr
    configure_logging(stream=sys.stderr)
    api = api or DashboardApiClient(base_url=args.api_url)
    try:
        return args.func(args, api)
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    except (TransportError, DomainError, EditInProgressError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
