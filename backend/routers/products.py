from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from core.errors import StockDashboardError
from core.logging import get_logger
from core.shopify_client import ShopifyClient, get_shopify_client
from schemas.products import ErrorResponse, Product, StockUpdateRequest, StockUpdateResponse
from services.inventory import fetch_products, update_stock
from services.product_cache import ProductCache, get_product_cache

logger = get_logger(__name__)

router = APIRouter()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@router.get("", response_model=List[Product], responses={500: {"model": ErrorResponse}})
def list_products(
    client: ShopifyClient = Depends(get_shopify_client),
    cache: ProductCache = Depends(get_product_cache),
):
    """Active products, each variant annotated with stock per location."""
    try:
        products = cache.get(lambda: fetch_products(client))
    except StockDashboardError as e:
        logger.exception("Failed to fetch products")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch products", "details": str(e)},
        )
    logger.info("Products served", count=len(products))
    return products


@router.put("/{variant_id}/stock", response_model=StockUpdateResponse, responses={500: {"model": ErrorResponse}})
def set_stock(
    variant_id: str,
    payload: StockUpdateRequest,
    client: ShopifyClient = Depends(get_shopify_client),
    cache: ProductCache = Depends(get_product_cache),
):
    """Overwrite the available quantity of a variant at one location."""
    logger.info(
        "Stock update requested",
        variant_id=variant_id,
        quantity=payload.quantity,
        location_id=payload.location_id,
    )
    try:
        level = update_stock(client, variant_id, payload.location_id, payload.quantity)
    except StockDashboardError as e:
        logger.exception("Failed to update stock", variant_id=variant_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to update stock",
                "details": str(e),
                "timestamp": _utcnow().isoformat(),
            },
        )

    cache.invalidate()
    return {
        "message": "Stock updated successfully",
        "updatedVariantId": variant_id,
        "newQuantity": payload.quantity,
        "updatedLocationId": level.get("location_id"),
        "updatedAt": _utcnow(),
    }
