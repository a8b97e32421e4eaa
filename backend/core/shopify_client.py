"""
Thin client for the Shopify Admin REST API.

Only the handful of endpoints the dashboard needs:
- GET  products.json?status=active   (paged via the Link header)
- GET  inventory_levels.json?inventory_item_ids=...   (50 ids per request)
- GET  locations.json
- GET  variants/{id}.json
- POST inventory_levels/set.json   (blind set, no compare-and-swap)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import parse_qs, urlparse

import requests

from core.config import settings
from core.errors import ConfigurationError, DomainError, TransportError
from core.logging import get_logger

logger = get_logger(__name__)

PAGE_LIMIT = 250
INVENTORY_ITEM_BATCH = 50


@dataclass
class ShopifyClient:
    shop_name: str
    access_token: str
    api_version: str = "2024-04"
    timeout: float = 30
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self) -> None:
        if not self.access_token or not self.shop_name:
            raise ConfigurationError(
                "Missing required Shopify settings: "
                f"SHOPIFY_ACCESS_TOKEN={'set' if self.access_token else 'missing'}, "
                f"SHOPIFY_SHOP_NAME={'set' if self.shop_name else 'missing'}"
            )

    @classmethod
    def from_settings(cls) -> "ShopifyClient":
        return cls(
            shop_name=settings.shopify_shop_name,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_timeout,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.shop_name}/admin/api/{self.api_version}"

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _send(self, method: str, path: str, *, json: Any = None, params: Dict[str, Any] | None = None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Shopify API unreachable", method=method, path=path, error=str(e))
            raise TransportError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                payload = resp.json()
            except ValueError:
                payload = resp.text
            logger.error(
                "Shopify API error",
                method=method,
                path=path,
                status_code=resp.status_code,
                payload=payload,
            )
            raise DomainError(
                f"{method} {path} failed ({resp.status_code}): {_error_text(payload)}",
                status_code=resp.status_code,
                payload=payload,
            )
        return resp

    def _decode(self, method: str, path: str, resp) -> Any:
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            logger.error("Shopify API returned a non-JSON body", method=method, path=path, status_code=resp.status_code)
            raise DomainError(
                f"{method} {path} returned a non-JSON body ({resp.status_code}): {resp.text[:200]}",
                status_code=resp.status_code,
                payload=resp.text,
            ) from e

    def _request(self, method: str, path: str, *, json: Any = None, params: Dict[str, Any] | None = None) -> Any:
        resp = self._send(method, path, json=json, params=params)
        return self._decode(method, path, resp)

    # ----------------------------
    # Products / variants
    # ----------------------------

    def list_active_products(self) -> List[dict]:
        """Every active product, following the Link header's page_info cursor."""
        products: List[dict] = []
        params: Dict[str, Any] = {"status": "active", "limit": PAGE_LIMIT}
        while True:
            resp = self._send("GET", "products.json", params=params)
            products.extend(self._decode("GET", "products.json", resp).get("products", []))
            page_info = _next_page_info(resp)
            if not page_info:
                return products
            # Shopify rejects filters other than limit alongside page_info
            params = {"limit": PAGE_LIMIT, "page_info": page_info}

    def get_variant(self, variant_id: int | str) -> dict:
        data = self._request("GET", f"variants/{variant_id}.json")
        variant = data.get("variant")
        if not variant:
            raise DomainError(f"Variant {variant_id} not found", status_code=404, payload=data)
        return variant

    # ----------------------------
    # Inventory
    # ----------------------------

    def list_inventory_levels(self, inventory_item_ids: Iterable[int | str]) -> List[dict]:
        ids = [str(i) for i in inventory_item_ids]
        levels: List[dict] = []
        # inventory_item_ids accepts at most 50 ids per request
        for start in range(0, len(ids), INVENTORY_ITEM_BATCH):
            batch = ids[start:start + INVENTORY_ITEM_BATCH]
            data = self._request(
                "GET",
                "inventory_levels.json",
                params={"inventory_item_ids": ",".join(batch), "limit": PAGE_LIMIT},
            )
            levels.extend(data.get("inventory_levels", []))
        return levels

    def list_locations(self) -> List[dict]:
        data = self._request("GET", "locations.json")
        return data.get("locations", [])

    def set_inventory_level(self, location_id: int | str, inventory_item_id: int | str, available: int) -> dict:
        data = self._request(
            "POST",
            "inventory_levels/set.json",
            json={
                "location_id": location_id,
                "inventory_item_id": inventory_item_id,
                "available": int(available),
            },
        )
        return data.get("inventory_level", data)


def _next_page_info(resp) -> Optional[str]:
    next_link = (getattr(resp, "links", None) or {}).get("next")
    if not next_link:
        return None
    values = parse_qs(urlparse(next_link.get("url", "")).query).get("page_info")
    return values[0] if values else None


def _error_text(payload: Any) -> str:
    # Shopify reports failures as {"errors": "..."} or {"errors": {"field": ["..."]}}
    if isinstance(payload, dict) and "errors" in payload:
        errors = payload["errors"]
        if isinstance(errors, dict):
            return "; ".join(
                f"{k}: {', '.join(v) if isinstance(v, list) else v}" for k, v in errors.items()
            )
        if isinstance(errors, list):
            return ", ".join(str(e) for e in errors)
        return str(errors)
    return str(payload) if payload else "no details"


def get_shopify_client() -> ShopifyClient:
    """Shared client for the gateway routes."""
    global _client
    if _client is None:
        _client = ShopifyClient.from_settings()
    return _client


_client: Optional[ShopifyClient] = None
