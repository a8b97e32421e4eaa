"""
Client for the stock dashboard gateway (`/api/products`).

Mirrors what the dashboard screen needs:
- list_products(): GET /products
- set_stock():     PUT /products/{variant_id}/stock

Gateway failures come back as {"error": ..., "details": ...}; they are raised as
DomainError with that payload attached. Connection problems raise TransportError.
No retries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from core.config import settings
from core.errors import DomainError, TransportError
from core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class DashboardApiClient:
    base_url: str = field(default_factory=lambda: settings.dashboard_api_url)
    timeout: float = 60
    session: requests.Session = field(default_factory=requests.Session)

    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                payload = resp.json()
            except ValueError:
                payload = {"error": resp.text}
            message = payload.get("error") if isinstance(payload, dict) else None
            details = payload.get("details") if isinstance(payload, dict) else None
            text = message or f"{method} {path} failed ({resp.status_code})"
            if details:
                text = f"{text}: {details}"
            raise DomainError(text, status_code=resp.status_code, payload=payload)

        try:
            return resp.json()
        except ValueError as e:
            raise DomainError(
                f"{method} {path} returned a non-JSON body ({resp.status_code}): {resp.text[:200]}",
                status_code=resp.status_code,
                payload=resp.text,
            ) from e

    def list_products(self) -> List[dict]:
        products = self._request("GET", "products")
        logger.debug("Products received", count=len(products))
        return products

    def set_stock(self, variant_id: int | str, location_id: Optional[int], quantity: int) -> Dict[str, Any]:
        body: Dict[str, Any] = {"quantity": quantity}
        if location_id is not None:
            body["locationId"] = location_id
        return self._request("PUT", f"products/{variant_id}/stock", json=body)
