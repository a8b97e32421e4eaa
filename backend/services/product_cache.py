import threading
import time
from copy import deepcopy
from typing import Callable, List, Optional

from core.config import settings


class ProductCache:
    """Read-through cache for the product list, fresh for `ttl` seconds."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._products: Optional[List[dict]] = None
        self._fetched_at = 0.0

    def get(self, loader: Callable[[], List[dict]]) -> List[dict]:
        with self._lock:
            if self._products is not None and self._clock() - self._fetched_at < self.ttl:
                return deepcopy(self._products)

        products = loader()

        with self._lock:
            if self.ttl > 0:
                self._products = deepcopy(products)
                self._fetched_at = self._clock()
        return products

    def invalidate(self) -> None:
        with self._lock:
            self._products = None
            self._fetched_at = 0.0


product_cache = ProductCache(ttl=settings.products_cache_ttl)


def get_product_cache() -> ProductCache:
    return product_cache
