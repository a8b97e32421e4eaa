import os

import pytest

# Settings are read at import time
os.environ["APP_ENV"] = "test"
os.environ.setdefault("SHOPIFY_SHOP_NAME", "test-shop.myshopify.com")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test")
os.environ["PRODUCTS_CACHE_TTL"] = "0"

from factories import FakeSession  # noqa: E402


@pytest.fixture()
def session():
    return FakeSession()


@pytest.fixture()
def shopify(session):
    from core.shopify_client import ShopifyClient

    return ShopifyClient(
        shop_name="test-shop.myshopify.com",
        access_token="shpat_test",
        session=session,
    )
