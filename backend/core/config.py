import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    shopify_access_token: str = os.getenv("SHOPIFY_ACCESS_TOKEN", "")
    shopify_shop_name: str = os.getenv("SHOPIFY_SHOP_NAME", "")
    shopify_api_version: str = os.getenv("SHOPIFY_API_VERSION", "2024-04")
    shopify_timeout: float = float(os.getenv("SHOPIFY_TIMEOUT", "30"))

    port: int = int(os.getenv("PORT", "5000"))
    app_env: str = os.getenv("APP_ENV", "development").lower()

    # Staleness window for GET /api/products, in seconds (0 disables caching)
    products_cache_ttl: float = float(os.getenv("PRODUCTS_CACHE_TTL", "300"))

    # Dashboard settings
    low_stock_threshold: int = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
    dashboard_api_url: str = os.getenv("DASHBOARD_API_URL", "http://localhost:5000/api")


settings = Settings()
