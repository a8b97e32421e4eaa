from datetime import datetime, timezone

from fastapi import FastAPI, Request
import uvicorn
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from core.config import settings
from core.errors import StockDashboardError
from core.logging import configure_logging, get_logger
from routers.products import router as products_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Stock dashboard API starting", environment=settings.app_env, shop=settings.shopify_shop_name)
    yield


app = FastAPI(
    title="Stock Dashboard API",
    description="Proxy to the Shopify Admin API for the inventory dashboard",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def _error_body(error: str, details: str) -> dict:
    return {"error": error, "details": details, "timestamp": datetime.now(timezone.utc).isoformat()}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=422, content=_error_body("Invalid request", details))


@app.exception_handler(StockDashboardError)
async def dashboard_exception_handler(request: Request, exc: StockDashboardError):
    logger.error("Request failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content=_error_body("Request failed", str(exc)))


# Catch all unhandled exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", path=request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Internal server error", str(exc)))


# Product and stock routes
app.include_router(products_router, prefix="/api/products", tags=["products"])


@app.get("/health")
def health():
    return {"status": "ok", "shop": settings.shopify_shop_name}


def run():
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=settings.app_env == "development")


if __name__ == "__main__":
    run()
