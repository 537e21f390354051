from dotenv import load_dotenv
load_dotenv()

import logging
from datetime import datetime
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import Store, create_store

# ENV
from config.env import ENV, CORS_ALLOWED_ORIGINS, LOG_LEVEL, MONGO_URI, validate_production_env

# ROUTES
from routes.customers import router as customers_router
from routes.vendors import router as vendors_router
from routes.categories import router as categories_router
from routes.products import router as products_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router
from routes.payments import router as payments_router
from routes.reviews import router as reviews_router
from routes.uploads import router as uploads_router
from routes.webhooks import router as webhooks_router
from routes.admin import router as admin_router

from utils.errors import register_error_handlers
from utils.indexes import ensure_indexes

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(store: Store | None = None) -> FastAPI:
    app = FastAPI(
        title="GoMart API",
        version="1.0.0",
        docs_url=None if ENV == "production" else "/docs",
        redoc_url=None if ENV == "production" else "/redoc",
        openapi_url=None if ENV == "production" else "/openapi.json",
    )
    app.state.store = store

    # -----------------------------
    # CORS
    # -----------------------------

    allowed_origins = [origin.strip() for origin in CORS_ALLOWED_ORIGINS if origin.strip()]
    if not allowed_origins:
        allowed_origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Admin-Key"],
    )

    register_error_handlers(app)

    # -----------------------------
    # ROUTES
    # -----------------------------

    app.include_router(customers_router)
    app.include_router(vendors_router)
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    app.include_router(reviews_router)
    app.include_router(uploads_router)
    app.include_router(webhooks_router)
    app.include_router(admin_router)

    # -----------------------------
    # SERVICE ENDPOINTS
    # -----------------------------

    @app.get("/")
    async def welcome():
        return {
            "message": "Welcome to GoMart API",
            "version": app.version,
            "endpoints": {
                "health": "/health",
                "customers": "/api/customers",
                "vendors": "/api/vendors",
                "categories": "/api/categories",
                "products": "/api/products",
                "cart": "/api/cart",
                "orders": "/api/orders",
                "payments": "/api/payments",
                "reviews": "/api/reviews",
            },
        }

    @app.get("/health")
    async def health():
        return {
            "status": "success",
            "message": "GoMart Backend is running!",
            "timestamp": datetime.utcnow().isoformat(),
            "environment": ENV,
        }

    @app.get("/api/health/db")
    async def health_db():
        db = app.state.store.db
        await db.command("ping")
        return {"status": "success", "message": "mongodb connected"}

    # -----------------------------
    # STARTUP / SHUTDOWN (ONE PLACE ONLY)
    # -----------------------------

    @app.on_event("startup")
    async def connect_storage():
        validate_production_env()
        if app.state.store is None:
            app.state.store = create_store(MONGO_URI)
        await ensure_indexes(app.state.store.db)
        logger.info("STARTUP env=%s", ENV)

    @app.on_event("shutdown")
    async def close_storage():
        if app.state.store is not None:
            app.state.store.close()

    return app


app = create_app()
