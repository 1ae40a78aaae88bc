# app/main.py
from fastapi import FastAPI
from app.data.database import Base, engine
from app.api.errors import register_error_handlers
from app.api.routers import health, users, products, carts, orders, purchases
from app.utils.logging import get_logger
import uvicorn

# import wszystkich modeli zanim zawolamy create_all
from app.data import models  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Failed to create tables")
        raise


def create_app() -> FastAPI:
    app = FastAPI(
        title="Second-hand Marketplace",
        version="1.0.0",
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(purchases.router)

    return app


init_db()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
