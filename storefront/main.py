# storefront/main.py
# FastAPI entry point. Tables are created in the startup event with retries.

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.db.session import engine
from storefront.db.base import Base
from storefront.core.config import settings
from storefront.core.errors import StorefrontError

# Import the models so SQLAlchemy sees every mapping
import storefront.models.user
import storefront.models.item
import storefront.models.cart
import storefront.models.order

from storefront.api import auth, cart, items, orders, users

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def try_create_tables(retries: int = 5, delay: int = 2) -> bool:
    """
    Create the tables, retrying while the database is unreachable.

    Args:
        retries: number of connection attempts
        delay: seconds between attempts

    Returns:
        True if the tables exist, False once every attempt failed
    """
    for attempt in range(1, retries + 1):
        try:
            logger.info(f"Creating tables ({attempt}/{retries})...")
            Base.metadata.create_all(bind=engine)
            logger.info("✅ Database tables created (or already exist).")
            return True
        except Exception as e:
            logger.warning(f"❌ Attempt {attempt}/{retries} failed to create tables: {e}")
            if attempt < retries:
                logger.info(f"⏳ Waiting {delay}s before retry...")
                time.sleep(delay)
    logger.error(f"❌ Could not create tables after {retries} retries.")
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Storefront API starting up...")
    if not try_create_tables(retries=5, delay=2):
        if settings.is_production:
            raise RuntimeError("Cannot start application: database tables creation failed")
        logger.error("⚠️ Failed to create database tables. Application may not work correctly.")

    yield

    logger.info("🛑 Storefront API shutting down...")
    engine.dispose()


app = FastAPI(
    title="Storefront API",
    description="Accounts, catalog, carts and checkout",
    version="1.0.0",
    lifespan=lifespan
)

# The session cookie needs credentials, so origins are explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(users.router, tags=["users"])
app.include_router(items.router)
app.include_router(cart.router)
app.include_router(orders.router)


@app.get("/health", tags=["health"])
async def health():
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error",
            "detail": str(exc) if settings.ENVIRONMENT == "development" else "An error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
