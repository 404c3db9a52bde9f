"""
ShipSplit API

Order-to-shipment allocation and label issuance over HTTP.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shipsplit import __version__
from shipsplit.api.routes import shipping
from shipsplit.core.config import settings
from shipsplit.core.error_handler import register_error_handlers
from shipsplit.core.utils import utcnow


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.APP_NAME} v{__version__} starting ({settings.ENVIRONMENT})")

    yield

    # Close HTTP clients to prevent connection leaks
    await shipping.close_gateway_client()
    logger.info("Shipping gateway client closed")


def create_app() -> FastAPI:
    app = FastAPI(
        lifespan=lifespan,
        title=f"{settings.APP_NAME} API",
        description="Split orders into shipments, distribute package weight and purchase labels.",
        version=__version__,
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoint"},
            {"name": "Shipping", "description": "Allocation, validation and label issuance"},
        ],
    )
    register_error_handlers(app)
    app.include_router(shipping.router, prefix="/api", tags=["Shipping"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
            "timestamp": utcnow().isoformat(),
        }

    return app


app = create_app()
