"""canonid — FastAPI application entry point.

Initializes the prefix registry and backing stores on startup and
registers API routers.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from canonid.core import redis_client
from canonid.core.config import settings
from canonid.core.prefix_registry import init_registry, reset_registry
from canonid.core.stores import InMemoryStore
from canonid.core.type_loader import StoreFactory, load_types
from canonid.api import health, identifiers, entities

def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


def make_store_factory() -> StoreFactory:
    """Store factory for the configured backend, one store per prefixed type."""
    if settings.store_backend == "redis":
        return redis_client.make_redis_store
    if settings.store_backend != "memory":
        raise ValueError(f"Unknown store backend: '{settings.store_backend}'")
    return InMemoryStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the registry and stores on startup, close on shutdown."""
    logger.info("Starting canonid backend...")

    if settings.store_backend == "redis":
        redis_client.connect()

    registry = init_registry()
    types_path = Path(settings.types_file)
    if not types_path.is_absolute():
        types_path = settings.project_root / types_path
    try:
        load_types(types_path, registry, make_store_factory())
    except FileNotFoundError as e:
        logger.warning(f"{e}; starting with an empty registry")
    app.state.registry = registry

    logger.info(f"canonid backend ready ({len(registry)} prefixes)")
    yield

    # Shutdown
    logger.info("Shutting down canonid backend...")
    reset_registry()
    redis_client.disconnect()
    logger.info("canonid backend stopped")


app = FastAPI(
    title="canonid",
    version="0.1.0",
    description="Prefixed canonical identifiers: generation, collision checks "
                "and resolution back to entities.",
    lifespan=lifespan,
)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(identifiers.router, prefix="/api", tags=["identifiers"])
app.include_router(entities.router, prefix="/api/types/{type_name}", tags=["entities"])


def run() -> None:
    uvicorn.run("canonid.main:app", host=settings.backend_host, port=settings.backend_port)
