"""Startup Studio API.

Serves the taxonomy catalog and strategy definitions, and runs the
concept-generation workflow in the background:
- Catalog: taxonomy entities per dimension
- Strategies: theses with dimension configuration and constraints
- Runs: start, poll, cancel, and read ranked concepts
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from startup_studio import __version__
from startup_studio.api.routes import catalog, runs, strategies
from startup_studio.catalog.registry import get_dimension_catalog
from startup_studio.executor import run_manager
from startup_studio.strategies.registry import get_strategy_registry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Loading dimension catalog...")
    dimension_catalog = get_dimension_catalog()
    logger.info(f"Loaded {dimension_catalog.count()} taxonomy entities")

    logger.info("Loading strategy definitions...")
    strategy_registry = get_strategy_registry()
    logger.info(f"Loaded {strategy_registry.count()} strategies")

    logger.info("Startup Studio API ready")
    yield
    logger.info("Shutting down Startup Studio API")


app = FastAPI(
    title="Startup Studio API",
    description="""
## Startup Studio

Cross-products strategies against taxonomy dimensions, synthesizes startup
concepts, scores and ranks them.

### Key Endpoints

- `GET /v1/catalog` - Entity counts per dimension
- `GET /v1/strategies` - List strategies
- `GET /v1/strategies/{id}/seeds` - Preview a strategy's seeds
- `POST /v1/runs` - Start a generation run
- `GET /v1/runs/{id}` - Poll a run
""",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog.router, prefix="/v1")
app.include_router(strategies.router, prefix="/v1")
app.include_router(runs.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Startup Studio API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "catalog": "/v1/catalog",
            "strategies": "/v1/strategies",
            "runs": "/v1/runs",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "entities": get_dimension_catalog().count(),
        "strategies": get_strategy_registry().count(),
        "runs": len(run_manager.list_runs()),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "startup_studio.api.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
    )
