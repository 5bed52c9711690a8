"""
Node pool scaler API

API layout:
- /api/health, /api/k8s/health   - health checks
- /api/provider                   - provider metadata
- /api/pools/*                    - pool discovery, sizes, size changes
- /api/machines/{id}/pool         - node to pool resolution
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from nodepool_scaler.core.config import settings
from nodepool_scaler.core.errors import ClusterLookupError
from nodepool_scaler.routers import health_router, pools_router
from nodepool_scaler.services.provider import NodePoolProvider, build_provider
from nodepool_scaler.utils.k8s_client import get_k8s_clients

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "provider", None) is None:
        core_v1, custom = get_k8s_clients()
        app.state.provider = build_provider(settings, core_v1, custom)

    try:
        app.state.provider.refresh()
    except ClusterLookupError as e:
        # The pool list stays empty until POST /api/pools/refresh succeeds
        logger.error(f"Initial pool discovery failed: {e}")
    yield
    app.state.provider.cleanup()


def create_app(provider: Optional[NodePoolProvider] = None) -> FastAPI:
    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.provider = provider

    app.include_router(health_router)
    app.include_router(pools_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
