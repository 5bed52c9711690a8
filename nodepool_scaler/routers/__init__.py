"""
API routers
- health: service and cluster resource health
- pools: node pool discovery and scaling
"""
from .health import router as health_router
from .pools import router as pools_router

__all__ = [
    "health_router",
    "pools_router",
]
