"""
FastAPI dependencies
"""
from fastapi import HTTPException, Request

from nodepool_scaler.services.provider import NodePoolProvider


def get_provider(request: Request) -> NodePoolProvider:
    """The provider built at application startup"""
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise HTTPException(status_code=503, detail="Node pool provider is not initialised")
    return provider
