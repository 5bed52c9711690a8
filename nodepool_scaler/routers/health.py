"""
Health check API
"""
from fastapi import APIRouter, Depends

from nodepool_scaler.core.dependencies import get_provider
from nodepool_scaler.core.errors import ScalerError
from nodepool_scaler.utils.k8s_client import get_environment_info

router = APIRouter(tags=["health"])


@router.get("/api/health")
def health_check():
    """API health check"""
    return {"status": "healthy", "service": "nodepool-scaler"}


@router.get("/api/k8s/health")
def k8s_health_check(provider=Depends(get_provider)):
    """Cluster resource reachability"""
    store = provider.registry.store
    try:
        cluster = store.get()
    except ScalerError as e:
        return {"status": "disconnected", "error": str(e), **get_environment_info()}
    return {
        "status": "connected",
        "cluster": cluster.spec.name,
        "phase": cluster.spec.phase.value,
        "provisioning_paused": cluster.spec.provisioning_paused,
        **get_environment_info(),
    }
