"""
Node pool API Router
- pool discovery, sizes and size changes
- node to pool resolution
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from nodepool_scaler.core.dependencies import get_provider
from nodepool_scaler.core.errors import (
    BoundsError,
    ClusterLookupError,
    ClusterUnavailableError,
    InvalidArgumentError,
    InvariantViolationError,
    InventoryError,
    MembershipError,
    NotFoundError,
    RetriesExhaustedError,
    ScalerError,
    StoreWriteError,
)
from nodepool_scaler.models.pool import (
    MachineInfo,
    PoolListResponse,
    PoolStatus,
    ProviderInfo,
    SizeChange,
    SizeChangeResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["pools"])

# Checked in order, first match wins
_STATUS_CODES = [
    (NotFoundError, 404),
    (InvalidArgumentError, 400),
    (BoundsError, 409),
    (InvariantViolationError, 409),
    (MembershipError, 409),
    (ClusterUnavailableError, 503),
    (RetriesExhaustedError, 503),
    (ClusterLookupError, 502),
    (InventoryError, 502),
    (StoreWriteError, 502),
]


def _http_error(e: ScalerError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def _require_pool(provider, name: str):
    pool = provider.registry.get(name)
    if pool is None:
        raise HTTPException(status_code=404, detail=f"Autoscalable pool {name} not found")
    return pool


@router.get("/provider", response_model=ProviderInfo)
def get_provider_info(provider=Depends(get_provider)):
    """Provider metadata"""
    return ProviderInfo(
        name=provider.name(),
        gpu_label=provider.gpu_label(),
        available_gpu_types=provider.available_gpu_types(),
        pool_count=len(provider.node_groups()),
    )


@router.get("/pools", response_model=PoolListResponse)
def list_pools(refresh: bool = False, provider=Depends(get_provider)):
    """Cached autoscalable pools, optionally re-discovered first"""
    if refresh:
        try:
            provider.refresh()
        except ScalerError as e:
            raise _http_error(e)

    pools = [pool.info() for pool in provider.node_groups()]
    return PoolListResponse(count=len(pools), pools=pools, version=provider.registry.version)


@router.post("/pools/refresh")
def refresh_pools(provider=Depends(get_provider)):
    """Re-discover pools from the cluster resource"""
    try:
        updated = provider.refresh()
    except ScalerError as e:
        raise _http_error(e)
    return {
        "updated": updated,
        "count": len(provider.node_groups()),
        "version": provider.registry.version,
    }


@router.get("/pools/{name}", response_model=PoolStatus)
def get_pool(name: str, provider=Depends(get_provider)):
    """Pool bounds with target and observed sizes"""
    pool = _require_pool(provider, name)
    try:
        return pool.status()
    except ScalerError as e:
        raise _http_error(e)


@router.post("/pools/{name}/increase", response_model=SizeChangeResponse)
def increase_pool(name: str, change: SizeChange, provider=Depends(get_provider)):
    """Grow the pool's target size"""
    pool = _require_pool(provider, name)
    try:
        target_size = pool.increase_size(change.delta)
    except ScalerError as e:
        logger.warning(f"Increase of pool {name} by {change.delta} failed: {e}")
        raise _http_error(e)
    return SizeChangeResponse(pool=name, delta=change.delta, target_size=target_size)


@router.post("/pools/{name}/decrease", response_model=SizeChangeResponse)
def decrease_pool(name: str, change: SizeChange, provider=Depends(get_provider)):
    """Withdraw unfulfilled scale-up requests"""
    pool = _require_pool(provider, name)
    try:
        target_size = pool.decrease_target_size(change.delta)
    except ScalerError as e:
        logger.warning(f"Decrease of pool {name} by {change.delta} failed: {e}")
        raise _http_error(e)
    return SizeChangeResponse(pool=name, delta=change.delta, target_size=target_size)


@router.delete("/pools/{name}/machines/{machine_id:path}", response_model=SizeChangeResponse)
def remove_machine(name: str, machine_id: str, provider=Depends(get_provider)):
    """Mark a machine for deletion and shrink the pool by one"""
    pool = _require_pool(provider, name)
    try:
        target_size = pool.remove_machine(machine_id)
    except ScalerError as e:
        logger.warning(f"Removal of {machine_id} from pool {name} failed: {e}")
        raise _http_error(e)
    return SizeChangeResponse(pool=name, delta=-1, target_size=target_size)


@router.get("/machines/{machine_id:path}/pool", response_model=MachineInfo)
def get_machine_pool(machine_id: str, provider=Depends(get_provider)):
    """Autoscalable pool of a machine, null for control plane or unmanaged nodes"""
    try:
        pool = provider.node_group_for_node(machine_id)
    except ScalerError as e:
        raise _http_error(e)
    return MachineInfo(machine_id=machine_id, pool=pool.id() if pool is not None else None)
