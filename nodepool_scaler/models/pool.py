"""
Node pool API models
Request/response shapes for the /api/pools endpoints
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class PoolInfo(BaseModel):
    """Cached pool identity and bounds"""
    name: str
    min_size: int
    max_size: int


class PoolStatus(BaseModel):
    """Pool with its live sizes"""
    name: str
    min_size: int
    max_size: int
    target_size: int  # desired count in the cluster resource
    observed_size: int  # nodes currently carrying the pool label
    machines: List[str] = []


class PoolListResponse(BaseModel):
    """Pool list response"""
    count: int
    pools: List[PoolInfo]
    version: Optional[str] = None


class SizeChange(BaseModel):
    """Size change request"""
    delta: int = Field(..., description="Node count delta, positive to grow, negative to shrink")


class SizeChangeResponse(BaseModel):
    """Size change result"""
    pool: str
    delta: int
    target_size: int


class MachineInfo(BaseModel):
    """Machine to pool resolution"""
    machine_id: str
    pool: Optional[str] = None


class ProviderInfo(BaseModel):
    """Provider metadata"""
    name: str
    gpu_label: str
    available_gpu_types: List[str]
    pool_count: int


__all__ = [
    "PoolInfo",
    "PoolStatus",
    "PoolListResponse",
    "SizeChange",
    "SizeChangeResponse",
    "MachineInfo",
    "ProviderInfo",
]
