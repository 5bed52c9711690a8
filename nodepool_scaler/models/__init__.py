# Pydantic models
from .cluster import ClusterPhase, AutoscalingOptions, NodePool, ClusterSpec
from .machine import Machine
from .pool import (
    PoolInfo, PoolStatus, PoolListResponse, SizeChange, SizeChangeResponse,
    MachineInfo, ProviderInfo,
)

__all__ = [
    # Cluster
    'ClusterPhase', 'AutoscalingOptions', 'NodePool', 'ClusterSpec',
    # Machine
    'Machine',
    # API
    'PoolInfo', 'PoolStatus', 'PoolListResponse', 'SizeChange', 'SizeChangeResponse',
    'MachineInfo', 'ProviderInfo',
]
