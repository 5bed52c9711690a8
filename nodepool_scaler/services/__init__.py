# Services - node pool business logic
from .cluster_store import ClusterObject, ClusterSpecStore
from .inventory import MachineInventory
from .events import AuditEventRecorder, ScaleEventReason
from .reconciler import TargetSizeReconciler
from .pool import PoolHandle
from .registry import PoolRegistry
from .provider import NodePoolProvider, build_provider

__all__ = [
    'ClusterObject', 'ClusterSpecStore',
    'MachineInventory',
    'AuditEventRecorder', 'ScaleEventReason',
    'TargetSizeReconciler',
    'PoolHandle',
    'PoolRegistry',
    'NodePoolProvider', 'build_provider',
]
