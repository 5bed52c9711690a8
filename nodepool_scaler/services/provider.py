"""
Node pool provider
Entry point the autoscaler core plugs into: provider metadata, pool
discovery and node to pool resolution
"""
import logging
from typing import Any, List, Optional

from nodepool_scaler.core.config import Settings
from nodepool_scaler.core.errors import NotFoundError
from nodepool_scaler.services.cluster_store import ClusterSpecStore
from nodepool_scaler.services.events import AuditEventRecorder
from nodepool_scaler.services.inventory import MachineInventory
from nodepool_scaler.services.pool import PoolHandle
from nodepool_scaler.services.reconciler import TargetSizeReconciler
from nodepool_scaler.services.registry import PoolRegistry

logger = logging.getLogger(__name__)


class NodePoolProvider:
    """Autoscaler-facing provider backed by the pool registry"""

    def __init__(self, registry: PoolRegistry, inventory: MachineInventory,
                 name: str, gpu_label: str, gpu_types: List[str],
                 control_plane_label: str, resource_limiter: Optional[Any] = None):
        self.registry = registry
        self.inventory = inventory
        self._name = name
        self._gpu_label = gpu_label
        self._gpu_types = list(gpu_types)
        self._control_plane_label = control_plane_label
        self._resource_limiter = resource_limiter

    def name(self) -> str:
        return self._name

    def gpu_label(self) -> str:
        return self._gpu_label

    def available_gpu_types(self) -> List[str]:
        return list(self._gpu_types)

    def node_groups(self) -> List[PoolHandle]:
        return self.registry.list()

    def node_group_for_node(self, machine_id: str) -> Optional[PoolHandle]:
        """The autoscalable pool a machine belongs to

        Returns None for control plane nodes, nodes without a pool label and
        pools that are not autoscalable.

        Raises:
            NotFoundError: no live node has this identifier
        """
        machine = self.inventory.find(machine_id)
        if machine is None:
            raise NotFoundError(f"node {machine_id} does not exist")
        if self._control_plane_label in machine.labels:
            return None
        if not machine.pool_label:
            logger.debug(f"Node {machine_id} has no {self.inventory.pool_label} label")
            return None
        return self.registry.get(machine.pool_label)

    def resource_limiter(self) -> Optional[Any]:
        return self._resource_limiter

    def refresh(self) -> bool:
        return self.registry.refresh()

    def cleanup(self):
        return None


def build_provider(settings: Settings, core_v1, custom_api) -> NodePoolProvider:
    """Wire store, inventory, events, reconciler and registry from settings"""
    if not settings.CLUSTER_NAME:
        raise ValueError("CLUSTER_NAME must be set")

    store = ClusterSpecStore(
        custom_api,
        name=settings.CLUSTER_NAME,
        namespace=settings.CLUSTER_NAMESPACE,
        group=settings.CLUSTER_GROUP,
        version=settings.CLUSTER_VERSION,
        plural=settings.CLUSTER_PLURAL,
    )
    inventory = MachineInventory(
        core_v1,
        pool_label=settings.POOL_LABEL,
        deletion_annotation=settings.DELETION_ANNOTATION,
    )
    recorder = AuditEventRecorder(
        core_v1,
        namespace=settings.CLUSTER_NAMESPACE,
        involved_name=settings.CLUSTER_NAME,
        involved_kind=settings.CLUSTER_KIND,
        involved_api_version=f"{settings.CLUSTER_GROUP}/{settings.CLUSTER_VERSION}",
        source=settings.EVENT_SOURCE,
    )
    reconciler = TargetSizeReconciler(store, inventory, recorder, attempts=settings.SIZE_UPDATE_ATTEMPTS)
    registry = PoolRegistry(store, reconciler)

    return NodePoolProvider(
        registry,
        inventory,
        name=settings.PROVIDER_NAME,
        gpu_label=settings.GPU_LABEL,
        gpu_types=settings.AVAILABLE_GPU_TYPES,
        control_plane_label=settings.CONTROL_PLANE_LABEL,
    )
