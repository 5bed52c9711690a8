"""
Cluster custom resource models

Only the fields the scaler reads are modelled. Writes go back through the raw
custom object (see services.cluster_store) so everything else in the resource
is preserved as the provisioning engine left it.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClusterPhase(str, Enum):
    """Lifecycle phase reported in status.phase"""
    PENDING = "Pending"
    PROVISIONING = "Provisioning"
    PROVISIONED = "Provisioned"
    DELETING = "Deleting"
    DELETE_FAILED = "DeleteFailed"
    FAILED = "Failed"
    DELETED = "Deleted"
    UNKNOWN = ""

    @classmethod
    def parse(cls, value: Optional[str]) -> "ClusterPhase":
        try:
            return cls(value or "")
        except ValueError:
            return cls.UNKNOWN


class AutoscalingOptions(BaseModel):
    """Autoscaling bounds of a node pool"""
    model_config = ConfigDict(populate_by_name=True)

    min_size: int = Field(default=0, alias="minSize", description="Minimum node count")
    max_size: int = Field(default=0, alias="maxSize", description="Maximum node count")


class NodePool(BaseModel):
    """A node pool declared in spec.provisioner.nodePools"""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    count: int = Field(default=0, description="Desired node count")
    autoscaling_options: Optional[AutoscalingOptions] = Field(
        default=None, alias="autoscalingOptions"
    )

    @property
    def autoscalable(self) -> bool:
        return self.autoscaling_options is not None


class ClusterSpec(BaseModel):
    """Projection of the cluster custom resource"""
    name: str
    namespace: str = ""
    resource_version: Optional[str] = None
    provisioning_paused: bool = False
    phase: ClusterPhase = ClusterPhase.UNKNOWN
    node_pools: List[NodePool] = []

    @classmethod
    def from_custom_object(cls, obj: Dict[str, Any]) -> "ClusterSpec":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        provisioner = spec.get("provisioner") or {}
        status = obj.get("status") or {}

        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            resource_version=metadata.get("resourceVersion"),
            provisioning_paused=bool(spec.get("provisioningPaused", False)),
            phase=ClusterPhase.parse(status.get("phase")),
            node_pools=[NodePool.model_validate(pool) for pool in provisioner.get("nodePools") or []],
        )

    def find_pool(self, name: str) -> Optional[NodePool]:
        for pool in self.node_pools:
            if pool.name == name:
                return pool
        return None

    def autoscalable_pools(self) -> List[NodePool]:
        return [pool for pool in self.node_pools if pool.autoscalable]

    def unavailable_reason(self) -> Optional[str]:
        """Why size changes are refused right now, or None"""
        if self.provisioning_paused:
            return "provisioning is paused"
        if self.phase == ClusterPhase.PROVISIONING:
            return "cluster is provisioning"
        return None
