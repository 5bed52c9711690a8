"""
Machine (worker node) model
"""
from typing import Dict, Optional

from pydantic import BaseModel, Field


class Machine(BaseModel):
    """A live worker node as seen by the scaler"""
    name: str = Field(..., description="Kubernetes node name")
    stable_identifier: str = Field(..., description="Cloud instance id, or the node name when absent")
    pool_label: Optional[str] = Field(None, description="Pool the node is labelled with")
    deletion_requested: Optional[str] = Field(None, description="Timestamp of the deletion request")
    labels: Dict[str, str] = {}

    @classmethod
    def from_node(cls, node, pool_label_key: str, deletion_annotation_key: str) -> "Machine":
        """Build a Machine from a kubernetes V1Node"""
        labels = node.metadata.labels or {}
        annotations = node.metadata.annotations or {}
        provider_id = node.spec.provider_id if node.spec is not None else None

        return cls(
            name=node.metadata.name,
            stable_identifier=provider_id or node.metadata.name,
            pool_label=labels.get(pool_label_key),
            deletion_requested=annotations.get(deletion_annotation_key),
            labels=labels,
        )
