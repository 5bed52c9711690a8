"""
Audit events for pool size changes
One Kubernetes event per size mutation, attached to the cluster resource
"""
import logging
import uuid
from enum import Enum
from typing import Optional

from kubernetes import client

from nodepool_scaler.utils.helpers import utc_now
from nodepool_scaler.utils.k8s_client import describe_error

logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


class ScaleEventReason(str, Enum):
    """Event reasons, one per direction and outcome"""
    SCALE_UP_SUCCEEDED = "ScaleUpSucceeded"
    SCALE_UP_FAILED = "ScaleUpFailed"
    SCALE_DOWN_SUCCEEDED = "ScaleDownSucceeded"
    SCALE_DOWN_FAILED = "ScaleDownFailed"

    @classmethod
    def for_change(cls, delta: int, succeeded: bool) -> "ScaleEventReason":
        if delta > 0:
            return cls.SCALE_UP_SUCCEEDED if succeeded else cls.SCALE_UP_FAILED
        return cls.SCALE_DOWN_SUCCEEDED if succeeded else cls.SCALE_DOWN_FAILED


def event_message(pool_name: str, delta: int, target_size: Optional[int] = None,
                  error: Optional[BaseException] = None) -> str:
    """Human readable event message"""
    verb = "up" if delta > 0 else "down"
    count = abs(delta)
    nodes = "node" if count == 1 else "nodes"
    if error is None:
        msg = f"Scaled {verb} pool {pool_name} by {count} {nodes}"
        if target_size is not None:
            msg += f", target size is now {target_size}"
        return msg
    return f"Failed to scale {verb} pool {pool_name} by {count} {nodes}: {error}"


class AuditEventRecorder:
    """Writes scale events against the cluster custom resource"""

    def __init__(self, core_v1, namespace: str, involved_name: str,
                 involved_kind: str, involved_api_version: str, source: str):
        self.core_v1 = core_v1
        self.namespace = namespace
        self.involved_name = involved_name
        self.involved_kind = involved_kind
        self.involved_api_version = involved_api_version
        self.source = source

    def record(self, pool_name: str, delta: int, target_size: Optional[int] = None,
               error: Optional[BaseException] = None) -> client.CoreV1Event:
        """Emit one event for a size change

        Event API failures are logged and never change the outcome of the
        size change being reported.
        """
        succeeded = error is None
        reason = ScaleEventReason.for_change(delta, succeeded)
        now = utc_now()

        event = client.CoreV1Event(
            metadata=client.V1ObjectMeta(
                name=f"{self.involved_name}.{uuid.uuid4().hex[:16]}",
                namespace=self.namespace,
                labels={"pool": pool_name},
            ),
            involved_object=client.V1ObjectReference(
                api_version=self.involved_api_version,
                kind=self.involved_kind,
                name=self.involved_name,
                namespace=self.namespace,
            ),
            reason=reason.value,
            message=event_message(pool_name, delta, target_size, error),
            type=EVENT_TYPE_NORMAL if succeeded else EVENT_TYPE_WARNING,
            source=client.V1EventSource(component=self.source),
            first_timestamp=now,
            last_timestamp=now,
            count=1,
        )

        try:
            self.core_v1.create_namespaced_event(self.namespace, event)
        except Exception as e:
            logger.error(
                f"Failed to record {reason.value} event for pool {pool_name}: {describe_error(e)}",
                exc_info=True,
            )
        return event
