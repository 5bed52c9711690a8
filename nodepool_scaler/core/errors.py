"""
Errors raised by the node pool services

Every error derives from ScalerError so callers (the HTTP routers, the
autoscaler loop) can catch the whole family in one place.
"""
from typing import Optional


class ScalerError(Exception):
    """Base class for node pool scaling errors"""


class ClusterLookupError(ScalerError, LookupError):
    """The cluster custom resource could not be read"""

    def __init__(self, namespace: str, name: str, reason: str):
        self.namespace = namespace
        self.name = name
        self.reason = reason
        super().__init__(f"Cannot read cluster {namespace}/{name}: {reason}")


class NotFoundError(ScalerError):
    """A pool or machine does not exist"""


class InvalidArgumentError(ScalerError, ValueError):
    """The caller broke the sign contract of a size change"""


class BoundsError(ScalerError):
    """A size change would leave the pool outside its min/max bounds"""

    def __init__(self, pool_name: str, desired: int, limit: int, message: str):
        self.pool_name = pool_name
        self.desired = desired
        self.limit = limit
        super().__init__(message)


class InvariantViolationError(ScalerError):
    """A target size decrease would remove machines that already exist"""

    def __init__(self, pool_name: str, target_size: int, delta: int, observed: int):
        self.pool_name = pool_name
        self.target_size = target_size
        self.delta = delta
        self.observed = observed
        super().__init__(
            f"Attempt to delete existing nodes in pool {pool_name}, "
            f"targetSize: {target_size} delta: {delta} existingNodes: {observed}"
        )


class MembershipError(ScalerError):
    """A machine does not belong to the pool it was removed from"""

    def __init__(self, machine_id: str, pool_name: str, actual_pool: Optional[str]):
        self.machine_id = machine_id
        self.pool_name = pool_name
        self.actual_pool = actual_pool
        super().__init__(
            f"Can't delete node {machine_id} from pool {pool_name}, "
            f"node is in pool {actual_pool!r}"
        )


class ClusterUnavailableError(ScalerError):
    """The cluster is paused or being provisioned and must not be written"""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Cluster {name} is not accepting size changes: {reason}")


class InventoryError(ScalerError):
    """The node API call failed"""


class StoreWriteError(ScalerError):
    """The cluster custom resource could not be written"""


class ConflictError(StoreWriteError):
    """A write carried a stale resource version"""


class RetriesExhaustedError(ScalerError):
    """The size writer gave up; the last error is chained as __cause__"""

    def __init__(self, pool_name: str, delta: int, attempts: int, last_error: Exception):
        self.pool_name = pool_name
        self.delta = delta
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to change size of pool {pool_name} by {delta} "
            f"after {attempts} attempts: {last_error}"
        )


__all__ = [
    "ScalerError",
    "ClusterLookupError",
    "NotFoundError",
    "InvalidArgumentError",
    "BoundsError",
    "InvariantViolationError",
    "MembershipError",
    "ClusterUnavailableError",
    "InventoryError",
    "StoreWriteError",
    "ConflictError",
    "RetriesExhaustedError",
]
