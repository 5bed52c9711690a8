"""
Target size reconciler

Reads and changes the desired node count of a pool in the cluster resource.
The cluster resource is shared with the provisioning engine, so every change
is a fetch -> mutate copy -> conditional write loop that re-reads on a
resourceVersion conflict. Deltas are applied to the freshly read count on
every attempt, which keeps concurrent changes to the same pool from
overwriting each other.
"""
import logging
from typing import Callable, List, Optional

from nodepool_scaler.core.errors import (
    BoundsError,
    ClusterLookupError,
    ClusterUnavailableError,
    InvalidArgumentError,
    InvariantViolationError,
    MembershipError,
    NotFoundError,
    RetriesExhaustedError,
    ScalerError,
    StoreWriteError,
)
from nodepool_scaler.models.cluster import ClusterSpec, NodePool
from nodepool_scaler.services.cluster_store import ClusterSpecStore
from nodepool_scaler.services.events import AuditEventRecorder
from nodepool_scaler.services.inventory import MachineInventory

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3

# Called with the fresh pool and the proposed count; raises to refuse the change
SizeCheck = Callable[[NodePool, int], None]


def _require_pool(spec: ClusterSpec, pool_name: str) -> NodePool:
    pool = spec.find_pool(pool_name)
    if pool is None:
        raise NotFoundError(f"node pool {pool_name} not found in cluster {spec.name}")
    return pool


def _require_available(spec: ClusterSpec):
    reason = spec.unavailable_reason()
    if reason is not None:
        raise ClusterUnavailableError(spec.name, reason)


class TargetSizeReconciler:
    """Pool size operations backed by the cluster resource"""

    def __init__(self, store: ClusterSpecStore, inventory: MachineInventory,
                 recorder: AuditEventRecorder, attempts: int = DEFAULT_ATTEMPTS):
        self.store = store
        self.inventory = inventory
        self.recorder = recorder
        self.attempts = attempts

    # ============================================
    # Reads
    # ============================================

    def target_size(self, pool_name: str) -> int:
        """Desired count of the pool as currently stored"""
        cluster = self.store.get()
        return _require_pool(cluster.spec, pool_name).count

    def observed_machine_count(self, pool_name: str) -> int:
        """Number of live nodes labelled with the pool"""
        return self.inventory.count(pool_name)

    def machine_ids(self, pool_name: str) -> List[str]:
        return self.inventory.machine_ids(pool_name)

    # ============================================
    # Mutations
    # ============================================

    def increase_size(self, pool_name: str, delta: int) -> int:
        """Grow the target size by delta, never past the pool's max size

        Returns:
            int: the new target size
        """
        if delta <= 0:
            raise InvalidArgumentError(f"size increase must be positive, got {delta}")

        def within_max(pool: NodePool, new_size: int):
            if pool.autoscaling_options is None:
                raise NotFoundError(f"node pool {pool_name} is not autoscalable")
            max_size = pool.autoscaling_options.max_size
            if new_size > max_size:
                raise BoundsError(
                    pool_name, new_size, max_size,
                    f"size increase too large for pool {pool_name}, desired: {new_size} max: {max_size}",
                )

        return self._reported(pool_name, delta, lambda: self._change_size(pool_name, delta, within_max))

    def decrease_target_size(self, pool_name: str, delta: int) -> int:
        """Shrink the target size by -delta without touching existing nodes

        Only requests for nodes that have not shown up yet can be withdrawn:
        the new target size may not drop below the observed node count.

        Returns:
            int: the new target size
        """
        if delta >= 0:
            raise InvalidArgumentError(f"size decrease must be negative, got {delta}")

        def decrease():
            observed = self.inventory.count(pool_name)

            def keeps_existing_nodes(pool: NodePool, new_size: int):
                if new_size < observed:
                    raise InvariantViolationError(pool_name, pool.count, delta, observed)

            return self._change_size(pool_name, delta, keeps_existing_nodes)

        return self._reported(pool_name, delta, decrease)

    def remove_machine(self, pool_name: str, machine_id: str) -> int:
        """Mark one machine for deletion and shrink the target size by one

        The cluster is checked before the node is annotated. If the size write
        still fails afterwards the annotation stays in place and the error is
        raised; the caller retries the whole removal.

        Returns:
            int: the new target size
        """
        def remove():
            machine = self.inventory.find(machine_id)
            if machine is None:
                raise NotFoundError(f"can't delete node {machine_id} from pool {pool_name}, node does not exist")
            if machine.pool_label != pool_name:
                raise MembershipError(machine_id, pool_name, machine.pool_label)

            cluster = self.store.get()
            _require_available(cluster.spec)
            _require_pool(cluster.spec, pool_name)

            self.inventory.mark_for_deletion(machine)
            return self._change_size(pool_name, -1)

        return self._reported(pool_name, -1, remove)

    # ============================================
    # Internals
    # ============================================

    def _reported(self, pool_name: str, delta: int, operation: Callable[[], int]) -> int:
        try:
            return operation()
        except ScalerError as e:
            self.recorder.record(pool_name, delta, error=e)
            raise

    def _change_size(self, pool_name: str, delta: int, check: Optional[SizeCheck] = None) -> int:
        """Bounded retry writer shared by every size mutation"""
        last_error: Optional[ScalerError] = None

        for attempt in range(1, self.attempts + 1):
            try:
                cluster = self.store.get()
            except ClusterLookupError as e:
                logger.warning(f"Error retrieving cluster (attempt {attempt}/{self.attempts}): {e}")
                last_error = e
                continue

            # A paused or provisioning cluster will not settle within the retry window
            _require_available(cluster.spec)
            pool = _require_pool(cluster.spec, pool_name)

            new_size = pool.count + delta
            if new_size < 0:
                raise BoundsError(
                    pool_name, new_size, 0,
                    f"target size of pool {pool_name} cannot drop below zero (current {pool.count}, delta {delta})",
                )
            if check is not None:
                check(pool, new_size)

            try:
                self.store.update(cluster.with_pool_count(pool_name, new_size))
            except StoreWriteError as e:
                logger.warning(
                    f"Error updating cluster {cluster.spec.name} "
                    f"(attempt {attempt}/{self.attempts}): {e}"
                )
                last_error = e
                continue

            logger.info(f"Cluster {cluster.spec.name} target size set to {new_size} for pool {pool_name}")
            self.recorder.record(pool_name, delta, target_size=new_size)
            return new_size

        logger.error(f"Giving up on changing pool {pool_name} by {delta} after {self.attempts} attempts")
        raise RetriesExhaustedError(pool_name, delta, self.attempts, last_error) from last_error
