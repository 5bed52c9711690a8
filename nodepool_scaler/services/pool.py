"""
Pool handle
Per-pool facade the autoscaler talks to
"""
import logging
from typing import List

from nodepool_scaler.core.errors import BoundsError, InvalidArgumentError
from nodepool_scaler.models.pool import PoolInfo, PoolStatus

logger = logging.getLogger(__name__)


class PoolHandle:
    """Identity and bounds of one autoscalable pool, bound to the reconciler.

    Name and bounds are a snapshot taken at registry refresh; every size read
    or change goes through the reconciler against the live cluster resource.
    """

    def __init__(self, name: str, min_size: int, max_size: int, reconciler):
        self.name = name
        self._min_size = min_size
        self._max_size = max_size
        self._reconciler = reconciler

    def __repr__(self):
        return f"PoolHandle({self.debug()})"

    def id(self) -> str:
        return self.name

    @property
    def min_size(self) -> int:
        return self._min_size

    @property
    def max_size(self) -> int:
        return self._max_size

    def debug(self) -> str:
        return f"{self.name} ({self._min_size}:{self._max_size})"

    def exist(self) -> bool:
        return True

    def autoprovisioned(self) -> bool:
        return False

    def info(self) -> PoolInfo:
        return PoolInfo(name=self.name, min_size=self._min_size, max_size=self._max_size)

    def status(self) -> PoolStatus:
        machines = self.machines()
        return PoolStatus(
            name=self.name,
            min_size=self._min_size,
            max_size=self._max_size,
            target_size=self.target_size(),
            observed_size=len(machines),
            machines=machines,
        )

    # Sizes

    def target_size(self) -> int:
        size = self._reconciler.target_size(self.name)
        logger.debug(f"TargetSize() of {self.name}: {size}")
        return size

    def observed_size(self) -> int:
        return self._reconciler.observed_machine_count(self.name)

    def machines(self) -> List[str]:
        """Stable identifiers of the pool's live nodes"""
        return self._reconciler.machine_ids(self.name)

    # Changes

    def increase_size(self, delta: int) -> int:
        logger.info(f"IncreaseSize {self.name} by {delta}")
        if delta <= 0:
            raise InvalidArgumentError(f"size increase must be positive, got {delta}")
        return self._reconciler.increase_size(self.name, delta)

    def decrease_target_size(self, delta: int) -> int:
        logger.info(f"DecreaseTargetSize {self.name} by {delta}")
        if delta >= 0:
            raise InvalidArgumentError(f"size decrease must be negative, got {delta}")
        return self._reconciler.decrease_target_size(self.name, delta)

    def remove_machine(self, machine_id: str) -> int:
        logger.info(f"RemoveMachine {machine_id} from {self.name}")
        return self._reconciler.remove_machine(self.name, machine_id)

    def delete_machines(self, machine_ids: List[str]) -> None:
        """Remove several machines, refusing to go below the pool's min size

        Machines are removed one at a time; the first failure stops the batch.
        """
        if not machine_ids:
            return
        logger.info(f"DeleteNodes {machine_ids} from {self.name}")
        size = self.target_size()
        if size - len(machine_ids) < self._min_size:
            raise BoundsError(
                self.name, size - len(machine_ids), self._min_size,
                f"min size reached for pool {self.name}, nodes will not be deleted "
                f"(target size {size}, min {self._min_size}, requested {len(machine_ids)})",
            )
        for machine_id in machine_ids:
            self._reconciler.remove_machine(self.name, machine_id)
