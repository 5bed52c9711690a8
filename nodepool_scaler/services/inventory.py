"""
Machine inventory
Live worker nodes, looked up by pool label or by stable identifier
"""
import logging
from typing import List, Optional

from nodepool_scaler.core.errors import InventoryError
from nodepool_scaler.models.machine import Machine
from nodepool_scaler.utils.helpers import format_timestamp, label_selector, utc_now
from nodepool_scaler.utils.k8s_client import KUBERNETES_ERRORS, describe_error

logger = logging.getLogger(__name__)


class MachineInventory:
    """Node queries and deletion marking through the CoreV1Api"""

    def __init__(self, core_v1, pool_label: str, deletion_annotation: str):
        self.core_v1 = core_v1
        self.pool_label = pool_label
        self.deletion_annotation = deletion_annotation

    def _list(self, selector: Optional[str] = None) -> List[Machine]:
        try:
            if selector:
                nodes = self.core_v1.list_node(label_selector=selector)
            else:
                nodes = self.core_v1.list_node()
        except KUBERNETES_ERRORS as e:
            logger.warning(f"Error listing nodes (selector={selector!r}): {describe_error(e)}")
            raise InventoryError(f"failed to list nodes: {describe_error(e)}") from e

        return [
            Machine.from_node(node, self.pool_label, self.deletion_annotation)
            for node in nodes.items
        ]

    def list_pool(self, pool_name: str) -> List[Machine]:
        """Machines carrying the pool label"""
        machines = self._list(label_selector({self.pool_label: pool_name}))
        logger.debug(f"Pool {pool_name} has {len(machines)} nodes")
        return machines

    def machine_ids(self, pool_name: str) -> List[str]:
        return [machine.stable_identifier for machine in self.list_pool(pool_name)]

    def count(self, pool_name: str) -> int:
        return len(self.list_pool(pool_name))

    def find(self, machine_id: str) -> Optional[Machine]:
        """The machine whose stable identifier matches, or None"""
        for machine in self._list():
            if machine.stable_identifier == machine_id:
                return machine
        return None

    def mark_for_deletion(self, machine: Machine) -> str:
        """Annotate the node with the deletion request time

        The node itself is torn down by the controller watching the annotation.

        Returns:
            str: the timestamp written to the annotation
        """
        requested_at = format_timestamp(utc_now())
        body = {"metadata": {"annotations": {self.deletion_annotation: requested_at}}}
        try:
            self.core_v1.patch_node(machine.name, body)
        except KUBERNETES_ERRORS as e:
            raise InventoryError(
                f"failed to mark node {machine.name} for deletion: {describe_error(e)}"
            ) from e

        logger.info(f"Node {machine.name} ({machine.stable_identifier}) marked for deletion at {requested_at}")
        return requested_at
