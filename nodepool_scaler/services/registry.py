"""
Pool registry
Autoscalable pools discovered from the cluster resource, cached in memory
"""
import logging
from typing import List, Optional, Tuple

from nodepool_scaler.core.errors import ClusterLookupError
from nodepool_scaler.services.cluster_store import ClusterSpecStore
from nodepool_scaler.services.pool import PoolHandle
from nodepool_scaler.utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class PoolRegistry:
    """Snapshot of the autoscalable pools.

    refresh() builds a new snapshot and swaps it in under the writer lock;
    readers never see a partially built list. A failed refresh keeps the
    previous snapshot.
    """

    def __init__(self, store: ClusterSpecStore, reconciler):
        self.store = store
        self.reconciler = reconciler
        self._lock = ReadWriteLock()
        self._pools: Tuple[PoolHandle, ...] = ()
        self._version: Optional[str] = None

    @property
    def version(self) -> Optional[str]:
        with self._lock.read_locked():
            return self._version

    def refresh(self) -> bool:
        """Re-read the cluster resource and rebuild the pool list

        Returns:
            bool: False when the cached snapshot was already up to date

        Raises:
            ClusterLookupError: the cluster resource could not be read
        """
        try:
            cluster = self.store.get()
        except ClusterLookupError as e:
            logger.error(f"Error retrieving cluster {self.store.namespace}/{self.store.name}: {e}")
            raise

        version = cluster.resource_version
        if version is not None and version == self.version:
            logger.debug(f"Pool list already up to date at resourceVersion {version}")
            return False

        pools = tuple(
            PoolHandle(
                name=pool.name,
                min_size=pool.autoscaling_options.min_size,
                max_size=pool.autoscaling_options.max_size,
                reconciler=self.reconciler,
            )
            for pool in cluster.spec.autoscalable_pools()
        )
        for pool in pools:
            logger.debug(f"Adding pool: {pool.debug()}")

        with self._lock.write_locked():
            self._pools = pools
            self._version = version

        logger.info(f"Discovered {len(pools)} autoscalable pools in cluster {cluster.spec.name}")
        return True

    def list(self) -> List[PoolHandle]:
        with self._lock.read_locked():
            return list(self._pools)

    def get(self, name: str) -> Optional[PoolHandle]:
        with self._lock.read_locked():
            for pool in self._pools:
                if pool.name == name:
                    return pool
        return None
