"""
Cluster custom resource store
Versioned get/replace of the cluster resource through the CustomObjectsApi
"""
import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict

from kubernetes.client.rest import ApiException

from nodepool_scaler.core.errors import ClusterLookupError, ConflictError, NotFoundError, StoreWriteError
from nodepool_scaler.models.cluster import ClusterSpec
from nodepool_scaler.utils.k8s_client import KUBERNETES_ERRORS, describe_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterObject:
    """A fetched cluster resource: the raw body plus its parsed projection.

    The raw body carries metadata.resourceVersion, so replacing it is a
    conditional write against the version that was read.
    """
    raw: Dict[str, Any]
    spec: ClusterSpec

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "ClusterObject":
        return cls(raw=raw, spec=ClusterSpec.from_custom_object(raw))

    @property
    def resource_version(self):
        return self.spec.resource_version

    def with_pool_count(self, pool_name: str, count: int) -> "ClusterObject":
        """Copy of this object with one pool's count replaced"""
        raw = copy.deepcopy(self.raw)
        pools = ((raw.get("spec") or {}).get("provisioner") or {}).get("nodePools") or []
        for pool in pools:
            if pool.get("name") == pool_name:
                pool["count"] = count
                return ClusterObject.from_raw(raw)
        raise NotFoundError(f"node pool {pool_name} does not exist")


class ClusterSpecStore:
    """Reads and conditionally writes one namespaced cluster custom resource"""

    def __init__(self, custom_api, name: str, namespace: str,
                 group: str, version: str, plural: str):
        self.custom_api = custom_api
        self.name = name
        self.namespace = namespace
        self.group = group
        self.version = version
        self.plural = plural

    def get(self) -> ClusterObject:
        """Fetch the latest cluster resource

        Raises:
            ClusterLookupError: the resource is missing or the API call failed
        """
        try:
            raw = self.custom_api.get_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=self.namespace,
                plural=self.plural,
                name=self.name,
            )
        except KUBERNETES_ERRORS as e:
            if isinstance(e, ApiException) and e.status == 404:
                raise ClusterLookupError(self.namespace, self.name, "not found") from e
            raise ClusterLookupError(self.namespace, self.name, describe_error(e)) from e

        return ClusterObject.from_raw(copy.deepcopy(raw))

    def update(self, cluster: ClusterObject) -> ClusterObject:
        """Replace the cluster resource with the version it was read at

        Raises:
            ConflictError: the resource changed since it was read
            StoreWriteError: any other API failure
        """
        try:
            raw = self.custom_api.replace_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=self.namespace,
                plural=self.plural,
                name=self.name,
                body=cluster.raw,
            )
        except KUBERNETES_ERRORS as e:
            if isinstance(e, ApiException) and e.status == 409:
                logger.warning(
                    f"Cluster {self.namespace}/{self.name} changed since resourceVersion "
                    f"{cluster.resource_version}"
                )
                raise ConflictError(
                    f"cluster {self.namespace}/{self.name} was modified concurrently"
                ) from e
            raise StoreWriteError(
                f"failed to update cluster {self.namespace}/{self.name}: {describe_error(e)}"
            ) from e

        return ClusterObject.from_raw(copy.deepcopy(raw))
