"""
Pytest configuration and fixtures
"""
import copy
import threading
from typing import Generator, AsyncGenerator, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from kubernetes import client as k8s
from kubernetes.client.rest import ApiException

from nodepool_scaler.services.cluster_store import ClusterSpecStore
from nodepool_scaler.services.events import AuditEventRecorder
from nodepool_scaler.services.inventory import MachineInventory
from nodepool_scaler.services.provider import NodePoolProvider
from nodepool_scaler.services.reconciler import TargetSizeReconciler
from nodepool_scaler.services.registry import PoolRegistry

CLUSTER_NAME = "test-cluster"
CLUSTER_NAMESPACE = "kommander"
POOL_LABEL = "autoscaling.k8s.io/nodegroup"
DELETION_ANNOTATION = "autoscaling.k8s.io/scale-down-requested-at"
CONTROL_PLANE_LABEL = "node-role.kubernetes.io/master"
GROUP = "kommander.mesosphere.io"
VERSION = "v1beta1"
PLURAL = "konvoyclusters"


# ============================================
# Fake Kubernetes APIs
# ============================================

class FakeCustomObjectsApi:
    """In-memory CustomObjectsApi holding one cluster resource.

    replace_namespaced_custom_object rejects a body whose resourceVersion is
    not the stored one with a 409, like the API server.
    """

    def __init__(self, obj: Optional[dict]):
        self._lock = threading.Lock()
        self.obj = copy.deepcopy(obj)
        self.get_calls = 0
        self.replace_calls = 0
        self.get_hook = None
        self.get_error: Optional[Exception] = None
        self.replace_errors = []

    def get_namespaced_custom_object(self, group, version, namespace, plural, name):
        with self._lock:
            self.get_calls += 1
            if self.get_error is not None:
                raise self.get_error
            if self.obj is None or self.obj["metadata"]["name"] != name:
                raise ApiException(status=404, reason="Not Found")
            result = copy.deepcopy(self.obj)
        if self.get_hook is not None:
            self.get_hook()
        return result

    def replace_namespaced_custom_object(self, group, version, namespace, plural, name, body):
        with self._lock:
            self.replace_calls += 1
            if self.replace_errors:
                raise self.replace_errors.pop(0)
            current = self.obj["metadata"]["resourceVersion"]
            if body["metadata"].get("resourceVersion") != current:
                raise ApiException(status=409, reason="Conflict")
            stored = copy.deepcopy(body)
            stored["metadata"]["resourceVersion"] = str(int(current) + 1)
            self.obj = stored
            return copy.deepcopy(stored)

    # Test helpers

    def pool(self, name: str) -> dict:
        for pool in self.obj["spec"]["provisioner"]["nodePools"]:
            if pool["name"] == name:
                return pool
        raise KeyError(name)

    def bump(self, **status):
        """Simulate a concurrent write by the provisioning engine"""
        with self._lock:
            self.obj["status"].update(status)
            self.obj["metadata"]["resourceVersion"] = str(int(self.obj["metadata"]["resourceVersion"]) + 1)


class FakeCoreV1Api:
    """In-memory CoreV1Api for nodes and events"""

    def __init__(self, nodes=None):
        self.nodes = list(nodes or [])
        self.events = []
        self.patches = []
        self.list_error: Optional[Exception] = None

    def list_node(self, label_selector=None):
        if self.list_error is not None:
            raise self.list_error
        items = self.nodes
        if label_selector:
            wanted = dict(term.split("=", 1) for term in label_selector.split(","))
            items = [
                node for node in items
                if all((node.metadata.labels or {}).get(k) == v for k, v in wanted.items())
            ]
        return k8s.V1NodeList(items=list(items))

    def patch_node(self, name, body):
        for node in self.nodes:
            if node.metadata.name == name:
                annotations = dict(node.metadata.annotations or {})
                annotations.update(body["metadata"]["annotations"])
                node.metadata.annotations = annotations
                self.patches.append((name, body))
                return node
        raise ApiException(status=404, reason="Not Found")

    def create_namespaced_event(self, namespace, body):
        self.events.append(body)
        return body


# ============================================
# Data Fixtures
# ============================================

@pytest.fixture
def make_cluster():
    """Build a raw cluster custom resource"""
    def _make(pools=None, paused=False, phase="Provisioned", resource_version="1"):
        if pools is None:
            pools = [
                {
                    "name": "workers",
                    "count": 3,
                    "autoscalingOptions": {"minSize": 1, "maxSize": 10},
                    "machine": {"type": "m5.xlarge"},
                },
                {"name": "control-plane", "count": 3, "controlPlane": True},
            ]
        return {
            "apiVersion": f"{GROUP}/{VERSION}",
            "kind": "KonvoyCluster",
            "metadata": {
                "name": CLUSTER_NAME,
                "namespace": CLUSTER_NAMESPACE,
                "resourceVersion": resource_version,
            },
            "spec": {
                "provisioningPaused": paused,
                "provisioner": {"provider": "aws", "nodePools": pools},
            },
            "status": {"phase": phase},
        }
    return _make


@pytest.fixture
def make_node():
    """Build a V1Node"""
    def _make(name, pool=None, provider_id=None, labels=None, annotations=None):
        node_labels = dict(labels or {})
        if pool is not None:
            node_labels[POOL_LABEL] = pool
        return k8s.V1Node(
            metadata=k8s.V1ObjectMeta(name=name, labels=node_labels, annotations=annotations),
            spec=k8s.V1NodeSpec(provider_id=provider_id),
        )
    return _make


@pytest.fixture
def worker_nodes(make_node):
    """Three live nodes in the workers pool"""
    return [
        make_node(f"ip-10-0-0-{i}", pool="workers", provider_id=f"aws:///us-west-2a/i-00{i}")
        for i in range(1, 4)
    ]


# ============================================
# Service Fixtures
# ============================================

@pytest.fixture
def custom_api(make_cluster):
    return FakeCustomObjectsApi(make_cluster())


@pytest.fixture
def core_v1(worker_nodes):
    return FakeCoreV1Api(worker_nodes)


@pytest.fixture
def store(custom_api):
    return ClusterSpecStore(
        custom_api, name=CLUSTER_NAME, namespace=CLUSTER_NAMESPACE,
        group=GROUP, version=VERSION, plural=PLURAL,
    )


@pytest.fixture
def inventory(core_v1):
    return MachineInventory(core_v1, pool_label=POOL_LABEL, deletion_annotation=DELETION_ANNOTATION)


@pytest.fixture
def recorder(core_v1):
    return AuditEventRecorder(
        core_v1,
        namespace=CLUSTER_NAMESPACE,
        involved_name=CLUSTER_NAME,
        involved_kind="KonvoyCluster",
        involved_api_version=f"{GROUP}/{VERSION}",
        source="nodepool-scaler",
    )


@pytest.fixture
def mock_recorder():
    return MagicMock(spec=AuditEventRecorder)


@pytest.fixture
def reconciler(store, inventory, recorder):
    return TargetSizeReconciler(store, inventory, recorder, attempts=3)


@pytest.fixture
def registry(store, reconciler):
    return PoolRegistry(store, reconciler)


@pytest.fixture
def provider(registry, inventory):
    return NodePoolProvider(
        registry,
        inventory,
        name="nodepool",
        gpu_label="nodepool.autoscaling.k8s.io/gpu",
        gpu_types=["nvidia-tesla-k80", "nvidia-tesla-v100"],
        control_plane_label=CONTROL_PLANE_LABEL,
    )


# ============================================
# App Fixtures
# ============================================

@pytest.fixture
def app(provider):
    """FastAPI app wired to the fake cluster"""
    from nodepool_scaler.main import create_app
    return create_app(provider=provider)


@pytest.fixture
def client(app) -> Generator:
    """Synchronous test client (runs startup discovery)"""
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def async_client(app, provider) -> AsyncGenerator:
    """Asynchronous test client"""
    provider.refresh()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
