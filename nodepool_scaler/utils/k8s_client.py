"""
Kubernetes API access for the scaler

Config comes from the pod's ServiceAccount when the scaler runs in-cluster,
otherwise from the local kubeconfig.
"""
import logging
import os
from typing import Optional, Tuple

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

logger = logging.getLogger(__name__)

# Failures a Kubernetes API call can raise: API errors and transport errors
KUBERNETES_ERRORS = (ApiException, HTTPError, OSError)

IN_CLUSTER = "in-cluster"
KUBECONFIG = "kubeconfig"

_config_source: Optional[str] = None


def is_running_in_cluster() -> bool:
    return "KUBERNETES_SERVICE_HOST" in os.environ


def load_config() -> str:
    """Load the client config on first use

    Returns:
        str: IN_CLUSTER or KUBECONFIG

    Raises:
        RuntimeError: neither source could be loaded
    """
    global _config_source
    if _config_source is not None:
        return _config_source

    if is_running_in_cluster():
        try:
            config.load_incluster_config()
            _config_source = IN_CLUSTER
        except config.ConfigException as e:
            logger.warning(f"ServiceAccount config unusable ({e}), trying kubeconfig")

    if _config_source is None:
        try:
            config.load_kube_config()
        except config.ConfigException as e:
            raise RuntimeError(f"No usable Kubernetes config: {e}") from e
        _config_source = KUBECONFIG

    logger.info(f"Kubernetes client config loaded from {_config_source}")
    return _config_source


def get_k8s_clients() -> Tuple[client.CoreV1Api, client.CustomObjectsApi]:
    """CoreV1Api for nodes and events, CustomObjectsApi for the cluster resource"""
    load_config()
    return client.CoreV1Api(), client.CustomObjectsApi()


def describe_error(e: BaseException) -> str:
    """Short text for an API or transport failure"""
    if isinstance(e, ApiException):
        return f"{e.status} {e.reason}"
    return f"{type(e).__name__}: {e}"


def get_environment_info() -> dict:
    """Where the scaler talks to the API server from, for the health endpoint"""
    if not is_running_in_cluster():
        return {"environment": "local", "config_source": "~/.kube/config"}
    return {
        "environment": "in-cluster",
        "config_source": "ServiceAccount token",
        "kubernetes_host": os.environ.get("KUBERNETES_SERVICE_HOST"),
        "kubernetes_port": os.environ.get("KUBERNETES_SERVICE_PORT"),
    }


__all__ = [
    "KUBERNETES_ERRORS",
    "describe_error",
    "get_k8s_clients",
    "get_environment_info",
    "is_running_in_cluster",
    "load_config",
]
