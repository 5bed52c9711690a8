"""
Application configuration settings
"""
import os
from typing import List


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    """Application settings"""

    # App
    APP_TITLE: str = "Node Pool Scaler API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Cluster custom resource holding the node pools
    CLUSTER_NAME: str = os.getenv("CLUSTER_NAME", "")
    CLUSTER_NAMESPACE: str = os.getenv("CLUSTER_NAMESPACE", "kommander")
    CLUSTER_GROUP: str = os.getenv("CLUSTER_GROUP", "kommander.mesosphere.io")
    CLUSTER_VERSION: str = os.getenv("CLUSTER_VERSION", "v1beta1")
    CLUSTER_PLURAL: str = os.getenv("CLUSTER_PLURAL", "konvoyclusters")
    CLUSTER_KIND: str = os.getenv("CLUSTER_KIND", "KonvoyCluster")

    # Node labels / annotations
    POOL_LABEL: str = os.getenv("POOL_LABEL", "autoscaling.k8s.io/nodegroup")
    CONTROL_PLANE_LABEL: str = os.getenv("CONTROL_PLANE_LABEL", "node-role.kubernetes.io/master")
    DELETION_ANNOTATION: str = os.getenv(
        "DELETION_ANNOTATION", "autoscaling.k8s.io/scale-down-requested-at"
    )

    # Target size writes
    SIZE_UPDATE_ATTEMPTS: int = int(os.getenv("SIZE_UPDATE_ATTEMPTS", "3"))

    # Provider metadata
    PROVIDER_NAME: str = os.getenv("PROVIDER_NAME", "nodepool")
    GPU_LABEL: str = os.getenv("GPU_LABEL", "nodepool.autoscaling.k8s.io/gpu")
    AVAILABLE_GPU_TYPES: List[str] = _env_list(
        "AVAILABLE_GPU_TYPES", "nvidia-tesla-k80,nvidia-tesla-p100,nvidia-tesla-v100"
    )

    # Audit events
    EVENT_SOURCE: str = os.getenv("EVENT_SOURCE", "nodepool-scaler")


settings = Settings()
