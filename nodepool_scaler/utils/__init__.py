# Utility functions
from .helpers import label_selector, utc_now, format_timestamp
from .locks import ReadWriteLock

# Kubernetes client with environment detection (supports local development)
from .k8s_client import (
    KUBERNETES_ERRORS,
    get_k8s_clients,
    is_running_in_cluster,
    get_environment_info,
)

__all__ = [
    'label_selector', 'utc_now', 'format_timestamp',
    'ReadWriteLock',
    'KUBERNETES_ERRORS', 'get_k8s_clients', 'is_running_in_cluster', 'get_environment_info',
]
