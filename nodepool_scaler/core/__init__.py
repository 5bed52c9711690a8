# Core module - configuration, errors
from .config import settings, Settings
from .errors import (
    ScalerError,
    ClusterLookupError,
    NotFoundError,
    InvalidArgumentError,
    BoundsError,
    InvariantViolationError,
    MembershipError,
    ClusterUnavailableError,
    InventoryError,
    StoreWriteError,
    ConflictError,
    RetriesExhaustedError,
)

__all__ = [
    'settings',
    'Settings',
    'ScalerError',
    'ClusterLookupError',
    'NotFoundError',
    'InvalidArgumentError',
    'BoundsError',
    'InvariantViolationError',
    'MembershipError',
    'ClusterUnavailableError',
    'InventoryError',
    'StoreWriteError',
    'ConflictError',
    'RetriesExhaustedError',
]
