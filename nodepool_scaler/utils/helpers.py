"""
Utility helper functions
"""
from datetime import datetime, timezone
from typing import Dict


def label_selector(labels: Dict[str, str]) -> str:
    """Render an equality-based label selector (e.g. "a=b,c=d")"""
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 timestamp in UTC, second precision"""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
