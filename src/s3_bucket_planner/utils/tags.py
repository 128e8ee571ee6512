"""Tag merging for planned buckets."""

from __future__ import annotations

from ..constants import CONTROLLER_NAME
from ..services.aws.models import BucketConfig


def get_standard_tags(config: BucketConfig) -> dict[str, str]:
    """Tags every planned bucket carries."""
    return {
        "Name": config.name,
        "Environment": config.environment,
        "Purpose": config.purpose,
        "ManagedBy": CONTROLLER_NAME,
    }


def merge_tags(config: BucketConfig) -> dict[str, str]:
    """Merge user tags with the standard tags.

    Standard tags are applied last and override user tags with the same key.
    """
    return {**dict(config.tags), **get_standard_tags(config)}
