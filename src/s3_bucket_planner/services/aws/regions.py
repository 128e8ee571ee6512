"""Region resolution backed by botocore's bundled endpoint data."""

from __future__ import annotations

import logging
from functools import lru_cache

import boto3

from ...constants import AWS_PARTITION, DEFAULT_REGION

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_s3_regions() -> frozenset[str]:
    """Return every S3 region known to botocore in the ``aws`` partition.

    The data ships with botocore, so no network call or credentials are needed.
    """
    session = boto3.session.Session()
    return frozenset(session.get_available_regions("s3", partition_name=AWS_PARTITION))


def is_known_region(region: str) -> bool:
    """Check whether a region is a known S3 region."""
    return region in get_s3_regions()


def resolve_region(region: str | None = None) -> str:
    """Resolve the region a bucket is planned in.

    An explicit region wins. Otherwise the boto3 session default is used
    (``AWS_REGION``/``AWS_DEFAULT_REGION`` or the shared config file), then
    ``DEFAULT_REGION``.

    Args:
        region: Region from the bucket configuration, if any

    Returns:
        Region name
    """
    if region:
        return region

    session_region = boto3.session.Session().region_name
    if session_region:
        return session_region

    logger.debug(f"No region configured, falling back to {DEFAULT_REGION}")
    return DEFAULT_REGION
