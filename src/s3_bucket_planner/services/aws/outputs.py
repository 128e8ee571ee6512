"""Projection of planned bucket attributes into named outputs."""

from __future__ import annotations

from typing import Any

from ...constants import (
    REDACTED,
    RESOURCE_CORS,
    RESOURCE_INTELLIGENT_TIERING,
    RESOURCE_LIFECYCLE,
    RESOURCE_NOTIFICATION,
    RESOURCE_OBJECT_LOCK,
    RESOURCE_REPLICATION,
    S3_WEBSITE_LEGACY_REGIONS,
    SENSITIVE_OUTPUTS,
)
from ...utils.tags import merge_tags
from .models import BucketConfig, ResourceDeclaration


def bucket_arn(name: str) -> str:
    return f"arn:aws:s3:::{name}"


def bucket_url(name: str, region: str) -> str:
    """Return the virtual-hosted HTTPS URL of a bucket."""
    return f"https://{name}.s3.{region}.amazonaws.com"


def website_domain(region: str) -> str:
    """Return the static website domain, which is dash-separated only in older regions."""
    separator = "-" if region in S3_WEBSITE_LEGACY_REGIONS else "."
    return f"s3-website{separator}{region}.amazonaws.com"


def _attributes_of(declarations: list[ResourceDeclaration], resource_type: str) -> list[dict[str, Any]]:
    return [dict(d.attributes) for d in declarations if d.resource_type == resource_type]


def _single(declarations: list[ResourceDeclaration], resource_type: str) -> dict[str, Any] | None:
    found = _attributes_of(declarations, resource_type)
    return found[0] if found else None


def build_outputs(
    config: BucketConfig,
    declarations: list[ResourceDeclaration],
    region: str,
) -> dict[str, Any]:
    """Build the named outputs of a planned bucket.

    Configuration-echo outputs are taken from the declarations so they show
    exactly what is handed to the provisioning engine.

    Args:
        config: Validated bucket configuration
        declarations: Declarations produced by the expander
        region: Resolved bucket region

    Returns:
        Mapping of output name to value; see ``SENSITIVE_OUTPUTS``
    """
    name = config.name
    encryption = config.encryption
    pab = config.public_access_block

    lifecycle = _single(declarations, RESOURCE_LIFECYCLE)
    cors = _single(declarations, RESOURCE_CORS)
    notification = _single(declarations, RESOURCE_NOTIFICATION)
    replication = _single(declarations, RESOURCE_REPLICATION)
    object_lock = _single(declarations, RESOURCE_OBJECT_LOCK)

    return {
        "bucket_id": name,
        "bucket_arn": bucket_arn(name),
        "bucket_domain_name": f"{name}.s3.amazonaws.com",
        "bucket_regional_domain_name": f"{name}.s3.{region}.amazonaws.com",
        "bucket_region": region,
        "bucket_url": bucket_url(name, region),
        "versioning_status": "Enabled" if config.versioning.enabled else "Suspended",
        "encryption_algorithm": encryption.algorithm,
        "kms_key_id": encryption.kms_key_id if encryption.algorithm == "aws:kms" else None,
        "public_access_block": {
            "block_public_acls": pab.block_public_acls,
            "block_public_policy": pab.block_public_policy,
            "ignore_public_acls": pab.ignore_public_acls,
            "restrict_public_buckets": pab.restrict_public_buckets,
        },
        "object_ownership": config.object_ownership,
        "acl": config.acl,
        "lifecycle_rules": lifecycle["rule"] if lifecycle else [],
        "cors_rules": cors["cors_rule"] if cors else [],
        "website_endpoint": f"{name}.{website_domain(region)}" if config.website.enabled else None,
        "website_domain": website_domain(region) if config.website.enabled else None,
        "notification_configuration": notification,
        "replication_configuration": replication,
        "intelligent_tiering_configurations": {
            attributes["name"]: attributes
            for attributes in _attributes_of(declarations, RESOURCE_INTELLIGENT_TIERING)
        },
        "object_lock_configuration": object_lock["rule"] if object_lock else None,
        "tags": merge_tags(config),
    }


def redact_outputs(outputs: dict[str, Any]) -> dict[str, Any]:
    """Replace sensitive output values that are set with a redaction marker."""
    return {
        key: REDACTED if key in SENSITIVE_OUTPUTS and value is not None else value
        for key, value in outputs.items()
    }
