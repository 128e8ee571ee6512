"""Expansion of a validated bucket configuration into resource declarations."""

from __future__ import annotations

import heapq
import json
import logging
from typing import Any

from ...constants import (
    RESOURCE_ACL,
    RESOURCE_BUCKET,
    RESOURCE_CORS,
    RESOURCE_ENCRYPTION,
    RESOURCE_INTELLIGENT_TIERING,
    RESOURCE_LIFECYCLE,
    RESOURCE_NOTIFICATION,
    RESOURCE_OBJECT_LOCK,
    RESOURCE_ORDER,
    RESOURCE_OWNERSHIP_CONTROLS,
    RESOURCE_POLICY,
    RESOURCE_PUBLIC_ACCESS_BLOCK,
    RESOURCE_REPLICATION,
    RESOURCE_VERSIONING,
    RESOURCE_WEBSITE,
)
from ...utils.errors import DependencyOrderingDefect
from ...utils.tags import merge_tags
from .models import (
    BucketConfig,
    IntelligentTieringConfig,
    LifecycleRule,
    NotificationTarget,
    ReplicationRule,
    ResourceDeclaration,
    RuleFilter,
)

logger = logging.getLogger(__name__)


def resource_address(resource_type: str, key: str | None = None) -> str:
    """Return the address of a declaration, keyed for per-id resources."""
    if key is None:
        return f"{resource_type}.this"
    return f'{resource_type}.this["{key}"]'


BUCKET = resource_address(RESOURCE_BUCKET)
VERSIONING = resource_address(RESOURCE_VERSIONING)
PUBLIC_ACCESS_BLOCK = resource_address(RESOURCE_PUBLIC_ACCESS_BLOCK)
OWNERSHIP_CONTROLS = resource_address(RESOURCE_OWNERSHIP_CONTROLS)


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


def _status(enabled: bool) -> str:
    return "Enabled" if enabled else "Disabled"


def _filter_attributes(rule_filter: RuleFilter | None) -> dict[str, Any] | None:
    # An empty filter still renders as an explicit empty prefix
    if rule_filter is None:
        return None
    attributes: dict[str, Any] = {"prefix": rule_filter.prefix}
    if rule_filter.tags:
        attributes["tags"] = dict(sorted(rule_filter.tags.items()))
    return attributes


def _lifecycle_rule_attributes(rule: LifecycleRule) -> dict[str, Any]:
    attributes: dict[str, Any] = {
        "id": rule.id,
        "status": rule.status,
        "filter": _filter_attributes(rule.filter),
    }
    if rule.transitions:
        attributes["transition"] = [
            {"days": t.days, "storage_class": t.storage_class} for t in rule.transitions
        ]
    if rule.expiration is not None:
        attributes["expiration"] = _compact(
            {
                "days": rule.expiration.days,
                "date": rule.expiration.date,
                "expired_object_delete_marker": rule.expiration.expired_object_delete_marker,
            }
        )
    if rule.noncurrent_version_transitions:
        attributes["noncurrent_version_transition"] = [
            {"noncurrent_days": t.noncurrent_days, "storage_class": t.storage_class}
            for t in rule.noncurrent_version_transitions
        ]
    if rule.noncurrent_version_expiration is not None:
        attributes["noncurrent_version_expiration"] = _compact(
            {
                "noncurrent_days": rule.noncurrent_version_expiration.noncurrent_days,
                "newer_noncurrent_versions": rule.noncurrent_version_expiration.newer_noncurrent_versions,
            }
        )
    if rule.abort_incomplete_multipart_upload_days is not None:
        attributes["abort_incomplete_multipart_upload"] = {
            "days_after_initiation": rule.abort_incomplete_multipart_upload_days,
        }
    return _compact(attributes)


def _notification_attributes(targets: tuple[NotificationTarget, ...], arn_key: str) -> list[dict[str, Any]]:
    return [
        _compact(
            {
                "id": target.id,
                arn_key: target.arn,
                "events": list(target.events),
                "filter_prefix": target.filter_prefix,
                "filter_suffix": target.filter_suffix,
            }
        )
        for target in targets
    ]


def _replication_rule_attributes(rule: ReplicationRule) -> dict[str, Any]:
    destination = rule.destination
    attributes: dict[str, Any] = {
        "id": rule.id,
        "status": rule.status,
        "priority": rule.priority,
        "filter": _filter_attributes(rule.filter),
        "destination": _compact(
            {
                "bucket": destination.bucket_arn,
                "storage_class": destination.storage_class,
                "account": destination.account_id,
                "encryption_configuration": {"replica_kms_key_id": destination.replica_kms_key_id}
                if destination.replica_kms_key_id
                else None,
            }
        ),
    }
    if rule.sse_kms_encrypted_objects is not None:
        attributes["source_selection_criteria"] = {
            "sse_kms_encrypted_objects": {"status": _status(rule.sse_kms_encrypted_objects)},
        }
    if rule.delete_marker_replication is not None:
        attributes["delete_marker_replication"] = {"status": _status(rule.delete_marker_replication)}
    return _compact(attributes)


def _tiering_attributes(name: str, entry: IntelligentTieringConfig) -> dict[str, Any]:
    return _compact(
        {
            "bucket": name,
            "name": entry.id,
            "status": entry.status,
            "filter": _filter_attributes(entry.filter),
            "tiering": [{"access_tier": t.access_tier, "days": t.days} for t in entry.tierings],
        }
    )


def unique_tiering_configs(config: BucketConfig) -> dict[str, IntelligentTieringConfig]:
    """Index intelligent-tiering entries by id; a repeated id keeps the last entry."""
    configs: dict[str, IntelligentTieringConfig] = {}
    for entry in config.intelligent_tiering:
        if entry.id in configs:
            logger.warning(f"Bucket {config.name} repeats intelligent-tiering id {entry.id}, keeping the last entry")
        configs[entry.id] = entry
    return configs


def declare_resources(config: BucketConfig) -> list[ResourceDeclaration]:
    """Declare every resource the configuration calls for, with dependency edges."""
    name = config.name
    declarations = [
        ResourceDeclaration(
            address=BUCKET,
            resource_type=RESOURCE_BUCKET,
            attributes={
                "bucket": name,
                "force_destroy": config.force_destroy,
                "object_lock_enabled": config.object_lock.enabled,
                "tags": merge_tags(config),
            },
        ),
        ResourceDeclaration(
            address=VERSIONING,
            resource_type=RESOURCE_VERSIONING,
            attributes={
                "bucket": name,
                "versioning_configuration": {
                    "status": "Enabled" if config.versioning.enabled else "Suspended",
                    "mfa_delete": _status(config.versioning.mfa_delete),
                },
            },
            depends_on=(BUCKET,),
        ),
    ]

    # Encryption
    encryption = config.encryption
    by_default: dict[str, Any] = {"sse_algorithm": encryption.algorithm}
    rule: dict[str, Any] = {"apply_server_side_encryption_by_default": by_default}
    if encryption.algorithm == "aws:kms":
        if encryption.kms_key_id:
            by_default["kms_master_key_id"] = encryption.kms_key_id
        rule["bucket_key_enabled"] = encryption.bucket_key_enabled
    declarations.append(
        ResourceDeclaration(
            address=resource_address(RESOURCE_ENCRYPTION),
            resource_type=RESOURCE_ENCRYPTION,
            attributes={"bucket": name, "rule": rule},
            depends_on=(BUCKET,),
        )
    )

    pab = config.public_access_block
    declarations.append(
        ResourceDeclaration(
            address=PUBLIC_ACCESS_BLOCK,
            resource_type=RESOURCE_PUBLIC_ACCESS_BLOCK,
            attributes={
                "bucket": name,
                "block_public_acls": pab.block_public_acls,
                "block_public_policy": pab.block_public_policy,
                "ignore_public_acls": pab.ignore_public_acls,
                "restrict_public_buckets": pab.restrict_public_buckets,
            },
            depends_on=(BUCKET,),
        )
    )
    declarations.append(
        ResourceDeclaration(
            address=OWNERSHIP_CONTROLS,
            resource_type=RESOURCE_OWNERSHIP_CONTROLS,
            attributes={"bucket": name, "rule": {"object_ownership": config.object_ownership}},
            depends_on=(BUCKET,),
        )
    )

    if config.acl is not None:
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_ACL),
                resource_type=RESOURCE_ACL,
                attributes={"bucket": name, "acl": config.acl},
                depends_on=(BUCKET, PUBLIC_ACCESS_BLOCK, OWNERSHIP_CONTROLS),
            )
        )

    if config.lifecycle_rules:
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_LIFECYCLE),
                resource_type=RESOURCE_LIFECYCLE,
                attributes={
                    "bucket": name,
                    "rule": [_lifecycle_rule_attributes(r) for r in config.lifecycle_rules],
                },
                depends_on=(BUCKET,),
            )
        )

    if config.cors_rules:
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_CORS),
                resource_type=RESOURCE_CORS,
                attributes={
                    "bucket": name,
                    "cors_rule": [
                        _compact(
                            {
                                "id": r.id,
                                "allowed_headers": list(r.allowed_headers),
                                "allowed_methods": list(r.allowed_methods),
                                "allowed_origins": list(r.allowed_origins),
                                "expose_headers": list(r.expose_headers),
                                "max_age_seconds": r.max_age_seconds,
                            }
                        )
                        for r in config.cors_rules
                    ],
                },
                depends_on=(BUCKET,),
            )
        )

    website = config.website
    if website.enabled:
        redirect = website.redirect_all_requests_to
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_WEBSITE),
                resource_type=RESOURCE_WEBSITE,
                attributes=_compact(
                    {
                        "bucket": name,
                        "index_document": {"suffix": website.index_document} if website.index_document else None,
                        "error_document": {"key": website.error_document} if website.error_document else None,
                        "redirect_all_requests_to": _compact(
                            {"host_name": redirect.host_name, "protocol": redirect.protocol}
                        )
                        if redirect
                        else None,
                        "routing_rules": json.dumps([dict(r) for r in website.routing_rules], sort_keys=True)
                        if website.routing_rules
                        else None,
                    }
                ),
                depends_on=(BUCKET,),
            )
        )

    notifications = config.notifications
    if notifications.enabled:
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_NOTIFICATION),
                resource_type=RESOURCE_NOTIFICATION,
                attributes={
                    "bucket": name,
                    "eventbridge": notifications.eventbridge,
                    "topic": _notification_attributes(notifications.topics, "topic_arn"),
                    "queue": _notification_attributes(notifications.queues, "queue_arn"),
                    "lambda_function": _notification_attributes(notifications.lambda_functions, "lambda_function_arn"),
                },
                depends_on=(BUCKET,),
            )
        )

    if config.bucket_policy.enabled:
        policy = config.bucket_policy.policy
        if isinstance(policy, str):
            policy = json.loads(policy)
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_POLICY),
                resource_type=RESOURCE_POLICY,
                attributes={"bucket": name, "policy": json.dumps(policy, sort_keys=True)},
                depends_on=(BUCKET, PUBLIC_ACCESS_BLOCK),
            )
        )

    replication = config.replication
    if replication.enabled:
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_REPLICATION),
                resource_type=RESOURCE_REPLICATION,
                attributes={
                    "bucket": name,
                    "role": replication.role_arn,
                    "rule": [_replication_rule_attributes(r) for r in replication.rules],
                },
                depends_on=(BUCKET, VERSIONING),
            )
        )

    for tiering_id, entry in unique_tiering_configs(config).items():
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_INTELLIGENT_TIERING, tiering_id),
                resource_type=RESOURCE_INTELLIGENT_TIERING,
                attributes=_tiering_attributes(name, entry),
                depends_on=(BUCKET,),
            )
        )

    object_lock = config.object_lock
    if object_lock.enabled:
        declarations.append(
            ResourceDeclaration(
                address=resource_address(RESOURCE_OBJECT_LOCK),
                resource_type=RESOURCE_OBJECT_LOCK,
                attributes={
                    "bucket": name,
                    "rule": {
                        "default_retention": _compact(
                            {"mode": object_lock.mode, "days": object_lock.days, "years": object_lock.years}
                        ),
                    },
                },
                depends_on=(BUCKET, VERSIONING),
            )
        )

    return declarations


def order_declarations(declarations: list[ResourceDeclaration]) -> list[ResourceDeclaration]:
    """Topologically sort declarations so every dependency precedes its dependents.

    Ties are broken by the canonical resource order, then by input position.

    Raises:
        DependencyOrderingDefect: On duplicate addresses, a dangling dependency or a cycle
    """
    by_address: dict[str, ResourceDeclaration] = {}
    rank: dict[str, tuple[int, int]] = {}
    for position, declaration in enumerate(declarations):
        if declaration.address in by_address:
            raise DependencyOrderingDefect(f"duplicate declaration {declaration.address}")
        if declaration.resource_type not in RESOURCE_ORDER:
            raise DependencyOrderingDefect(f"unknown resource type {declaration.resource_type}")
        by_address[declaration.address] = declaration
        rank[declaration.address] = (RESOURCE_ORDER.index(declaration.resource_type), position)

    pending = {address: 0 for address in by_address}
    dependents: dict[str, list[str]] = {address: [] for address in by_address}
    for declaration in declarations:
        for dependency in declaration.depends_on:
            if dependency not in by_address:
                raise DependencyOrderingDefect(
                    f"{declaration.address} depends on {dependency}, which was never declared"
                )
            pending[declaration.address] += 1
            dependents[dependency].append(declaration.address)

    ready = [(rank[address], address) for address, count in pending.items() if count == 0]
    heapq.heapify(ready)

    ordered: list[ResourceDeclaration] = []
    while ready:
        _, address = heapq.heappop(ready)
        ordered.append(by_address[address])
        for dependent in dependents[address]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (rank[dependent], dependent))

    if len(ordered) != len(declarations):
        stuck = sorted(address for address, count in pending.items() if count > 0)
        raise DependencyOrderingDefect(f"dependency cycle between {', '.join(stuck)}")

    return ordered


def expand(config: BucketConfig) -> list[ResourceDeclaration]:
    """Expand a validated bucket configuration into ordered resource declarations.

    Args:
        config: Bucket configuration that already passed validation

    Returns:
        Declarations in dependency order

    Raises:
        DependencyOrderingDefect: If the declared graph cannot be ordered
    """
    return order_declarations(declare_resources(config))
