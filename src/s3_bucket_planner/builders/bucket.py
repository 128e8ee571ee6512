"""Builder for bucket configurations."""

from __future__ import annotations

from typing import Any

from ..constants import SECURE_DEFAULTS
from ..services.aws.models import (
    BucketConfig,
    BucketPolicyConfig,
    CorsRule,
    EncryptionConfig,
    Expiration,
    IntelligentTieringConfig,
    LifecycleRule,
    NoncurrentVersionExpiration,
    NoncurrentVersionTransition,
    NotificationConfig,
    NotificationTarget,
    ObjectLockConfig,
    PublicAccessBlockConfig,
    RedirectAllRequestsTo,
    ReplicationConfig,
    ReplicationDestination,
    ReplicationRule,
    RuleFilter,
    Tiering,
    Transition,
    VersioningConfig,
    WebsiteConfig,
)


def _build_filter(rule: dict[str, Any]) -> RuleFilter | None:
    """Build a rule filter from either a ``filter`` block or a bare ``prefix``."""
    if "filter" in rule:
        rule_filter = rule.get("filter") or {}
        return RuleFilter(
            prefix=rule_filter.get("prefix") or "",
            tags=dict(rule_filter.get("tags") or {}),
        )
    if "prefix" in rule:
        return RuleFilter(prefix=rule.get("prefix") or "")
    return None


def _build_lifecycle_rule(rule: dict[str, Any]) -> LifecycleRule:
    expiration = rule.get("expiration")
    noncurrent_expiration = rule.get("noncurrentVersionExpiration")

    return LifecycleRule(
        id=rule.get("id", ""),
        status=rule.get("status", "Enabled"),
        filter=_build_filter(rule),
        transitions=tuple(
            Transition(days=t.get("days"), storage_class=t.get("storageClass", ""))
            for t in (rule.get("transitions") or [])
        ),
        expiration=Expiration(
            days=expiration.get("days"),
            date=expiration.get("date"),
            expired_object_delete_marker=expiration.get("expiredObjectDeleteMarker"),
        )
        if expiration
        else None,
        noncurrent_version_transitions=tuple(
            NoncurrentVersionTransition(
                noncurrent_days=t.get("noncurrentDays"),
                storage_class=t.get("storageClass", ""),
            )
            for t in (rule.get("noncurrentVersionTransitions") or [])
        ),
        noncurrent_version_expiration=NoncurrentVersionExpiration(
            noncurrent_days=noncurrent_expiration.get("noncurrentDays"),
            newer_noncurrent_versions=noncurrent_expiration.get("newerNoncurrentVersions"),
        )
        if noncurrent_expiration
        else None,
        abort_incomplete_multipart_upload_days=rule.get("abortIncompleteMultipartUploadDays"),
    )


def _build_cors_rule(rule: dict[str, Any]) -> CorsRule:
    return CorsRule(
        allowed_methods=tuple(rule.get("allowedMethods") or []),
        allowed_origins=tuple(rule.get("allowedOrigins") or []),
        allowed_headers=tuple(rule.get("allowedHeaders") or []),
        expose_headers=tuple(rule.get("exposeHeaders") or []),
        max_age_seconds=rule.get("maxAgeSeconds"),
        id=rule.get("id"),
    )


def _build_website(website: dict[str, Any] | None) -> WebsiteConfig:
    if website is None:
        return WebsiteConfig()

    redirect = website.get("redirectAllRequestsTo")
    # A redirect-all website has no documents unless they are given explicitly
    default_index = None if redirect else SECURE_DEFAULTS["website"]["index_document"]

    return WebsiteConfig(
        enabled=True,
        index_document=website.get("indexDocument", default_index),
        error_document=website.get("errorDocument"),
        redirect_all_requests_to=RedirectAllRequestsTo(
            host_name=redirect.get("hostName", ""),
            protocol=redirect.get("protocol"),
        )
        if redirect
        else None,
        routing_rules=tuple(website.get("routingRules") or []),
    )


def _build_notification_targets(targets: list[dict[str, Any]], arn_key: str) -> tuple[NotificationTarget, ...]:
    return tuple(
        NotificationTarget(
            arn=target.get(arn_key, ""),
            events=tuple(target.get("events") or []),
            filter_prefix=target.get("filterPrefix"),
            filter_suffix=target.get("filterSuffix"),
            id=target.get("id"),
        )
        for target in targets
    )


def _build_notifications(notifications: dict[str, Any] | None) -> NotificationConfig:
    if notifications is None:
        return NotificationConfig()

    return NotificationConfig(
        enabled=True,
        topics=_build_notification_targets(notifications.get("topics") or [], "topicArn"),
        queues=_build_notification_targets(notifications.get("queues") or [], "queueArn"),
        lambda_functions=_build_notification_targets(
            notifications.get("lambdaFunctions") or [], "lambdaFunctionArn"
        ),
        eventbridge=notifications.get("eventbridge", False),
    )


def _build_replication_rule(rule: dict[str, Any]) -> ReplicationRule:
    destination = rule.get("destination") or {}
    source_selection = rule.get("sourceSelectionCriteria") or {}

    return ReplicationRule(
        id=rule.get("id", ""),
        status=rule.get("status", "Enabled"),
        priority=rule.get("priority"),
        filter=_build_filter(rule),
        destination=ReplicationDestination(
            bucket_arn=destination.get("bucket", ""),
            storage_class=destination.get("storageClass"),
            replica_kms_key_id=destination.get("replicaKmsKeyId"),
            account_id=destination.get("account"),
        ),
        sse_kms_encrypted_objects=source_selection.get("sseKmsEncryptedObjects"),
        delete_marker_replication=rule.get("deleteMarkerReplication"),
    )


def _build_replication(replication: dict[str, Any] | None) -> ReplicationConfig:
    if replication is None:
        return ReplicationConfig()

    return ReplicationConfig(
        enabled=True,
        role_arn=replication.get("roleArn", ""),
        rules=tuple(_build_replication_rule(rule) for rule in (replication.get("rules") or [])),
    )


def _build_tiering(entry: dict[str, Any]) -> IntelligentTieringConfig:
    return IntelligentTieringConfig(
        id=entry.get("id", ""),
        status=entry.get("status", "Enabled"),
        filter=_build_filter(entry),
        tierings=tuple(
            Tiering(access_tier=t.get("accessTier", ""), days=t.get("days"))
            for t in (entry.get("tierings") or [])
        ),
    )


def _build_object_lock(object_lock: dict[str, Any] | None) -> ObjectLockConfig:
    if object_lock is None:
        return ObjectLockConfig()

    return ObjectLockConfig(
        enabled=True,
        mode=object_lock.get("mode", "GOVERNANCE"),
        days=object_lock.get("days"),
        years=object_lock.get("years"),
    )


def create_bucket_config_from_spec(spec: dict[str, Any]) -> BucketConfig:
    """Create a bucket configuration from a BucketPlan spec.

    Missing blocks fall back to ``SECURE_DEFAULTS``. Values are carried over
    as given; checking them is left to the validator so that every problem is
    reported at once.

    Args:
        spec: BucketPlan spec

    Returns:
        Immutable bucket configuration
    """
    # Get versioning configuration
    versioning_defaults = SECURE_DEFAULTS["versioning"]
    versioning = spec.get("versioning") or {}

    # Get encryption configuration
    encryption_defaults = SECURE_DEFAULTS["encryption"]
    encryption = spec.get("encryption") or {}

    # Get public access block configuration
    pab_defaults = SECURE_DEFAULTS["public_access_block"]
    pab = spec.get("publicAccessBlock") or {}

    # Get lifecycle and CORS configuration
    lifecycle_rules = (spec.get("lifecycle") or {}).get("rules") or []
    cors_rules = (spec.get("cors") or {}).get("rules") or []

    bucket_policy = spec.get("bucketPolicy")

    return BucketConfig(
        name=spec.get("name", ""),
        environment=spec.get("environment", ""),
        purpose=spec.get("purpose", ""),
        tags=dict(spec.get("tags") or {}),
        region=spec.get("region"),
        force_destroy=spec.get("forceDestroy", SECURE_DEFAULTS["force_destroy"]),
        versioning=VersioningConfig(
            enabled=versioning.get("enabled", versioning_defaults["enabled"]),
            mfa_delete=versioning.get("mfaDelete", versioning_defaults["mfa_delete"]),
        ),
        encryption=EncryptionConfig(
            algorithm=encryption.get("algorithm", encryption_defaults["algorithm"]),
            kms_key_id=encryption.get("kmsKeyId", encryption_defaults["kms_key_id"]),
            bucket_key_enabled=encryption.get("bucketKeyEnabled", encryption_defaults["bucket_key_enabled"]),
        ),
        public_access_block=PublicAccessBlockConfig(
            block_public_acls=pab.get("blockPublicAcls", pab_defaults["block_public_acls"]),
            block_public_policy=pab.get("blockPublicPolicy", pab_defaults["block_public_policy"]),
            ignore_public_acls=pab.get("ignorePublicAcls", pab_defaults["ignore_public_acls"]),
            restrict_public_buckets=pab.get("restrictPublicBuckets", pab_defaults["restrict_public_buckets"]),
        ),
        object_ownership=spec.get("objectOwnership", SECURE_DEFAULTS["object_ownership"]),
        acl=spec.get("acl"),
        lifecycle_rules=tuple(_build_lifecycle_rule(rule) for rule in lifecycle_rules),
        cors_rules=tuple(_build_cors_rule(rule) for rule in cors_rules),
        website=_build_website(spec.get("website")),
        notifications=_build_notifications(spec.get("notifications")),
        bucket_policy=BucketPolicyConfig(enabled=True, policy=bucket_policy.get("policy"))
        if bucket_policy is not None
        else BucketPolicyConfig(),
        replication=_build_replication(spec.get("replication")),
        intelligent_tiering=tuple(_build_tiering(entry) for entry in (spec.get("intelligentTiering") or [])),
        object_lock=_build_object_lock(spec.get("objectLock")),
    )
