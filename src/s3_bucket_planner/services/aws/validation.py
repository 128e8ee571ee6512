"""Validation of bucket configurations before expansion."""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from typing import Any, Iterable

from ...constants import (
    ARN_PREFIX,
    BUCKET_NAME_MAX_LENGTH,
    BUCKET_NAME_MIN_LENGTH,
    BUCKET_NAME_PATTERN,
    CANNED_ACLS,
    CORS_METHODS,
    ENCRYPTION_ALGORITHMS,
    ENVIRONMENTS,
    IAM_ROLE_ARN_PREFIX,
    KMS_KEY_ARN_PREFIX,
    LIFECYCLE_RULE_ID_MAX_LENGTH,
    OBJECT_LOCK_MODES,
    OBJECT_OWNERSHIP_VALUES,
    PURPOSE_MAX_LENGTH,
    RULE_STATUSES,
    S3_BUCKET_ARN_PREFIX,
    STORAGE_CLASSES,
    TIERING_ACCESS_TIER_DAYS,
    WEBSITE_PROTOCOLS,
)
from ...utils.errors import BucketValidationError, FieldError
from .models import BucketConfig, NotificationTarget, RuleFilter
from .regions import is_known_region

logger = logging.getLogger(__name__)

_BUCKET_NAME_RE = re.compile(BUCKET_NAME_PATTERN)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_non_negative_int(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_positive_int(value: Any) -> bool:
    return _is_int(value) and value > 0


def _duplicates(values: Iterable[Any]) -> list[str]:
    # Non-string ids are reported by the per-rule id checks
    counts = Counter(value for value in values if isinstance(value, str))
    return sorted(value for value, count in counts.items() if count > 1)


def _check_filter(field: str, rule_filter: RuleFilter | None) -> list[FieldError]:
    if rule_filter is None:
        return []
    if not isinstance(rule_filter.prefix, str):
        return [FieldError(f"{field}.prefix", "must be a string")]
    return []


def _check_name(config: BucketConfig) -> list[FieldError]:
    name = config.name
    if not isinstance(name, str):
        return [FieldError("name", "must be a string")]

    errors = []
    if not BUCKET_NAME_MIN_LENGTH <= len(name) <= BUCKET_NAME_MAX_LENGTH:
        errors.append(
            FieldError(
                "name",
                f"must be between {BUCKET_NAME_MIN_LENGTH} and {BUCKET_NAME_MAX_LENGTH} characters, got {len(name)}",
            )
        )
    if not _BUCKET_NAME_RE.match(name):
        errors.append(
            FieldError(
                "name",
                "must contain only lowercase letters, digits, dots and hyphens, "
                "and start and end with a letter or digit",
            )
        )
    return errors


def _check_environment(config: BucketConfig) -> list[FieldError]:
    if config.environment not in ENVIRONMENTS:
        return [FieldError("environment", f"must be one of {', '.join(ENVIRONMENTS)}, got {config.environment!r}")]
    return []


def _check_purpose(config: BucketConfig) -> list[FieldError]:
    purpose = config.purpose
    if not isinstance(purpose, str) or not 1 <= len(purpose) <= PURPOSE_MAX_LENGTH:
        return [FieldError("purpose", f"must be between 1 and {PURPOSE_MAX_LENGTH} characters")]
    return []


def _check_tags(config: BucketConfig) -> list[FieldError]:
    return [
        FieldError(f"tags.{key}", "keys and values must be strings")
        for key, value in config.tags.items()
        if not isinstance(key, str) or not isinstance(value, str)
    ]


def check_region(region: Any) -> list[FieldError]:
    """Check that a region is a known S3 region."""
    if not isinstance(region, str) or not is_known_region(region):
        return [FieldError("region", f"unknown S3 region {region!r}")]
    return []


def _check_region(config: BucketConfig) -> list[FieldError]:
    if config.region is None:
        return []
    return check_region(config.region)


def _check_encryption(config: BucketConfig) -> list[FieldError]:
    encryption = config.encryption
    errors = []

    if encryption.algorithm not in ENCRYPTION_ALGORITHMS:
        errors.append(
            FieldError(
                "encryption.algorithm",
                f"must be one of {', '.join(ENCRYPTION_ALGORITHMS)}, got {encryption.algorithm!r}",
            )
        )

    if encryption.kms_key_id is not None:
        if not isinstance(encryption.kms_key_id, str) or not encryption.kms_key_id.startswith(KMS_KEY_ARN_PREFIX):
            errors.append(FieldError("encryption.kmsKeyId", f"must be a KMS key ARN starting with {KMS_KEY_ARN_PREFIX}"))
        elif encryption.algorithm == "AES256":
            logger.warning(f"Bucket {config.name} sets a KMS key id with AES256 encryption, the key is ignored")
    elif encryption.algorithm == "aws:kms":
        logger.warning(f"Bucket {config.name} uses aws:kms without a key id, the AWS managed key aws/s3 will be used")

    return errors


def _check_ownership_and_acl(config: BucketConfig) -> list[FieldError]:
    errors = []

    if config.acl is not None:
        if config.acl not in CANNED_ACLS:
            errors.append(FieldError("acl", f"must be one of {', '.join(CANNED_ACLS)}, got {config.acl!r}"))
        elif config.object_ownership == "BucketOwnerEnforced":
            errors.append(FieldError("acl", "cannot be set when objectOwnership is BucketOwnerEnforced"))

    if config.object_ownership not in OBJECT_OWNERSHIP_VALUES:
        errors.append(
            FieldError(
                "objectOwnership",
                f"must be one of {', '.join(OBJECT_OWNERSHIP_VALUES)}, got {config.object_ownership!r}",
            )
        )

    return errors


def _check_lifecycle(config: BucketConfig) -> list[FieldError]:
    errors = []

    for dup in _duplicates(rule.id for rule in config.lifecycle_rules):
        errors.append(FieldError("lifecycle.rules", f"duplicate rule id {dup!r}"))

    for idx, rule in enumerate(config.lifecycle_rules):
        field = f"lifecycle.rules[{idx}]"

        if not isinstance(rule.id, str) or not 1 <= len(rule.id) <= LIFECYCLE_RULE_ID_MAX_LENGTH:
            errors.append(FieldError(f"{field}.id", f"must be between 1 and {LIFECYCLE_RULE_ID_MAX_LENGTH} characters"))
        if rule.status not in RULE_STATUSES:
            errors.append(FieldError(f"{field}.status", f"must be Enabled or Disabled, got {rule.status!r}"))

        errors.extend(_check_filter(f"{field}.filter", rule.filter))

        for t_idx, transition in enumerate(rule.transitions):
            if not _is_non_negative_int(transition.days):
                errors.append(FieldError(f"{field}.transitions[{t_idx}].days", "must be a non-negative integer"))
            if transition.storage_class not in STORAGE_CLASSES:
                errors.append(
                    FieldError(f"{field}.transitions[{t_idx}].storageClass", f"unknown storage class {transition.storage_class!r}")
                )

        if rule.expiration is not None:
            expiration = rule.expiration
            if expiration.days is not None and not _is_positive_int(expiration.days):
                errors.append(FieldError(f"{field}.expiration.days", "must be a positive integer"))
            if expiration.days is None and expiration.date is None and expiration.expired_object_delete_marker is None:
                errors.append(FieldError(f"{field}.expiration", "must set days, date or expiredObjectDeleteMarker"))

        for t_idx, transition in enumerate(rule.noncurrent_version_transitions):
            if not _is_non_negative_int(transition.noncurrent_days):
                errors.append(
                    FieldError(f"{field}.noncurrentVersionTransitions[{t_idx}].noncurrentDays", "must be a non-negative integer")
                )
            if transition.storage_class not in STORAGE_CLASSES:
                errors.append(
                    FieldError(
                        f"{field}.noncurrentVersionTransitions[{t_idx}].storageClass",
                        f"unknown storage class {transition.storage_class!r}",
                    )
                )

        if rule.noncurrent_version_expiration is not None:
            if not _is_positive_int(rule.noncurrent_version_expiration.noncurrent_days):
                errors.append(FieldError(f"{field}.noncurrentVersionExpiration.noncurrentDays", "must be a positive integer"))

        days = rule.abort_incomplete_multipart_upload_days
        if days is not None and not _is_positive_int(days):
            errors.append(FieldError(f"{field}.abortIncompleteMultipartUploadDays", "must be a positive integer"))

    return errors


def _check_cors(config: BucketConfig) -> list[FieldError]:
    errors = []

    for idx, rule in enumerate(config.cors_rules):
        field = f"cors.rules[{idx}]"
        if not rule.allowed_methods:
            errors.append(FieldError(f"{field}.allowedMethods", "must not be empty"))
        for method in rule.allowed_methods:
            if method not in CORS_METHODS:
                errors.append(FieldError(f"{field}.allowedMethods", f"unsupported method {method!r}"))
        if not rule.allowed_origins:
            errors.append(FieldError(f"{field}.allowedOrigins", "must not be empty"))
        if rule.max_age_seconds is not None and not _is_non_negative_int(rule.max_age_seconds):
            errors.append(FieldError(f"{field}.maxAgeSeconds", "must be a non-negative integer"))

    return errors


def _check_website(config: BucketConfig) -> list[FieldError]:
    website = config.website
    if not website.enabled:
        return []

    errors = []
    redirect = website.redirect_all_requests_to
    if redirect is not None:
        if website.index_document or website.error_document or website.routing_rules:
            errors.append(FieldError("website.redirectAllRequestsTo", "cannot be combined with documents or routing rules"))
        if not redirect.host_name:
            errors.append(FieldError("website.redirectAllRequestsTo.hostName", "must not be empty"))
        if redirect.protocol is not None and redirect.protocol not in WEBSITE_PROTOCOLS:
            errors.append(FieldError("website.redirectAllRequestsTo.protocol", "must be http or https"))
    elif not website.index_document:
        errors.append(FieldError("website.indexDocument", "is required unless redirectAllRequestsTo is set"))

    return errors


def _check_notification_targets(field: str, targets: tuple[NotificationTarget, ...]) -> list[FieldError]:
    errors = []
    for idx, target in enumerate(targets):
        if not isinstance(target.arn, str) or not target.arn.startswith(ARN_PREFIX):
            errors.append(FieldError(f"{field}[{idx}]", "must reference an ARN"))
        if not target.events:
            errors.append(FieldError(f"{field}[{idx}].events", "must not be empty"))
        for event in target.events:
            if not isinstance(event, str) or not event.startswith("s3:"):
                errors.append(FieldError(f"{field}[{idx}].events", f"unsupported event {event!r}"))
    return errors


def _check_notifications(config: BucketConfig) -> list[FieldError]:
    notifications = config.notifications
    if not notifications.enabled:
        return []

    errors = []
    errors.extend(_check_notification_targets("notifications.topics", notifications.topics))
    errors.extend(_check_notification_targets("notifications.queues", notifications.queues))
    errors.extend(_check_notification_targets("notifications.lambdaFunctions", notifications.lambda_functions))

    if not (notifications.topics or notifications.queues or notifications.lambda_functions or notifications.eventbridge):
        errors.append(FieldError("notifications", "must configure at least one target or eventbridge"))

    return errors


def _check_bucket_policy(config: BucketConfig) -> list[FieldError]:
    if not config.bucket_policy.enabled:
        return []

    policy = config.bucket_policy.policy
    if isinstance(policy, str):
        try:
            policy = json.loads(policy)
        except json.JSONDecodeError as e:
            return [FieldError("bucketPolicy.policy", f"is not valid JSON: {e.msg}")]

    if not isinstance(policy, dict) or not policy:
        return [FieldError("bucketPolicy.policy", "must be a non-empty JSON object")]
    return []


def _check_replication(config: BucketConfig) -> list[FieldError]:
    replication = config.replication
    if not replication.enabled:
        return []

    errors = []
    if not config.versioning.enabled:
        errors.append(FieldError("replication", "requires versioning to be enabled"))
    if not isinstance(replication.role_arn, str) or not replication.role_arn.startswith(IAM_ROLE_ARN_PREFIX):
        errors.append(FieldError("replication.roleArn", f"must be an IAM role ARN starting with {IAM_ROLE_ARN_PREFIX}"))
    if not replication.rules:
        errors.append(FieldError("replication.rules", "must contain at least one rule"))

    for dup in _duplicates(rule.id for rule in replication.rules):
        errors.append(FieldError("replication.rules", f"duplicate rule id {dup!r}"))

    for idx, rule in enumerate(replication.rules):
        field = f"replication.rules[{idx}]"
        if not isinstance(rule.id, str) or not rule.id:
            errors.append(FieldError(f"{field}.id", "must be a non-empty string"))
        if rule.status not in RULE_STATUSES:
            errors.append(FieldError(f"{field}.status", f"must be Enabled or Disabled, got {rule.status!r}"))
        if rule.priority is not None and not _is_non_negative_int(rule.priority):
            errors.append(FieldError(f"{field}.priority", "must be a non-negative integer"))
        errors.extend(_check_filter(f"{field}.filter", rule.filter))

        destination = rule.destination
        if not isinstance(destination.bucket_arn, str) or not destination.bucket_arn.startswith(S3_BUCKET_ARN_PREFIX):
            errors.append(
                FieldError(f"{field}.destination.bucket", f"must be a bucket ARN starting with {S3_BUCKET_ARN_PREFIX}")
            )
        if destination.storage_class is not None and destination.storage_class not in STORAGE_CLASSES:
            errors.append(
                FieldError(f"{field}.destination.storageClass", f"unknown storage class {destination.storage_class!r}")
            )
        if destination.replica_kms_key_id is not None and not str(destination.replica_kms_key_id).startswith(
            KMS_KEY_ARN_PREFIX
        ):
            errors.append(
                FieldError(f"{field}.destination.replicaKmsKeyId", f"must be a KMS key ARN starting with {KMS_KEY_ARN_PREFIX}")
            )

    return errors


def _check_intelligent_tiering(config: BucketConfig) -> list[FieldError]:
    errors = []

    for idx, entry in enumerate(config.intelligent_tiering):
        field = f"intelligentTiering[{idx}]"
        if not isinstance(entry.id, str) or not entry.id:
            errors.append(FieldError(f"{field}.id", "must be a non-empty string"))
        if entry.status not in RULE_STATUSES:
            errors.append(FieldError(f"{field}.status", f"must be Enabled or Disabled, got {entry.status!r}"))
        if not entry.tierings:
            errors.append(FieldError(f"{field}.tierings", "must contain at least one tiering"))
        errors.extend(_check_filter(f"{field}.filter", entry.filter))

        for t_idx, tiering in enumerate(entry.tierings):
            bounds = TIERING_ACCESS_TIER_DAYS.get(tiering.access_tier) if isinstance(tiering.access_tier, str) else None
            if bounds is None:
                errors.append(
                    FieldError(f"{field}.tierings[{t_idx}].accessTier", f"unknown access tier {tiering.access_tier!r}")
                )
                continue
            low, high = bounds
            if not _is_int(tiering.days) or not low <= tiering.days <= high:
                errors.append(FieldError(f"{field}.tierings[{t_idx}].days", f"must be between {low} and {high}"))

    return errors


def _check_object_lock(config: BucketConfig) -> list[FieldError]:
    object_lock = config.object_lock
    if not object_lock.enabled:
        return []

    errors = []
    if not config.versioning.enabled:
        errors.append(FieldError("objectLock", "requires versioning to be enabled"))
    if object_lock.mode not in OBJECT_LOCK_MODES:
        errors.append(FieldError("objectLock.mode", f"must be GOVERNANCE or COMPLIANCE, got {object_lock.mode!r}"))
    if (object_lock.days is None) == (object_lock.years is None):
        errors.append(FieldError("objectLock", "must set exactly one of days or years"))
    elif not _is_positive_int(object_lock.days if object_lock.days is not None else object_lock.years):
        errors.append(FieldError("objectLock", "retention period must be a positive integer"))

    return errors


_CHECKS = (
    _check_name,
    _check_environment,
    _check_purpose,
    _check_tags,
    _check_region,
    _check_encryption,
    _check_ownership_and_acl,
    _check_lifecycle,
    _check_cors,
    _check_website,
    _check_notifications,
    _check_bucket_policy,
    _check_replication,
    _check_intelligent_tiering,
    _check_object_lock,
)


def collect_errors(config: BucketConfig) -> list[FieldError]:
    """Run every check and return all violations found."""
    errors: list[FieldError] = []
    for check in _CHECKS:
        errors.extend(check(config))
    return errors


def validate(config: BucketConfig, region: str | None = None) -> None:
    """Validate a bucket configuration.

    Args:
        config: Bucket configuration
        region: Region the bucket is planned in, when it is not the configured one

    Raises:
        BucketValidationError: If any constraint is violated; carries every violation
    """
    errors = collect_errors(config)
    if region is not None and region != config.region:
        errors.extend(check_region(region))
    if errors:
        raise BucketValidationError(errors)
