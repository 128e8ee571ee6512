"""Models for S3 bucket planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class RuleFilter:
    """Prefix and tag scope shared by lifecycle, replication and tiering rules."""

    prefix: str = ""
    tags: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VersioningConfig:
    """Configuration for bucket versioning."""

    enabled: bool = True
    mfa_delete: bool = False


@dataclass(frozen=True)
class EncryptionConfig:
    """Configuration for default server-side encryption."""

    algorithm: str = "AES256"
    kms_key_id: str | None = None
    bucket_key_enabled: bool = True


@dataclass(frozen=True)
class PublicAccessBlockConfig:
    """Configuration for public access blocking."""

    block_public_acls: bool = True
    block_public_policy: bool = True
    ignore_public_acls: bool = True
    restrict_public_buckets: bool = True


@dataclass(frozen=True)
class Transition:
    days: int
    storage_class: str


@dataclass(frozen=True)
class Expiration:
    days: int | None = None
    date: str | None = None
    expired_object_delete_marker: bool | None = None


@dataclass(frozen=True)
class NoncurrentVersionTransition:
    noncurrent_days: int
    storage_class: str


@dataclass(frozen=True)
class NoncurrentVersionExpiration:
    noncurrent_days: int
    newer_noncurrent_versions: int | None = None


@dataclass(frozen=True)
class LifecycleRule:
    """A single lifecycle rule."""

    id: str
    status: str = "Enabled"
    filter: RuleFilter | None = None
    transitions: tuple[Transition, ...] = ()
    expiration: Expiration | None = None
    noncurrent_version_transitions: tuple[NoncurrentVersionTransition, ...] = ()
    noncurrent_version_expiration: NoncurrentVersionExpiration | None = None
    abort_incomplete_multipart_upload_days: int | None = None


@dataclass(frozen=True)
class CorsRule:
    """A single CORS rule."""

    allowed_methods: tuple[str, ...]
    allowed_origins: tuple[str, ...]
    allowed_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    max_age_seconds: int | None = None
    id: str | None = None


@dataclass(frozen=True)
class RedirectAllRequestsTo:
    host_name: str
    protocol: str | None = None


@dataclass(frozen=True)
class WebsiteConfig:
    """Configuration for static website hosting."""

    enabled: bool = False
    index_document: str | None = "index.html"
    error_document: str | None = None
    redirect_all_requests_to: RedirectAllRequestsTo | None = None
    routing_rules: tuple[Mapping[str, Any], ...] = ()


@dataclass(frozen=True)
class NotificationTarget:
    """A topic, queue or Lambda function receiving bucket events."""

    arn: str
    events: tuple[str, ...]
    filter_prefix: str | None = None
    filter_suffix: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class NotificationConfig:
    """Configuration for bucket event notifications."""

    enabled: bool = False
    topics: tuple[NotificationTarget, ...] = ()
    queues: tuple[NotificationTarget, ...] = ()
    lambda_functions: tuple[NotificationTarget, ...] = ()
    eventbridge: bool = False


@dataclass(frozen=True)
class BucketPolicyConfig:
    """Configuration for bucket policy."""

    enabled: bool = False
    policy: Mapping[str, Any] | str | None = None


@dataclass(frozen=True)
class ReplicationDestination:
    bucket_arn: str
    storage_class: str | None = None
    replica_kms_key_id: str | None = None
    account_id: str | None = None


@dataclass(frozen=True)
class ReplicationRule:
    """A single replication rule."""

    id: str
    destination: ReplicationDestination
    status: str = "Enabled"
    priority: int | None = None
    filter: RuleFilter | None = None
    sse_kms_encrypted_objects: bool | None = None
    delete_marker_replication: bool | None = None


@dataclass(frozen=True)
class ReplicationConfig:
    """Configuration for bucket replication."""

    enabled: bool = False
    role_arn: str = ""
    rules: tuple[ReplicationRule, ...] = ()


@dataclass(frozen=True)
class Tiering:
    access_tier: str
    days: int


@dataclass(frozen=True)
class IntelligentTieringConfig:
    """A named intelligent-tiering configuration."""

    id: str
    status: str = "Enabled"
    filter: RuleFilter | None = None
    tierings: tuple[Tiering, ...] = ()


@dataclass(frozen=True)
class ObjectLockConfig:
    """Configuration for default object lock retention."""

    enabled: bool = False
    mode: str = "GOVERNANCE"
    days: int | None = None
    years: int | None = None


@dataclass(frozen=True)
class BucketConfig:
    """Root configuration for a planned bucket."""

    name: str
    environment: str
    purpose: str
    tags: Mapping[str, str] = field(default_factory=dict)
    region: str | None = None
    force_destroy: bool = False
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    encryption: EncryptionConfig = field(default_factory=EncryptionConfig)
    public_access_block: PublicAccessBlockConfig = field(default_factory=PublicAccessBlockConfig)
    object_ownership: str = "BucketOwnerEnforced"
    acl: str | None = None
    lifecycle_rules: tuple[LifecycleRule, ...] = ()
    cors_rules: tuple[CorsRule, ...] = ()
    website: WebsiteConfig = field(default_factory=WebsiteConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    bucket_policy: BucketPolicyConfig = field(default_factory=BucketPolicyConfig)
    replication: ReplicationConfig = field(default_factory=ReplicationConfig)
    intelligent_tiering: tuple[IntelligentTieringConfig, ...] = ()
    object_lock: ObjectLockConfig = field(default_factory=ObjectLockConfig)


@dataclass(frozen=True)
class ResourceDeclaration:
    """A single resource handed to the provisioning engine."""

    address: str
    resource_type: str
    attributes: Mapping[str, Any]
    depends_on: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the status representation of the declaration."""
        return {
            "address": self.address,
            "type": self.resource_type,
            "attributes": dict(self.attributes),
            "dependsOn": list(self.depends_on),
        }


@dataclass(frozen=True)
class BucketPlan:
    """Result of planning one bucket."""

    config: BucketConfig
    region: str
    declarations: tuple[ResourceDeclaration, ...]
    outputs: Mapping[str, Any]
