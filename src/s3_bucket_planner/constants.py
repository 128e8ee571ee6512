"""Constants for the S3 Bucket Planner."""

# API Group
API_GROUP = "s3planner.cloud37.dev"
API_GROUP_VERSION = f"{API_GROUP}/v1alpha1"

# Resource Kinds
KIND_BUCKET_PLAN = "BucketPlan"

# Controller name used in structured logs and tags
CONTROLLER_NAME = "s3-bucket-planner"

# Condition Types
COND_READY = "Ready"
COND_VALIDATION_FAILED = "ValidationFailed"
COND_PLAN_FAILED = "PlanFailed"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_PLAN_GENERATED = "PlanGenerated"

# Bucket naming
BUCKET_NAME_PATTERN = r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$"
BUCKET_NAME_MIN_LENGTH = 3
BUCKET_NAME_MAX_LENGTH = 63
PURPOSE_MAX_LENGTH = 50
LIFECYCLE_RULE_ID_MAX_LENGTH = 255

# Allowed values
ENVIRONMENTS = ("dev", "staging", "prod", "test")
ENCRYPTION_ALGORITHMS = ("AES256", "aws:kms")
OBJECT_OWNERSHIP_VALUES = ("BucketOwnerPreferred", "ObjectWriter", "BucketOwnerEnforced")
CANNED_ACLS = (
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "aws-exec-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
    "log-delivery-write",
)
RULE_STATUSES = ("Enabled", "Disabled")
STORAGE_CLASSES = (
    "STANDARD",
    "STANDARD_IA",
    "ONEZONE_IA",
    "INTELLIGENT_TIERING",
    "GLACIER",
    "GLACIER_IR",
    "DEEP_ARCHIVE",
    "REDUCED_REDUNDANCY",
)
CORS_METHODS = ("GET", "PUT", "POST", "DELETE", "HEAD")
WEBSITE_PROTOCOLS = ("http", "https")
OBJECT_LOCK_MODES = ("GOVERNANCE", "COMPLIANCE")

# Intelligent tiering access tiers and their allowed day ranges
TIERING_ACCESS_TIER_DAYS = {
    "ARCHIVE_ACCESS": (90, 730),
    "DEEP_ARCHIVE_ACCESS": (180, 730),
}

# Duplicate intelligent-tiering ids collapse to the last entry
TIERING_DUPLICATE_POLICY = "last-write-wins"

# ARN prefixes
KMS_KEY_ARN_PREFIX = "arn:aws:kms:"
IAM_ROLE_ARN_PREFIX = "arn:aws:iam::"
S3_BUCKET_ARN_PREFIX = "arn:aws:s3:::"
ARN_PREFIX = "arn:"

# Region used when neither the config nor the AWS environment names one
DEFAULT_REGION = "us-east-1"
AWS_PARTITION = "aws"

# Regions whose website endpoint uses "s3-website-<region>"; all others use "s3-website.<region>"
S3_WEBSITE_LEGACY_REGIONS = frozenset({
    "us-east-1",
    "us-west-1",
    "us-west-2",
    "eu-west-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "ap-northeast-1",
    "sa-east-1",
    "us-gov-west-1",
})

# Secure-by-default settings applied to every bucket unless overridden
SECURE_DEFAULTS = {
    "force_destroy": False,
    "versioning": {
        "enabled": True,
        "mfa_delete": False,
    },
    "encryption": {
        "algorithm": "AES256",
        "kms_key_id": None,
        "bucket_key_enabled": True,
    },
    "public_access_block": {
        "block_public_acls": True,
        "block_public_policy": True,
        "ignore_public_acls": True,
        "restrict_public_buckets": True,
    },
    "object_ownership": "BucketOwnerEnforced",
    "website": {
        "index_document": "index.html",
    },
}

# Resource types emitted by the expander
RESOURCE_BUCKET = "aws_s3_bucket"
RESOURCE_VERSIONING = "aws_s3_bucket_versioning"
RESOURCE_ENCRYPTION = "aws_s3_bucket_server_side_encryption_configuration"
RESOURCE_PUBLIC_ACCESS_BLOCK = "aws_s3_bucket_public_access_block"
RESOURCE_OWNERSHIP_CONTROLS = "aws_s3_bucket_ownership_controls"
RESOURCE_ACL = "aws_s3_bucket_acl"
RESOURCE_LIFECYCLE = "aws_s3_bucket_lifecycle_configuration"
RESOURCE_CORS = "aws_s3_bucket_cors_configuration"
RESOURCE_WEBSITE = "aws_s3_bucket_website_configuration"
RESOURCE_NOTIFICATION = "aws_s3_bucket_notification"
RESOURCE_POLICY = "aws_s3_bucket_policy"
RESOURCE_REPLICATION = "aws_s3_bucket_replication_configuration"
RESOURCE_INTELLIGENT_TIERING = "aws_s3_bucket_intelligent_tiering_configuration"
RESOURCE_OBJECT_LOCK = "aws_s3_bucket_object_lock_configuration"

# Canonical emission order; the index is the tie-breaker of the topological sort
RESOURCE_ORDER = (
    RESOURCE_BUCKET,
    RESOURCE_VERSIONING,
    RESOURCE_ENCRYPTION,
    RESOURCE_PUBLIC_ACCESS_BLOCK,
    RESOURCE_OWNERSHIP_CONTROLS,
    RESOURCE_ACL,
    RESOURCE_LIFECYCLE,
    RESOURCE_CORS,
    RESOURCE_WEBSITE,
    RESOURCE_NOTIFICATION,
    RESOURCE_POLICY,
    RESOURCE_REPLICATION,
    RESOURCE_INTELLIGENT_TIERING,
    RESOURCE_OBJECT_LOCK,
)

# Outputs whose values never leave the planner unredacted
SENSITIVE_OUTPUTS = frozenset({"kms_key_id"})
REDACTED = "***REDACTED***"
