"""Tests for building bucket configurations from BucketPlan specs."""

from __future__ import annotations

from s3_bucket_planner.builders.bucket import create_bucket_config_from_spec
from s3_bucket_planner.services.aws.models import RuleFilter


def _spec(**extra):
    spec = {"name": "my-app-data", "environment": "dev", "purpose": "application data"}
    spec.update(extra)
    return spec


class TestCreateBucketConfigFromSpec:
    """Test cases for create_bucket_config_from_spec."""

    def test_minimal_spec_applies_secure_defaults(self):
        """Test that a spec without feature blocks gets secure defaults."""
        config = create_bucket_config_from_spec(_spec())

        assert config.name == "my-app-data"
        assert config.versioning.enabled is True
        assert config.versioning.mfa_delete is False
        assert config.encryption.algorithm == "AES256"
        assert config.encryption.kms_key_id is None
        assert config.encryption.bucket_key_enabled is True
        assert config.public_access_block.block_public_acls is True
        assert config.public_access_block.restrict_public_buckets is True
        assert config.object_ownership == "BucketOwnerEnforced"
        assert config.acl is None
        assert config.force_destroy is False
        assert config.region is None
        assert config.lifecycle_rules == ()
        assert config.cors_rules == ()
        assert config.website.enabled is False
        assert config.notifications.enabled is False
        assert config.bucket_policy.enabled is False
        assert config.replication.enabled is False
        assert config.intelligent_tiering == ()
        assert config.object_lock.enabled is False

    def test_missing_required_fields_default_to_empty(self):
        """Test that missing identity fields are left for validation to reject."""
        config = create_bucket_config_from_spec({})

        assert config.name == ""
        assert config.environment == ""
        assert config.purpose == ""

    def test_overrides(self):
        """Test that explicit settings override defaults."""
        config = create_bucket_config_from_spec(
            _spec(
                region="eu-west-1",
                forceDestroy=True,
                tags={"Team": "data"},
                versioning={"enabled": False},
                encryption={"algorithm": "aws:kms", "kmsKeyId": "alias/data", "bucketKeyEnabled": False},
                publicAccessBlock={"blockPublicPolicy": False},
                objectOwnership="BucketOwnerPreferred",
                acl="log-delivery-write",
            )
        )

        assert config.region == "eu-west-1"
        assert config.force_destroy is True
        assert config.tags == {"Team": "data"}
        assert config.versioning.enabled is False
        assert config.encryption.algorithm == "aws:kms"
        assert config.encryption.kms_key_id == "alias/data"
        assert config.encryption.bucket_key_enabled is False
        assert config.public_access_block.block_public_policy is False
        assert config.public_access_block.block_public_acls is True
        assert config.object_ownership == "BucketOwnerPreferred"
        assert config.acl == "log-delivery-write"

    def test_lifecycle_rules(self):
        """Test lifecycle rule mapping."""
        config = create_bucket_config_from_spec(
            _spec(
                lifecycle={
                    "rules": [
                        {
                            "id": "archive",
                            "filter": {"prefix": "logs/", "tags": {"tier": "cold"}},
                            "transitions": [{"days": 30, "storageClass": "STANDARD_IA"}],
                            "expiration": {"days": 365},
                            "noncurrentVersionExpiration": {"noncurrentDays": 90},
                            "abortIncompleteMultipartUploadDays": 7,
                        },
                        {"id": "prefix-only", "prefix": "tmp/", "status": "Disabled", "expiration": {"days": 1}},
                        {"id": "unfiltered", "expiration": {"days": 1}},
                        {"id": "empty", "filter": {}, "expiration": {"days": 1}},
                    ]
                }
            )
        )

        archive, prefix_only, unfiltered, empty = config.lifecycle_rules
        assert archive.status == "Enabled"
        assert archive.filter == RuleFilter(prefix="logs/", tags={"tier": "cold"})
        assert archive.transitions[0].days == 30
        assert archive.transitions[0].storage_class == "STANDARD_IA"
        assert archive.expiration.days == 365
        assert archive.noncurrent_version_expiration.noncurrent_days == 90
        assert archive.abort_incomplete_multipart_upload_days == 7
        assert prefix_only.status == "Disabled"
        assert prefix_only.filter == RuleFilter(prefix="tmp/")
        assert unfiltered.filter is None
        assert empty.filter == RuleFilter()

    def test_cors_rules(self):
        """Test CORS rule mapping."""
        config = create_bucket_config_from_spec(
            _spec(
                cors={
                    "rules": [
                        {
                            "allowedMethods": ["GET", "HEAD"],
                            "allowedOrigins": ["https://example.com"],
                            "allowedHeaders": ["*"],
                            "maxAgeSeconds": 3000,
                        }
                    ]
                }
            )
        )

        rule = config.cors_rules[0]
        assert rule.allowed_methods == ("GET", "HEAD")
        assert rule.allowed_origins == ("https://example.com",)
        assert rule.allowed_headers == ("*",)
        assert rule.expose_headers == ()
        assert rule.max_age_seconds == 3000

    def test_website_defaults_index_document(self):
        """Test that a website block defaults its index document."""
        config = create_bucket_config_from_spec(_spec(website={"errorDocument": "error.html"}))

        assert config.website.enabled is True
        assert config.website.index_document == "index.html"
        assert config.website.error_document == "error.html"

    def test_redirect_website_has_no_index(self):
        """Test that a redirect-all website gets no default index document."""
        config = create_bucket_config_from_spec(
            _spec(website={"redirectAllRequestsTo": {"hostName": "example.com", "protocol": "https"}})
        )

        assert config.website.index_document is None
        assert config.website.redirect_all_requests_to.host_name == "example.com"
        assert config.website.redirect_all_requests_to.protocol == "https"

    def test_notifications(self):
        """Test notification target mapping."""
        config = create_bucket_config_from_spec(
            _spec(
                notifications={
                    "queues": [
                        {
                            "queueArn": "arn:aws:sqs:us-east-1:123456789012:uploads",
                            "events": ["s3:ObjectCreated:*"],
                            "filterSuffix": ".csv",
                        }
                    ],
                    "eventbridge": True,
                }
            )
        )

        notifications = config.notifications
        assert notifications.enabled is True
        assert notifications.eventbridge is True
        assert notifications.topics == ()
        assert notifications.queues[0].arn == "arn:aws:sqs:us-east-1:123456789012:uploads"
        assert notifications.queues[0].events == ("s3:ObjectCreated:*",)
        assert notifications.queues[0].filter_suffix == ".csv"

    def test_bucket_policy(self):
        """Test that a bucketPolicy block enables the policy."""
        document = {"Version": "2012-10-17", "Statement": []}
        config = create_bucket_config_from_spec(_spec(bucketPolicy={"policy": document}))

        assert config.bucket_policy.enabled is True
        assert config.bucket_policy.policy == document

    def test_replication(self):
        """Test replication mapping."""
        config = create_bucket_config_from_spec(
            _spec(
                replication={
                    "roleArn": "arn:aws:iam::123456789012:role/replication",
                    "rules": [
                        {
                            "id": "dr",
                            "priority": 1,
                            "destination": {"bucket": "arn:aws:s3:::my-app-data-dr", "storageClass": "GLACIER"},
                            "sourceSelectionCriteria": {"sseKmsEncryptedObjects": True},
                            "deleteMarkerReplication": False,
                        }
                    ],
                }
            )
        )

        replication = config.replication
        assert replication.enabled is True
        assert replication.role_arn == "arn:aws:iam::123456789012:role/replication"
        rule = replication.rules[0]
        assert rule.destination.bucket_arn == "arn:aws:s3:::my-app-data-dr"
        assert rule.destination.storage_class == "GLACIER"
        assert rule.sse_kms_encrypted_objects is True
        assert rule.delete_marker_replication is False

    def test_intelligent_tiering_and_object_lock(self):
        """Test tiering and object lock mapping."""
        config = create_bucket_config_from_spec(
            _spec(
                intelligentTiering=[
                    {"id": "archive", "tierings": [{"accessTier": "ARCHIVE_ACCESS", "days": 90}]},
                ],
                objectLock={"mode": "COMPLIANCE", "years": 7},
            )
        )

        tiering = config.intelligent_tiering[0]
        assert tiering.id == "archive"
        assert tiering.status == "Enabled"
        assert tiering.tierings[0].access_tier == "ARCHIVE_ACCESS"
        assert tiering.tierings[0].days == 90
        assert config.object_lock.enabled is True
        assert config.object_lock.mode == "COMPLIANCE"
        assert config.object_lock.years == 7
        assert config.object_lock.days is None

    def test_null_blocks_fall_back_to_defaults(self):
        """Test that blocks present as null behave like absent blocks."""
        config = create_bucket_config_from_spec(
            _spec(
                tags=None,
                versioning=None,
                encryption=None,
                publicAccessBlock=None,
                lifecycle=None,
                cors={"rules": None},
                website=None,
                notifications=None,
                bucketPolicy=None,
                replication=None,
                intelligentTiering=None,
                objectLock=None,
            )
        )

        assert config.tags == {}
        assert config.versioning.enabled is True
        assert config.encryption.algorithm == "AES256"
        assert config.public_access_block.block_public_acls is True
        assert config.lifecycle_rules == ()
        assert config.cors_rules == ()
        assert config.website.enabled is False
        assert config.notifications.enabled is False
        assert config.bucket_policy.enabled is False
        assert config.replication.enabled is False
        assert config.intelligent_tiering == ()
        assert config.object_lock.enabled is False

    def test_null_nested_lists(self):
        """Test that null lists inside rules are treated as empty."""
        config = create_bucket_config_from_spec(
            _spec(
                lifecycle={"rules": [{"id": "r", "transitions": None, "expiration": {"days": 1}}]},
                replication={
                    "roleArn": "arn:aws:iam::123456789012:role/replication",
                    "rules": [{"id": "dr", "destination": None, "sourceSelectionCriteria": None}],
                },
                notifications={"queues": None, "eventbridge": True},
            )
        )

        assert config.lifecycle_rules[0].transitions == ()
        assert config.replication.rules[0].destination.bucket_arn == ""
        assert config.notifications.queues == ()
