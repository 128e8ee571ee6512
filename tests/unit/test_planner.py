"""Tests for the bucket planner service."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import patch

import pytest

from s3_bucket_planner import plan_bucket, validate_bucket_config
from s3_bucket_planner.builders.bucket import create_bucket_config_from_spec
from s3_bucket_planner.constants import (
    RESOURCE_BUCKET,
    RESOURCE_LIFECYCLE,
    RESOURCE_OBJECT_LOCK,
    RESOURCE_WEBSITE,
)
from s3_bucket_planner.services.aws.models import BucketConfig, ObjectLockConfig, VersioningConfig
from s3_bucket_planner.services.planner import _metric_field
from s3_bucket_planner.utils.errors import BucketValidationError, DependencyOrderingDefect

KMS_KEY = "arn:aws:kms:us-east-1:123456789012:key/12345678-1234-1234-1234-123456789012"


def _config(**overrides):
    return replace(BucketConfig(name="my-app-data", environment="dev", purpose="application data"), **overrides)


class TestMetricField:
    """Test cases for metric label reduction."""

    def test_reduces_to_top_level(self):
        """Test that nested field paths collapse to their block."""
        assert _metric_field("lifecycle.rules[0].status") == "lifecycle"
        assert _metric_field("intelligentTiering[2].tierings[0].days") == "intelligentTiering"
        assert _metric_field("name") == "name"


class TestValidateBucketConfig:
    """Test cases for validate_bucket_config."""

    @patch("s3_bucket_planner.services.planner.metrics")
    def test_success_metrics(self, mock_metrics):
        """Test that a valid config records a success."""
        validate_bucket_config(_config())

        mock_metrics.validation_total.labels.assert_called_once_with(result="success")

    @patch("s3_bucket_planner.services.planner.metrics")
    def test_failure_metrics(self, mock_metrics):
        """Test that each violation is counted by its top-level field."""
        with pytest.raises(BucketValidationError):
            validate_bucket_config(_config(name="Bad_Name", environment="qa"))

        mock_metrics.validation_total.labels.assert_called_once_with(result="failed")
        mock_metrics.validation_errors_total.labels.assert_any_call(field="name")
        mock_metrics.validation_errors_total.labels.assert_any_call(field="environment")


class TestPlanBucket:
    """Test cases for plan_bucket."""

    def test_basic_bucket(self):
        """Test planning a bucket from a minimal spec."""
        config = create_bucket_config_from_spec(
            {"name": "my-app-data", "environment": "dev", "purpose": "application data"}
        )

        plan = plan_bucket(config, region="us-east-1")

        assert plan.region == "us-east-1"
        assert len(plan.declarations) == 5
        assert plan.declarations[0].resource_type == RESOURCE_BUCKET
        assert plan.outputs["bucket_url"] == "https://my-app-data.s3.us-east-1.amazonaws.com"

    def test_static_website(self):
        """Test planning a static website bucket."""
        config = create_bucket_config_from_spec(
            {
                "name": "my-site",
                "environment": "prod",
                "purpose": "marketing site",
                "website": {"indexDocument": "index.html", "errorDocument": "error.html"},
                "cors": {"rules": [{"allowedMethods": ["GET"], "allowedOrigins": ["*"]}]},
            }
        )

        plan = plan_bucket(config, region="us-west-2")
        website = next(d for d in plan.declarations if d.resource_type == RESOURCE_WEBSITE)

        assert website.attributes["index_document"] == {"suffix": "index.html"}
        assert website.attributes["error_document"] == {"key": "error.html"}
        assert "my-site" in plan.outputs["website_endpoint"]

    def test_data_lake(self):
        """Test planning a KMS encrypted, locked bucket with lifecycle rules."""
        config = create_bucket_config_from_spec(
            {
                "name": "corp-data-lake",
                "environment": "prod",
                "purpose": "analytics data lake",
                "encryption": {"algorithm": "aws:kms", "kmsKeyId": KMS_KEY},
                "lifecycle": {
                    "rules": [
                        {
                            "id": "raw-to-glacier",
                            "filter": {"prefix": "raw/"},
                            "transitions": [{"days": 90, "storageClass": "GLACIER"}],
                        }
                    ]
                },
                "objectLock": {"mode": "GOVERNANCE", "days": 30},
            }
        )

        plan = plan_bucket(config, region="eu-west-1")
        types = [d.resource_type for d in plan.declarations]

        assert RESOURCE_LIFECYCLE in types
        assert types[-1] == RESOURCE_OBJECT_LOCK
        assert plan.declarations[0].attributes["object_lock_enabled"] is True
        assert plan.outputs["kms_key_id"] == KMS_KEY

    def test_configured_region_is_used(self):
        """Test that the config region applies when no override is given."""
        plan = plan_bucket(_config(region="ap-southeast-2"))

        assert plan.region == "ap-southeast-2"
        assert plan.outputs["bucket_region"] == "ap-southeast-2"

    def test_override_region_wins(self):
        """Test that an explicit region overrides the config region."""
        plan = plan_bucket(_config(region="ap-southeast-2"), region="eu-north-1")

        assert plan.region == "eu-north-1"

    def test_unknown_override_region_is_rejected(self):
        """Test that an unknown region override is reported as a region error."""
        with pytest.raises(BucketValidationError) as exc_info:
            plan_bucket(_config(), region="mars-north-9")

        assert exc_info.value.fields == {"region"}
        assert "mars-north-9" in str(exc_info.value)

    def test_unknown_session_region_is_rejected(self):
        """Test that a bogus region from the AWS environment is rejected."""
        with patch("s3_bucket_planner.services.planner.resolve_region", return_value="mars-north-9"):
            with pytest.raises(BucketValidationError) as exc_info:
                plan_bucket(_config())

        assert exc_info.value.fields == {"region"}

    def test_invalid_config_yields_no_plan(self):
        """Test that object lock without versioning fails before expansion."""
        config = _config(
            versioning=VersioningConfig(enabled=False),
            object_lock=ObjectLockConfig(enabled=True, days=1),
        )

        with patch("s3_bucket_planner.services.planner.expand") as mock_expand:
            with pytest.raises(BucketValidationError) as exc_info:
                plan_bucket(config, region="us-east-1")

        assert "objectLock" in exc_info.value.fields
        mock_expand.assert_not_called()

    @patch("s3_bucket_planner.services.planner.metrics")
    @patch("s3_bucket_planner.services.planner.expand")
    def test_ordering_defect_propagates(self, mock_expand, mock_metrics):
        """Test that an expander defect is counted and re-raised."""
        mock_expand.side_effect = DependencyOrderingDefect("dependency cycle between a, b")

        with pytest.raises(DependencyOrderingDefect):
            plan_bucket(_config(), region="us-east-1")

        mock_metrics.expansion_total.labels.assert_called_once_with(result="defect")
        assert mock_metrics.expansion_duration_seconds.observe.called

    @patch("s3_bucket_planner.services.planner.metrics")
    def test_declaration_metrics(self, mock_metrics):
        """Test that emitted declarations are counted by type."""
        plan_bucket(_config(), region="us-east-1")

        mock_metrics.expansion_total.labels.assert_called_once_with(result="success")
        mock_metrics.declarations_total.labels.assert_any_call(resource_type=RESOURCE_BUCKET)
        assert mock_metrics.declarations_total.labels.call_count == 5
