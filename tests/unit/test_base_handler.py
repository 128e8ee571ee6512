"""Tests for base handler functionality."""

from __future__ import annotations

from unittest.mock import Mock, patch

import kopf
import pytest

from s3_bucket_planner.constants import COND_READY, COND_VALIDATION_FAILED
from s3_bucket_planner.handlers.base import BaseHandler
from s3_bucket_planner.utils.errors import BucketValidationError, FieldError


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    def test_resource_context_defaults(self):
        """Test context extraction with missing metadata."""
        handler = BaseHandler(kind="TestKind")

        assert handler._get_resource_context({}) == {"name": "unknown", "namespace": "default", "uid": "unknown"}

    @patch("s3_bucket_planner.handlers.base.log_resource_event")
    def test_log_error_sanitizes(self, mock_log):
        """Test that logged errors are sanitized."""
        handler = BaseHandler(kind="TestKind")
        error = RuntimeError("role arn:aws:iam::123456789012:role/admin missing")

        handler.log_error({"name": "plan"}, "failed", error=error)

        kwargs = mock_log.call_args.kwargs
        assert kwargs["error_type"] == "RuntimeError"
        assert "123456789012" not in kwargs["error"]

    @patch("s3_bucket_planner.handlers.base.emit_reconcile_started")
    @patch("s3_bucket_planner.handlers.base.metrics")
    def test_reconcile_with_metrics_success(self, mock_metrics, mock_emit_started):
        """Test successful reconciliation with metrics."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "namespace": "default"}
        reconcile_fn = Mock()

        handler.reconcile_with_metrics(meta, reconcile_fn)

        reconcile_fn.assert_called_once()
        mock_emit_started.assert_called_once_with(meta)
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="started")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="success")
        assert mock_metrics.reconcile_duration_seconds.labels.called

    @patch("s3_bucket_planner.handlers.base.emit_reconcile_failed")
    @patch("s3_bucket_planner.handlers.base.emit_reconcile_started")
    @patch("s3_bucket_planner.handlers.base.metrics")
    @patch("s3_bucket_planner.handlers.base.sanitize_exception")
    def test_reconcile_with_metrics_failure(self, mock_sanitize, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test failed reconciliation with metrics and error handling."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "namespace": "default"}
        test_error = RuntimeError("Test error")
        mock_sanitize.return_value = "Sanitized error"

        def failing_fn():
            raise test_error

        with pytest.raises(RuntimeError):
            handler.reconcile_with_metrics(meta, failing_fn)

        # Sanitized once for the log and once for the event
        assert mock_sanitize.call_count == 2
        mock_sanitize.assert_any_call(test_error)
        mock_emit_started.assert_called_once_with(meta)
        mock_emit_failed.assert_called_once_with(meta, "Reconciliation failed: Sanitized error")
        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="RuntimeError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="error")

    @patch("s3_bucket_planner.handlers.base.emit_reconcile_failed")
    @patch("s3_bucket_planner.handlers.base.emit_reconcile_started")
    @patch("s3_bucket_planner.handlers.base.metrics")
    def test_reconcile_with_metrics_permanent_error(self, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test that permanent errors pass through without being counted as errors."""
        handler = BaseHandler(kind="TestKind")

        def failing_fn():
            raise kopf.PermanentError("invalid")

        with pytest.raises(kopf.PermanentError):
            handler.reconcile_with_metrics({"name": "plan"}, failing_fn)

        mock_emit_failed.assert_not_called()
        mock_metrics.error_total.labels.assert_not_called()


class TestHandleValidationError:
    """Test cases for handle_validation_error."""

    @patch("s3_bucket_planner.handlers.base.emit_validate_failed")
    @patch("s3_bucket_planner.handlers.base.metrics")
    def test_records_every_violation(self, mock_metrics, mock_emit_failed):
        """Test that all violations reach the status and a permanent error is raised."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "plan", "generation": 4}
        patch_obj = kopf.Patch()
        error = BucketValidationError(
            [FieldError("name", "must be lowercase"), FieldError("objectLock", "requires versioning to be enabled")]
        )

        with pytest.raises(kopf.PermanentError, match="Validation failed"):
            handler.handle_validation_error(meta, {}, patch_obj, error)

        assert patch_obj.status["validationErrors"] == [
            "name: must be lowercase",
            "objectLock: requires versioning to be enabled",
        ]
        assert patch_obj.status["observedGeneration"] == 4
        conditions = {c["type"]: c for c in patch_obj.status["conditions"]}
        assert conditions[COND_VALIDATION_FAILED]["status"] == "True"
        assert conditions[COND_READY]["status"] == "False"
        mock_emit_failed.assert_called_once()
        mock_metrics.reconcile_total.labels.assert_called_with(kind="TestKind", result="failed")
