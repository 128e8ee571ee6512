"""Main entry point for the S3 Bucket Planner operator."""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from .constants import API_GROUP_VERSION, KIND_BUCKET_PLAN
from .handlers.bucket_plan import BucketPlanHandler
from .tracing import initialize_tracing

bucket_plan_handler = BucketPlanHandler()


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Use annotations so progress never competes with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Metrics and health checks on port 8080
    health.start_metrics_server(int(os.getenv("METRICS_PORT", "8080")))


@kopf.on.create(API_GROUP_VERSION, KIND_BUCKET_PLAN)
@kopf.on.update(API_GROUP_VERSION, KIND_BUCKET_PLAN)
@kopf.on.resume(API_GROUP_VERSION, KIND_BUCKET_PLAN)
def handle_bucket_plan(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **_: Any,
) -> None:
    """Handle BucketPlan resource reconciliation."""
    bucket_plan_handler.reconcile_with_metrics(
        meta,
        lambda: bucket_plan_handler.reconcile(dict(spec), dict(meta), dict(status), patch),
    )
