"""Bucket planning: validate, expand and project outputs."""

from __future__ import annotations

import logging
import time

from .. import metrics
from ..tracing import add_span_attribute, trace_span
from ..utils.errors import BucketValidationError, DependencyOrderingDefect
from .aws.expander import expand
from .aws.models import BucketConfig, BucketPlan
from .aws.outputs import build_outputs
from .aws.regions import resolve_region
from .aws.validation import validate

logger = logging.getLogger(__name__)


def _metric_field(field: str) -> str:
    """Reduce a field path like ``lifecycle.rules[0].status`` to ``lifecycle``."""
    return field.split(".", 1)[0].split("[", 1)[0]


def validate_bucket_config(config: BucketConfig, region: str | None = None) -> None:
    """Validate a configuration, recording the outcome in metrics.

    Args:
        config: Bucket configuration
        region: Resolved region, checked when it differs from the configured one

    Raises:
        BucketValidationError: If any constraint is violated
    """
    with trace_span("validate_bucket", attributes={"bucket.name": str(config.name)}):
        try:
            validate(config, region=region)
        except BucketValidationError as e:
            metrics.validation_total.labels(result="failed").inc()
            for error in e.errors:
                metrics.validation_errors_total.labels(field=_metric_field(error.field)).inc()
            add_span_attribute("validation.error_count", len(e.errors))
            raise
        metrics.validation_total.labels(result="success").inc()


def plan_bucket(config: BucketConfig, region: str | None = None) -> BucketPlan:
    """Plan a single bucket.

    Nothing is returned unless validation and expansion both succeed, so a
    caller never sees a partial declaration set.

    Args:
        config: Bucket configuration
        region: Region override; defaults to the configured or session region

    Returns:
        The ordered declarations and named outputs for the bucket

    Raises:
        BucketValidationError: If the configuration is invalid
        DependencyOrderingDefect: If the expander produced an unorderable graph
    """
    resolved_region = resolve_region(region or config.region)
    validate_bucket_config(config, region=resolved_region)

    start_time = time.time()
    with trace_span("expand_bucket", attributes={"bucket.name": config.name}):
        try:
            declarations = expand(config)
        except DependencyOrderingDefect:
            metrics.expansion_total.labels(result="defect").inc()
            logger.exception(f"Expansion of bucket {config.name} produced an invalid dependency graph")
            raise
        finally:
            metrics.expansion_duration_seconds.observe(time.time() - start_time)

        metrics.expansion_total.labels(result="success").inc()
        for declaration in declarations:
            metrics.declarations_total.labels(resource_type=declaration.resource_type).inc()
        add_span_attribute("plan.declaration_count", len(declarations))

    outputs = build_outputs(config, declarations, resolved_region)

    logger.debug(f"Planned bucket {config.name} in {resolved_region} with {len(declarations)} declarations")

    return BucketPlan(
        config=config,
        region=resolved_region,
        declarations=tuple(declarations),
        outputs=outputs,
    )
