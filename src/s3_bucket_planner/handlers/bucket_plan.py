"""Handler for BucketPlan CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.bucket import create_bucket_config_from_spec
from ..constants import KIND_BUCKET_PLAN
from ..services.aws.outputs import redact_outputs
from ..services.planner import plan_bucket
from ..tracing import trace_span
from ..utils.conditions import (
    set_plan_failed_condition,
    set_ready_condition,
    set_validation_failed_condition,
)
from ..utils.errors import BucketValidationError, DependencyOrderingDefect, sanitize_dict, sanitize_exception
from ..utils.events import emit_plan_generated, emit_validate_succeeded
from .base import BaseHandler


class BucketPlanHandler(BaseHandler):
    """Handler for BucketPlan resources."""

    def __init__(self):
        """Initialize bucket plan handler."""
        super().__init__(KIND_BUCKET_PLAN)

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile BucketPlan resource."""
        bucket_name = spec.get("name") or meta.get("name", "unknown")
        generation = meta.get("generation", 0)
        conditions = status.get("conditions", [])

        with trace_span("reconcile_bucket_plan", kind=self.kind, attributes={"bucket.name": bucket_name}):
            config = create_bucket_config_from_spec(spec)

            try:
                plan = plan_bucket(config)
            except BucketValidationError as e:
                self.handle_validation_error(meta, status, patch, e)
                return
            except DependencyOrderingDefect as e:
                error_msg = f"Planner defect: {sanitize_exception(e)}"
                conditions = set_plan_failed_condition(conditions, error_msg, generation)
                conditions = set_ready_condition(conditions, False, error_msg, generation)
                patch.status.update({"conditions": conditions, "observedGeneration": generation})
                raise

            emit_validate_succeeded(meta)

            declarations = [sanitize_dict(d.to_dict()) for d in plan.declarations]
            message = f"Planned {len(declarations)} resources for bucket {config.name}"

            conditions = set_validation_failed_condition(conditions, False, "Validation succeeded", generation)
            conditions = set_ready_condition(conditions, True, message, generation)

            patch.status.update({
                "bucketName": config.name,
                "region": plan.region,
                "declarationCount": len(declarations),
                "declarations": declarations,
                "outputs": redact_outputs(dict(plan.outputs)),
                "validationErrors": [],
                "conditions": conditions,
                "observedGeneration": generation,
            })

            emit_plan_generated(meta, config.name, len(declarations))
            self.log_info(
                meta,
                message,
                reason="PlanGenerated",
                bucket_name=config.name,
                region=plan.region,
                declaration_count=len(declarations),
            )
