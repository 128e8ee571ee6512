"""Prometheus metrics for the S3 Bucket Planner."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "s3_bucket_planner_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "s3_bucket_planner_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5],
)

error_total = Counter(
    "s3_bucket_planner_error_total",
    "Total number of errors by type",
    ["kind", "error_type"],
)

# Planning metrics
validation_total = Counter(
    "s3_bucket_planner_validation_total",
    "Total number of bucket configuration validations",
    ["result"],
)

validation_errors_total = Counter(
    "s3_bucket_planner_validation_errors_total",
    "Total number of field violations found by validation",
    ["field"],
)

expansion_total = Counter(
    "s3_bucket_planner_expansion_total",
    "Total number of bucket configuration expansions",
    ["result"],
)

expansion_duration_seconds = Histogram(
    "s3_bucket_planner_expansion_duration_seconds",
    "Duration of planning a bucket in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
)

declarations_total = Counter(
    "s3_bucket_planner_declarations_total",
    "Total number of resource declarations emitted",
    ["resource_type"],
)
