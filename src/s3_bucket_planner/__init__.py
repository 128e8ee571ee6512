"""Plan S3 buckets as dependency-ordered resource declarations."""

from .builders.bucket import create_bucket_config_from_spec
from .services.aws.expander import expand
from .services.aws.models import BucketConfig, BucketPlan, ResourceDeclaration
from .services.aws.outputs import build_outputs, redact_outputs
from .services.aws.validation import validate
from .services.planner import plan_bucket, validate_bucket_config
from .utils.errors import BucketValidationError, DependencyOrderingDefect, FieldError

__version__ = "0.1.0"

__all__ = [
    "BucketConfig",
    "BucketPlan",
    "BucketValidationError",
    "DependencyOrderingDefect",
    "FieldError",
    "ResourceDeclaration",
    "build_outputs",
    "create_bucket_config_from_spec",
    "expand",
    "plan_bucket",
    "redact_outputs",
    "validate",
    "validate_bucket_config",
]
