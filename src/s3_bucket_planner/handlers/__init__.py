"""Handler modules for CRD resources."""

from .bucket_plan import BucketPlanHandler

__all__ = ["BucketPlanHandler"]
