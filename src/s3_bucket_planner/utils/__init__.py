"""Utility functions for the S3 Bucket Planner."""

from .conditions import (
    set_plan_failed_condition,
    set_ready_condition,
    set_validation_failed_condition,
    update_condition,
)
from .errors import sanitize_dict, sanitize_error_message, sanitize_exception
from .events import emit_event
from .tags import merge_tags

__all__ = [
    "update_condition",
    "set_ready_condition",
    "set_validation_failed_condition",
    "set_plan_failed_condition",
    "emit_event",
    "merge_tags",
    "sanitize_dict",
    "sanitize_error_message",
    "sanitize_exception",
]
