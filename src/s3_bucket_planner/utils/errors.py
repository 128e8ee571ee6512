"""Planner errors and sanitization utilities to prevent information leakage."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """A single constraint violation on a bucket configuration field."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class BucketValidationError(ValueError):
    """Raised when a bucket configuration violates one or more constraints.

    All violations found are carried in ``errors`` so callers can fix them in
    a single pass.
    """

    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(error) for error in self.errors))

    @property
    def fields(self) -> set[str]:
        """Names of all fields that failed validation."""
        return {error.field for error in self.errors}


class DependencyOrderingDefect(RuntimeError):
    """Raised when the expander produced a dependency graph it cannot order.

    This indicates a bug in the expander, never bad user input.
    """


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(arn:aws:kms:[a-z0-9\-]*:)\d{12}:key/[a-zA-Z0-9\-]+",
    r"(arn:aws:kms:[a-z0-9\-]*:)\d{12}:alias/[a-zA-Z0-9\-_/]+",
    r"(arn:aws:iam::)\d{12}:role/[a-zA-Z0-9\-_/+=,.@]+",
    r"(access[_\s]?key[_\s]?id[:\s]+)[A-Z0-9]{20}",
    r"(secret[_\s]?access[_\s]?key[:\s]+)[A-Za-z0-9/+=]{40}",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "kms_key_id",
    "kmskeyid",
    "kms_master_key_id",
    "replica_kms_key_id",
    "replicakmskeyid",
    "access_key_id",
    "secret_access_key",
    "session_token",
    "password",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1[REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[:=\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        if key.lower() in all_sensitive:
            sanitized[key] = "[REDACTED]" if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, sensitive_keys) if isinstance(item, dict) else item for item in value
            ]
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
