"""Builders for planner inputs."""

from .bucket import create_bucket_config_from_spec

__all__ = ["create_bucket_config_from_spec"]
