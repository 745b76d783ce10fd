"""Configuration for the bucket client."""

from .bucket_config import BucketConfig
from .logging_config import setup_console_logging

__all__ = ["BucketConfig", "setup_console_logging"]
