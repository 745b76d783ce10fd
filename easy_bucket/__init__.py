"""Single-bucket facade over S3-compatible object storage."""

from .bucket_client import DELETE_PAGE_SIZE, BucketClient, ListPage
from .config import BucketConfig

__all__ = ["BucketClient", "BucketConfig", "ListPage", "DELETE_PAGE_SIZE"]
