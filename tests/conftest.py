"""Shared test fixtures for easy-bucket tests."""

import io
import sys
from pathlib import Path

# Add project root to path so imports work without installing
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from typing import Any, Optional

import pytest
from botocore.exceptions import ClientError

from easy_bucket import BucketClient, BucketConfig


class FakeS3:
    """In-memory stand-in for the subset of the boto3 S3 client we call.

    Keys are kept per bucket and listed in lexicographic order, like S3.
    Every call is recorded in `calls` as (operation, kwargs).
    """

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def _bucket(self, name: str) -> dict[str, dict[str, Any]]:
        return self.buckets.setdefault(name, {})

    def put_object(self, **kwargs: Any) -> dict:
        self.calls.append(("put_object", kwargs))
        body = kwargs["Body"]
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._bucket(kwargs["Bucket"])[kwargs["Key"]] = {
            "Body": bytes(body),
            "ContentType": kwargs.get("ContentType"),
        }
        return {"ETag": '"etag"'}

    def get_object(self, Bucket: str, Key: str) -> dict:
        self.calls.append(("get_object", {"Bucket": Bucket, "Key": Key}))
        stored = self._bucket(Bucket).get(Key)
        if stored is None:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        return {"Body": io.BytesIO(stored["Body"]), "ContentType": stored["ContentType"]}

    def list_objects_v2(
        self,
        Bucket: str,
        MaxKeys: int = 1000,
        Prefix: str = "",
        StartAfter: Optional[str] = None,
    ) -> dict:
        self.calls.append((
            "list_objects_v2",
            {"Bucket": Bucket, "MaxKeys": MaxKeys, "Prefix": Prefix, "StartAfter": StartAfter},
        ))
        keys = sorted(
            key for key in self._bucket(Bucket)
            if key.startswith(Prefix) and (StartAfter is None or key > StartAfter)
        )
        page = keys[:MaxKeys]
        response: dict[str, Any] = {
            "IsTruncated": len(keys) > MaxKeys,
            "KeyCount": len(page),
        }
        if page:
            response["Contents"] = [
                {"Key": key, "Size": len(self._bucket(Bucket)[key]["Body"])}
                for key in page
            ]
        return response

    def delete_object(self, Bucket: str, Key: str) -> dict:
        self.calls.append(("delete_object", {"Bucket": Bucket, "Key": Key}))
        self._bucket(Bucket).pop(Key, None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}

    def delete_objects(self, Bucket: str, Delete: dict) -> dict:
        self.calls.append(("delete_objects", {"Bucket": Bucket, "Delete": Delete}))
        for obj in Delete["Objects"]:
            self._bucket(Bucket).pop(obj["Key"], None)
        return {}

    def generate_presigned_url(self, ClientMethod: str, Params: dict, ExpiresIn: int) -> str:
        self.calls.append((
            "generate_presigned_url",
            {"ClientMethod": ClientMethod, "Params": Params, "ExpiresIn": ExpiresIn},
        ))
        return f"https://signed.example/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


@pytest.fixture
def bucket_config() -> BucketConfig:
    return BucketConfig(
        endpoint="https://oss.example.com",
        region="us-east-1",
        access_key="test-access",
        secret_key="test-secret",
    )


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def bucket(bucket_config: BucketConfig, fake_s3: FakeS3) -> BucketClient:
    """BucketClient for bucket 'media' backed by the in-memory fake."""
    return BucketClient("media", bucket_config, s3_client=fake_s3)
