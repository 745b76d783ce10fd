"""
Single-bucket client for S3-compatible object storage.

Wraps a boto3 S3 client configured once from a BucketConfig and exposes
save, download, list, delete and share operations against one bucket.

Errors from botocore (ClientError, BotoCoreError) and httpx are logged and
re-raised unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Union

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from . import downloader
from .config import BucketConfig

logger = logging.getLogger(__name__)

DELETE_PAGE_SIZE = 200

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass
class ListPage:
    """One page of a listing.

    `more` is None on the last page, otherwise a zero-argument callable
    that fetches the page after this one.
    """

    entries: list[dict[str, Any]]
    more: Optional[Callable[[], "ListPage"]] = None


def _build_s3_client(config: BucketConfig) -> BaseClient:
    """Create a boto3 S3 client for the configured endpoint."""
    client_kwargs: dict[str, Any] = {}
    if config.force_path_style:
        client_kwargs["config"] = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        )
    else:
        client_kwargs["config"] = Config(signature_version="s3v4")

    return boto3.client(
        "s3",
        endpoint_url=config.endpoint,
        region_name=config.region,
        aws_access_key_id=config.access_key,
        aws_secret_access_key=config.secret_key,
        **client_kwargs,
    )


class BucketClient:
    """Operations on a single bucket.

    The client keeps no state between calls, so one instance can be shared
    across threads.
    """

    def __init__(
        self,
        bucket: str,
        config: BucketConfig,
        s3_client: Optional[BaseClient] = None,
        download_timeout: float = downloader.DOWNLOAD_TIMEOUT,
    ) -> None:
        self.bucket = bucket
        self.endpoint = config.endpoint.rstrip("/")
        self.download_timeout = download_timeout
        self._s3 = s3_client or _build_s3_client(config)

    def object_url(self, key: str) -> str:
        """Public URL of an object, using the bucket as a subdomain of the endpoint."""
        base = self.endpoint.replace("//", f"//{self.bucket}.", 1)
        return f"{base}/{key}"

    def save(
        self,
        key: str,
        content: Union[bytes, bytearray, str],
        content_type: Optional[str] = None,
    ) -> str:
        """
        Write an object, replacing any existing object at the same key.

        Args:
            key: Object key (path)
            content: Bytes or text to store
            content_type: MIME type (optional)

        Returns:
            Public URL of the object
        """
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": content}
        if content_type:
            params["ContentType"] = content_type

        try:
            self._s3.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to save s3://%s/%s: %s", self.bucket, key, exc)
            raise

        url = self.object_url(key)
        logger.debug("Saved object to %s", url)
        return url

    def read(self, key: str) -> bytes:
        """Return an object's contents."""
        try:
            response = self._s3.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to read s3://%s/%s: %s", self.bucket, key, exc)
            raise

    def download(self, url: str, directory: str = "") -> str:
        """
        Fetch a remote file and save it under a generated name.

        The name is a unique id plus an extension derived from the response's
        content type, prefixed with `directory` as-is (include a trailing
        slash if one is wanted).

        Args:
            url: Source URL
            directory: Key prefix for the saved object

        Returns:
            Public URL of the saved object

        Raises:
            httpx.TransportError: If the fetch fails or times out
            ClientError: If the save fails
        """
        fetched = downloader.fetch(url, timeout=self.download_timeout)
        logger.info("Mirroring %s to %s%s", url, directory, fetched.file_name)
        return self.save(directory + fetched.file_name, fetched.content, fetched.content_type)

    def list(
        self,
        max_results: Optional[int] = None,
        prefix: Optional[str] = None,
        start_after: Optional[str] = None,
    ) -> ListPage:
        """
        List one page of objects in key order.

        Args:
            max_results: Page size cap (backend default if None)
            prefix: Only keys starting with this prefix
            start_after: Resume strictly after this key

        Returns:
            ListPage whose `more` fetches the next page, or is None when the
            backend reports no further pages
        """
        params: dict[str, Any] = {"Bucket": self.bucket}
        if max_results is not None:
            params["MaxKeys"] = max_results
        if prefix is not None:
            params["Prefix"] = prefix
        if start_after is not None:
            params["StartAfter"] = start_after

        try:
            response = self._s3.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to list s3://%s/%s: %s", self.bucket, prefix or "", exc)
            raise

        entries = response.get("Contents", [])
        if not entries or not response.get("IsTruncated"):
            return ListPage(entries=entries)

        last_key = entries[-1]["Key"]
        return ListPage(
            entries=entries,
            more=lambda: self.list(max_results, prefix, last_key),
        )

    def iter_objects(
        self,
        prefix: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield every object under `prefix`, following pages lazily."""
        page: Optional[ListPage] = self.list(page_size, prefix)
        while page is not None:
            yield from page.entries
            page = page.more() if page.more else None

    def delete(self, key: str) -> dict[str, Any]:
        """
        Delete a single object. Deleting a missing key is not an error.

        Returns:
            The backend response
        """
        try:
            response = self._s3.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                logger.debug("s3://%s/%s already absent", self.bucket, key)
                return {}
            logger.error("Failed to delete s3://%s/%s: %s", self.bucket, key, exc)
            raise
        except BotoCoreError as exc:
            logger.error("Failed to delete s3://%s/%s: %s", self.bucket, key, exc)
            raise

        logger.debug("Deleted s3://%s/%s", self.bucket, key)
        return response

    def delete_by_prefix(self, prefix: str, page: int = 1) -> bool:
        """
        Delete every object whose key starts with `prefix`.

        Works in batches of DELETE_PAGE_SIZE keys, one list and one bulk
        delete per batch. An empty prefix empties the bucket. A failing batch
        aborts the sweep; earlier batches stay deleted. Keys written under the
        prefix while the sweep runs may or may not be removed.

        Args:
            prefix: Key prefix to delete
            page: Starting page number, used only in progress logs

        Returns:
            True once no matching keys remain in the listing
        """
        cursor: Optional[str] = None
        while True:
            batch = self.list(DELETE_PAGE_SIZE, prefix, cursor)
            if not batch.entries:
                return True

            logger.info("page size=%d, delete page %d", DELETE_PAGE_SIZE, page)
            objects = [{"Key": entry["Key"]} for entry in batch.entries]
            try:
                response = self._s3.delete_objects(
                    Bucket=self.bucket,
                    Delete={"Objects": objects, "Quiet": True},
                )
            except (ClientError, BotoCoreError) as exc:
                logger.error(
                    "Bulk delete failed on page %d under s3://%s/%s: %s",
                    page, self.bucket, prefix, exc,
                )
                raise

            for error in response.get("Errors", []):
                logger.warning(
                    "Could not delete s3://%s/%s: %s",
                    self.bucket, error.get("Key"), error.get("Message") or error.get("Code"),
                )

            if batch.more is None:
                return True
            cursor = batch.entries[-1]["Key"]
            page += 1

    def get_share_url(self, key: str, expires_seconds: int = 3600) -> str:
        """
        Presigned GET URL for an object.

        Args:
            key: Object key
            expires_seconds: Validity of the URL in seconds

        Returns:
            Signed URL granting read access until it expires
        """
        try:
            return self._s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to sign URL for s3://%s/%s: %s", self.bucket, key, exc)
            raise
