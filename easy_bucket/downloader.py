"""
Fetching remote files for mirroring into a bucket.

Downloads a URL into memory and derives a generated file name from the
response's content type.
"""

import logging
import mimetypes
import random
import time
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

# 2015-01-01T00:00:00Z in milliseconds
EPOCH_OFFSET_MS = 1_420_070_400_000

DOWNLOAD_TIMEOUT = 60.0

UNKNOWN_EXTENSION = "undefined"

# Pinned so common types don't depend on the host's mime.types files
PREFERRED_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "text/html": "html",
    "text/plain": "txt",
    "text/css": "css",
    "application/json": "json",
    "application/pdf": "pdf",
    "video/mp4": "mp4",
}


@dataclass
class DownloadedFile:
    file_name: str
    content_type: Optional[str]
    content: bytes


def unique_id() -> str:
    """Time-seeded numeric id. Collisions are unlikely, not impossible."""
    now_ms = int(time.time() * 1000)
    return str((now_ms - EPOCH_OFFSET_MS) * random.randint(1_000_000, 4_194_304))


def extension_for(content_type: Optional[str]) -> str:
    """
    Map a MIME type to a file extension without the leading dot.

    Parameters such as "; charset=utf-8" are ignored. Unknown or missing
    types map to "undefined".
    """
    if not content_type:
        return UNKNOWN_EXTENSION

    mime = content_type.split(";", 1)[0].strip().lower()
    if mime in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[mime]

    extension = mimetypes.guess_extension(mime, strict=False)
    if not extension:
        logger.debug("No extension known for content type %s", content_type)
        return UNKNOWN_EXTENSION
    return extension.lstrip(".")


def fetch(url: str, timeout: float = DOWNLOAD_TIMEOUT) -> DownloadedFile:
    """
    GET a URL and name the result after its content type.

    Args:
        url: Source URL
        timeout: Request timeout in seconds

    Returns:
        DownloadedFile with a generated file name, the response content type
        and the body

    Error responses (4xx/5xx) are returned like any other response.

    Raises:
        httpx.TransportError: If the request fails or times out
    """
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            response = client.get(url)
    except httpx.TransportError as exc:
        logger.error("Failed to fetch %s: %s", url, exc)
        raise

    if response.is_error:
        logger.warning("Fetched %s with status %d", url, response.status_code)

    content_type = response.headers.get("content-type")
    file_name = f"{unique_id()}.{extension_for(content_type)}"
    logger.debug("Fetched %s (%d bytes, %s) as %s", url, len(response.content), content_type, file_name)
    return DownloadedFile(file_name=file_name, content_type=content_type, content=response.content)
