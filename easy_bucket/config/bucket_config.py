"""
Connection settings for an S3-compatible bucket endpoint.

Environment Variables:
    OSS_EXTERNAL_ENDPOINT: Public endpoint URL (e.g. https://oss.example.com)
    OSS_REGION: Region name
    OSS_ACCESS_KEY: Access key
    OSS_ACCESS_SECRET: Secret key
    OSS_FORCE_PATH_STYLE: Use path-style addressing for SDK requests (default: true)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

_REQUIRED_ENV = {
    "endpoint": "OSS_EXTERNAL_ENDPOINT",
    "region": "OSS_REGION",
    "access_key": "OSS_ACCESS_KEY",
    "secret_key": "OSS_ACCESS_SECRET",
}


@dataclass(frozen=True)
class BucketConfig:
    endpoint: str
    region: str
    access_key: str
    secret_key: str
    force_path_style: bool = True

    def __repr__(self) -> str:
        return (
            f"BucketConfig(endpoint={self.endpoint!r}, region={self.region!r}, "
            f"access_key={self.access_key!r}, secret_key='***', "
            f"force_path_style={self.force_path_style!r})"
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "BucketConfig":
        """
        Build a config from environment variables.

        Args:
            env: Mapping to read from. Defaults to os.environ after loading .env.

        Returns:
            BucketConfig

        Raises:
            ValueError: If a required variable is missing or empty
        """
        if env is None:
            load_dotenv()
            env = os.environ

        missing = [name for name in _REQUIRED_ENV.values() if not env.get(name)]
        if missing:
            raise ValueError(f"Missing bucket configuration: {', '.join(missing)}")

        values = {field: env[name] for field, name in _REQUIRED_ENV.items()}
        force_path_style = env.get("OSS_FORCE_PATH_STYLE", "true").lower() == "true"
        return cls(force_path_style=force_path_style, **values)
