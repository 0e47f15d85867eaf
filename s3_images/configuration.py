"""
Configuration constants and storage settings for s3-images.

This module contains:
- Names of the environment variables read at the entry point
- The StorageConfig dataclass the connection factory consumes
- SDK client parameters (timeouts, pool size, transport retries)
- Geometry of the generated background banners
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from urllib.parse import quote

from s3_images.errors import ConfigurationError

# =============================================================================
# ENVIRONMENT
# =============================================================================

# Required credentials, no defaults
ENV_ACCESS_KEY_ID: str = "AWS_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY: str = "AWS_SECRET_ACCESS_KEY"
ENV_REGION: str = "AWS_REGION"
REQUIRED_ENV_VARS: Tuple[str, ...] = (ENV_ACCESS_KEY_ID, ENV_SECRET_ACCESS_KEY, ENV_REGION)

# Optional settings
ENV_BUCKET_NAME: str = "S3_BUCKET_NAME"
ENV_ENDPOINT: str = "S3_ENDPOINT"
ENV_PUBLIC_READ: str = "S3_PUBLIC_READ"
ENV_PUBLIC_BASE_URL: str = "S3_PUBLIC_BASE_URL"

TRUTHY_VALUES = ("1", "true", "yes", "on")

# =============================================================================
# BUCKET AND OBJECT DEFAULTS
# =============================================================================

DEFAULT_BUCKET_NAME: str = "images"

# Grantee used for public-read uploads
ALL_USERS_READ_GRANT: str = "uri=http://acs.amazonaws.com/groups/global/AllUsers"

# Extension for generated names when nothing better can be inferred
DEFAULT_EXTENSION: str = "bin"

# Payloads above this size are decoded in a worker thread
THREADED_DECODE_THRESHOLD_BYTES: int = 256 * 1024

# =============================================================================
# SDK CLIENT PARAMETERS
# =============================================================================

MAX_POOL_CONNECTIONS: int = 50
CONNECT_TIMEOUT_SECONDS: int = 5
READ_TIMEOUT_SECONDS: int = 60
TRANSPORT_MAX_ATTEMPTS: int = 3  # botocore's own retries, none are added on top

# =============================================================================
# BACKGROUND BANNER
# =============================================================================

BACKGROUND_IMAGE_WIDTH: int = 1400
BACKGROUND_IMAGE_HEIGHT: int = 400
MAX_LOGO_WIDTH: int = 1000
MAX_LOGO_HEIGHT: int = 300
LOGO_ALPHA_THRESHOLD: int = 200  # Logo pixels below this alpha show the background
BACKGROUND_JPEG_QUALITY: int = 90


@dataclass(frozen=True)
class StorageConfig:
    """Credentials and target of an object storage connection."""

    access_key_id: str
    secret_access_key: str
    region: str
    bucket_name: str = DEFAULT_BUCKET_NAME
    endpoint_url: Optional[str] = None
    public_read: bool = False
    public_base_url: Optional[str] = None

    def __post_init__(self):
        missing = [
            env_name
            for env_name, value in (
                (ENV_ACCESS_KEY_ID, self.access_key_id),
                (ENV_SECRET_ACCESS_KEY, self.secret_access_key),
                (ENV_REGION, self.region),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)
        if not self.bucket_name:
            raise ConfigurationError([ENV_BUCKET_NAME])

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_dotenv_file: bool = True) -> "StorageConfig":
        """Build a config from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            load_dotenv_file: Load a .env file into os.environ first. Ignored
                when an explicit mapping is given.

        Returns:
            StorageConfig

        Raises:
            ConfigurationError: If any required variable is missing or empty
        """
        if environ is None:
            if load_dotenv_file:
                from dotenv import load_dotenv

                load_dotenv()
            environ = os.environ

        missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
        if missing:
            raise ConfigurationError(missing)

        return cls(
            access_key_id=environ[ENV_ACCESS_KEY_ID],
            secret_access_key=environ[ENV_SECRET_ACCESS_KEY],
            region=environ[ENV_REGION],
            bucket_name=environ.get(ENV_BUCKET_NAME) or DEFAULT_BUCKET_NAME,
            endpoint_url=environ.get(ENV_ENDPOINT) or None,
            public_read=environ.get(ENV_PUBLIC_READ, "").strip().lower() in TRUTHY_VALUES,
            public_base_url=environ.get(ENV_PUBLIC_BASE_URL) or None,
        )

    def credentials(self) -> dict:
        """Session keyword arguments for aioboto3."""
        return {
            "aws_access_key_id": self.access_key_id,
            "aws_secret_access_key": self.secret_access_key,
            "region_name": self.region,
        }

    def object_url(self, key: str) -> str:
        """Public URL of an object of this bucket."""
        return build_object_url(
            key,
            self.bucket_name,
            region=self.region,
            endpoint_url=self.endpoint_url,
            public_base_url=self.public_base_url,
        )

    def __repr__(self) -> str:
        return (
            f"StorageConfig(access_key_id={self.access_key_id!r}, secret_access_key='***', "
            f"region={self.region!r}, bucket_name={self.bucket_name!r}, "
            f"endpoint_url={self.endpoint_url!r}, public_read={self.public_read!r}, "
            f"public_base_url={self.public_base_url!r})"
        )


def build_object_url(
    key: str,
    bucket_name: str,
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    public_base_url: Optional[str] = None,
) -> str:
    """Public URL of an object; needs no credentials.

    Raises:
        ConfigurationError: If the AWS form is needed and no region is known
    """
    quoted_key = quote(key)
    if public_base_url:
        return f"{public_base_url.rstrip('/')}/{quoted_key}"
    if endpoint_url:
        return f"{endpoint_url.rstrip('/')}/{bucket_name}/{quoted_key}"
    if not region:
        raise ConfigurationError([ENV_REGION])
    return f"https://{bucket_name}.s3.{region}.amazonaws.com/{quoted_key}"


def object_url_from_env(
    key: str,
    environ: Optional[Mapping[str, str]] = None,
    bucket_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> str:
    """Public URL of an object using only the non-secret settings.

    Explicit arguments win over the environment.
    """
    if environ is None:
        from dotenv import load_dotenv

        load_dotenv()
        environ = os.environ

    return build_object_url(
        key,
        bucket_name or environ.get(ENV_BUCKET_NAME) or DEFAULT_BUCKET_NAME,
        region=environ.get(ENV_REGION) or None,
        endpoint_url=endpoint_url or environ.get(ENV_ENDPOINT) or None,
        public_base_url=environ.get(ENV_PUBLIC_BASE_URL) or None,
    )
