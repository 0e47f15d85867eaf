"""
Async object storage client handle built on aioboto3.
"""

import logging
from typing import Optional

import aioboto3
from aiohttp.client_exceptions import ClientError as HTTPClientError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3_images.configuration import (
    ALL_USERS_READ_GRANT,
    CONNECT_TIMEOUT_SECONDS,
    MAX_POOL_CONNECTIONS,
    READ_TIMEOUT_SECONDS,
    TRANSPORT_MAX_ATTEMPTS,
    StorageConfig,
)
from s3_images.errors import UploadError

logger = logging.getLogger(__name__)

# Failures of a request that the SDK reports back to us
SDK_ERRORS = (ClientError, BotoCoreError, HTTPClientError)


class ObjectStorageSystem:
    """Reusable handle on one bucket of an S3-compatible service.

    The handle is safe to share between concurrent tasks: the underlying
    aiobotocore client pools its own connections.
    """

    def __init__(self, config: StorageConfig):
        self.config = config
        self.endpoint = config.endpoint_url
        self.bucket_name = config.bucket_name

        self._config = self._create_config()

        self.session = aioboto3.Session(**config.credentials())
        self.client = None

        logger.debug(
            f"Initialized storage handle for bucket {self.bucket_name} "
            f"(region={config.region}, endpoint={self.endpoint or 'default'})"
        )

    def _create_config(self) -> Config:
        """botocore client config shared by every request of this handle."""
        return Config(
            max_pool_connections=MAX_POOL_CONNECTIONS,
            connect_timeout=CONNECT_TIMEOUT_SECONDS,
            read_timeout=READ_TIMEOUT_SECONDS,
            retries={
                'max_attempts': TRANSPORT_MAX_ATTEMPTS,
                'mode': 'standard',
            },
            # Custom endpoints (R2, MinIO) expect path-style addressing
            s3={'addressing_style': 'path' if self.endpoint else 'virtual'},
        )

    @property
    def is_open(self) -> bool:
        return self.client is not None

    async def open(self) -> "ObjectStorageSystem":
        """Create the SDK client. No request is sent."""
        if self.client is None:
            self.client = await self.session.client(
                "s3",
                endpoint_url=self.endpoint,
                config=self._config,
            ).__aenter__()
        return self

    async def close(self):
        """Release the SDK client and its connection pool."""
        if self.client is not None:
            client, self.client = self.client, None
            await client.__aexit__(None, None, None)

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def put_object(self, key: str, body: bytes, content_type: Optional[str] = None):
        """Store ``body`` under ``key`` with a single PutObject call.

        Raises:
            UploadError: If the service or the transport reports a failure
        """
        if not self.client:
            raise RuntimeError("Storage client not initialized. Use create_connection() or async with.")

        params = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": body,
        }
        if content_type:
            params["ContentType"] = content_type
        if self.config.public_read:
            params["GrantRead"] = ALL_USERS_READ_GRANT

        try:
            await self.client.put_object(**params)
        except SDK_ERRORS as e:
            raise UploadError(key, e) from e

        logger.debug(f"Stored {key} ({len(body)} bytes) in {self.bucket_name}")

    async def verify_connection(self) -> bool:
        """Check that the bucket is reachable with these credentials."""
        if not self.client:
            logger.debug("Client not initialized. Use create_connection() or async with.")
            return False

        try:
            await self.client.head_bucket(Bucket=self.bucket_name)
        except SDK_ERRORS as e:
            logger.debug(f"HeadBucket failed for {self.bucket_name}: {e}")
            return False

        logger.info(f"✓ Successfully connected to bucket: {self.bucket_name}")
        logger.info(f"✓ Endpoint: {self.endpoint or 'default for ' + self.config.region}")
        return True

    def object_url(self, key: str) -> str:
        return self.config.object_url(key)
