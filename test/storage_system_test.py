"""
Tests for the storage handle and the connection factory.
"""

import logging
import os
import unittest
from unittest.mock import ANY, AsyncMock, MagicMock, patch

from botocore.exceptions import ClientError, EndpointConnectionError

from s3_images.common.storage_factory import create_connection
from s3_images.configuration import ALL_USERS_READ_GRANT, StorageConfig
from s3_images.errors import ConfigurationError, UploadError
from s3_images.systems.base import ObjectStorageSystem


def make_config(**overrides) -> StorageConfig:
    settings = dict(access_key_id="AKIATEST", secret_access_key="secret", region="eu-west-1")
    settings.update(overrides)
    return StorageConfig(**settings)


def make_client_error(code: str, status: int) -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        "PutObject",
    )


class StorageTestCase(unittest.IsolatedAsyncioTestCase):
    """Patches aioboto3 so no test reaches the network."""

    def setUp(self):
        self.s3_client = MagicMock()
        self.s3_client.put_object = AsyncMock(return_value={"ETag": '"abc"'})
        self.s3_client.head_bucket = AsyncMock(return_value={})
        self.s3_client.__aexit__ = AsyncMock(return_value=None)

        client_context = MagicMock()
        client_context.__aenter__ = AsyncMock(return_value=self.s3_client)

        patcher = patch("s3_images.systems.base.aioboto3.Session")
        self.mock_session_class = patcher.start()
        self.addCleanup(patcher.stop)
        self.mock_session = self.mock_session_class.return_value
        self.mock_session.client.return_value = client_context


class TestCreateConnection(StorageTestCase):
    """Test the connection factory."""

    async def test_opens_handle_with_credentials(self):
        handle = await create_connection(make_config())

        self.assertIsInstance(handle, ObjectStorageSystem)
        self.assertTrue(handle.is_open)
        self.mock_session_class.assert_called_once_with(
            aws_access_key_id="AKIATEST",
            aws_secret_access_key="secret",
            region_name="eu-west-1",
        )
        self.mock_session.client.assert_called_once_with("s3", endpoint_url=None, config=ANY)
        # Construction sends no request
        self.s3_client.put_object.assert_not_awaited()
        self.s3_client.head_bucket.assert_not_awaited()

    async def test_custom_endpoint(self):
        await create_connection(make_config(endpoint_url="http://localhost:9000"))
        self.mock_session.client.assert_called_once_with(
            "s3", endpoint_url="http://localhost:9000", config=ANY
        )

    @patch("dotenv.load_dotenv")
    async def test_reads_environment_without_config(self, mock_load_dotenv):
        environ = {
            "AWS_ACCESS_KEY_ID": "AKIAENV",
            "AWS_SECRET_ACCESS_KEY": "secret",
            "AWS_REGION": "us-east-1",
            "S3_BUCKET_NAME": "from-env",
        }
        with patch.dict(os.environ, environ, clear=True):
            handle = await create_connection()
        self.assertEqual(handle.bucket_name, "from-env")
        self.assertEqual(handle.config.region, "us-east-1")

    @patch("dotenv.load_dotenv")
    async def test_missing_environment(self, mock_load_dotenv):
        """Missing credentials fail before any SDK session exists."""
        with patch.dict(os.environ, {"AWS_REGION": "us-east-1"}, clear=True):
            with self.assertRaises(ConfigurationError) as ctx:
                await create_connection()
        self.assertEqual(ctx.exception.missing, ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"))
        self.mock_session_class.assert_not_called()


class TestObjectStorageSystem(StorageTestCase):
    """Test put-object, verification and lifecycle of the handle."""

    async def test_put_object(self):
        handle = await create_connection(make_config(bucket_name="logos"))
        await handle.put_object("a.png", b"data", content_type="image/png")

        self.s3_client.put_object.assert_awaited_once_with(
            Bucket="logos", Key="a.png", Body=b"data", ContentType="image/png"
        )

    async def test_put_object_public_read(self):
        handle = await create_connection(make_config(public_read=True))
        await handle.put_object("a.bin", b"data")

        self.s3_client.put_object.assert_awaited_once_with(
            Bucket="images", Key="a.bin", Body=b"data", GrantRead=ALL_USERS_READ_GRANT
        )

    async def test_put_object_client_error(self):
        """Service errors are wrapped with their cause."""
        error = make_client_error("NoSuchBucket", 404)
        self.s3_client.put_object.side_effect = error
        handle = await create_connection(make_config())

        with self.assertRaises(UploadError) as ctx:
            await handle.put_object("a.png", b"data")

        self.assertIs(ctx.exception.cause, error)
        self.assertIs(ctx.exception.__cause__, error)
        self.assertEqual(ctx.exception.key, "a.png")
        self.assertEqual(ctx.exception.error_code, "NoSuchBucket")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertFalse(ctx.exception.is_throttling)

    async def test_put_object_throttled(self):
        self.s3_client.put_object.side_effect = make_client_error("SlowDown", 503)
        handle = await create_connection(make_config())

        with self.assertRaises(UploadError) as ctx:
            await handle.put_object("a.png", b"data")
        self.assertTrue(ctx.exception.is_throttling)

    async def test_put_object_transport_error(self):
        error = EndpointConnectionError(endpoint_url="https://example.invalid")
        self.s3_client.put_object.side_effect = error
        handle = await create_connection(make_config())

        with self.assertRaises(UploadError) as ctx:
            await handle.put_object("a.png", b"data")
        self.assertIs(ctx.exception.cause, error)
        self.assertIsNone(ctx.exception.error_code)
        self.assertIsNone(ctx.exception.status_code)

    async def test_put_object_requires_open_handle(self):
        handle = ObjectStorageSystem(make_config())
        with self.assertRaises(RuntimeError):
            await handle.put_object("a.png", b"data")

    async def test_close(self):
        handle = await create_connection(make_config())
        await handle.close()
        self.assertFalse(handle.is_open)
        self.s3_client.__aexit__.assert_awaited_once()

        # Closing twice is harmless
        await handle.close()
        self.s3_client.__aexit__.assert_awaited_once()

    async def test_async_context_manager(self):
        async with ObjectStorageSystem(make_config()) as handle:
            self.assertTrue(handle.is_open)
        self.assertFalse(handle.is_open)

    async def test_verify_connection(self):
        handle = await create_connection(make_config(bucket_name="logos"))
        self.assertTrue(await handle.verify_connection())
        self.s3_client.head_bucket.assert_awaited_once_with(Bucket="logos")

    async def test_verify_connection_failure(self):
        self.s3_client.head_bucket.side_effect = make_client_error("403", 403)
        handle = await create_connection(make_config())
        with self.assertLogs("s3_images.systems.base", level="DEBUG") as logs:
            self.assertFalse(await handle.verify_connection())
        # Reporting the failure is left to the caller
        self.assertTrue(all(record.levelno < logging.ERROR for record in logs.records))

    async def test_verify_connection_not_open(self):
        handle = ObjectStorageSystem(make_config())
        with self.assertLogs("s3_images.systems.base", level="DEBUG"):
            self.assertFalse(await handle.verify_connection())


if __name__ == '__main__':
    unittest.main()
