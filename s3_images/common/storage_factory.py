"""
Factory for opened storage handles.
"""

import logging
from typing import Optional

# Quiet the SDK loggers, request-level chatter is of no use here
logging.getLogger('botocore').setLevel(logging.WARNING)
logging.getLogger('botocore.credentials').setLevel(logging.WARNING)
logging.getLogger('boto3').setLevel(logging.WARNING)
logging.getLogger('aioboto3').setLevel(logging.WARNING)
logging.getLogger('aiobotocore').setLevel(logging.WARNING)

from s3_images.configuration import StorageConfig
from s3_images.systems.base import ObjectStorageSystem

logger = logging.getLogger(__name__)


async def create_connection(config: Optional[StorageConfig] = None) -> ObjectStorageSystem:
    """Create an opened storage handle.

    Credentials are not checked against the service here; a bad key only
    fails on the first request made through the handle.

    Args:
        config: Storage settings. When None they are read from the
            environment (and a .env file) via StorageConfig.from_env().

    Returns:
        ObjectStorageSystem ready for concurrent uploads

    Raises:
        ConfigurationError: If a required credential is missing or empty
    """
    if config is None:
        config = StorageConfig.from_env()

    storage_system = ObjectStorageSystem(config)
    await storage_system.open()

    logger.info(f"Connected storage handle for bucket {config.bucket_name}")
    return storage_system
