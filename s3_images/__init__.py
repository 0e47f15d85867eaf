"""
s3-images: upload base64-encoded images to an S3-compatible bucket.
"""

from s3_images.algorithms.background import change_background
from s3_images.algorithms.uploader import image_url, upload_image_in_base64
from s3_images.common.naming import Generated, Named
from s3_images.common.storage_factory import create_connection
from s3_images.configuration import StorageConfig
from s3_images.errors import (
    ColorParseError,
    ConfigurationError,
    DecodeError,
    ImageDecodeError,
    ImageEncodeError,
    ImageProcessingError,
    InvalidNameError,
    S3ImagesError,
    UploadError,
)
from s3_images.systems.base import ObjectStorageSystem

__version__ = "0.1.0"

__all__ = [
    'create_connection',
    'upload_image_in_base64',
    'image_url',
    'change_background',
    'Named',
    'Generated',
    'StorageConfig',
    'ObjectStorageSystem',
    'S3ImagesError',
    'ConfigurationError',
    'DecodeError',
    'InvalidNameError',
    'UploadError',
    'ImageProcessingError',
    'ColorParseError',
    'ImageDecodeError',
    'ImageEncodeError',
]
