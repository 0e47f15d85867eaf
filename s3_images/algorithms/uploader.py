"""
Upload of base64-encoded images.
"""

import asyncio
import logging
import mimetypes
from typing import Optional, Union

from s3_images.common.codec import DecodedImage, decode_base64
from s3_images.common.naming import Generated, Named, as_object_name, resolve_object_key
from s3_images.configuration import THREADED_DECODE_THRESHOLD_BYTES, StorageConfig
from s3_images.systems.base import ObjectStorageSystem

logger = logging.getLogger(__name__)


async def decode_payload(payload: str) -> DecodedImage:
    """Decode a payload, off the event loop when it is large."""
    if isinstance(payload, str) and len(payload) > THREADED_DECODE_THRESHOLD_BYTES:
        return await asyncio.to_thread(decode_base64, payload)
    return decode_base64(payload)


def content_type_for(key: str, image: DecodedImage) -> Optional[str]:
    """Declared mime type of the payload, else a guess from the key."""
    if image.mime_type:
        return image.mime_type
    guessed, _ = mimetypes.guess_type(key)
    return guessed


async def upload_image_in_base64(
    client: ObjectStorageSystem,
    payload: str,
    name: Union[str, Named, Generated, None] = None,
) -> str:
    """Decode a base64 image and store it in the client's bucket.

    Args:
        client: Handle returned by create_connection()
        payload: Base64 string, optionally with a "data:<mime>;base64," header
        name: Key to store under, used verbatim. None (or Generated()) picks
            a random key whose extension is inferred from the payload.

    Returns:
        The object key the image was stored under

    Raises:
        DecodeError: If the payload is not valid base64 (nothing is sent)
        InvalidNameError: If the name is empty
        UploadError: If the put-object call fails
    """
    image = await decode_payload(payload)
    object_name = as_object_name(name)

    key = resolve_object_key(object_name, image.extension)
    await client.put_object(key, image.data, content_type=content_type_for(key, image))

    logger.info(f"Uploaded {key} ({len(image.data)} bytes) to {client.bucket_name}")
    return key


def image_url(target: Union[ObjectStorageSystem, StorageConfig], key: str) -> str:
    """Public URL of an uploaded key, from a handle or a bare config."""
    return target.object_url(key)
