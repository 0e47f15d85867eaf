"""
Common utilities: payload codec, key naming, connection factory.
"""

from .codec import DecodedImage, decode_base64, encode_base64, encode_file_to_base64
from .naming import Generated, Named, resolve_object_key
from .storage_factory import create_connection

__all__ = [
    'DecodedImage',
    'decode_base64',
    'encode_base64',
    'encode_file_to_base64',
    'Generated',
    'Named',
    'resolve_object_key',
    'create_connection',
]
