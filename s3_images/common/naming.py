"""
Object key policy: use the caller's name, or generate one.
"""

import uuid
from dataclasses import dataclass
from typing import Optional, Union

from s3_images.configuration import DEFAULT_EXTENSION
from s3_images.errors import InvalidNameError


@dataclass(frozen=True)
class Named:
    """Store under exactly this key."""

    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidNameError("Object name must be a non-empty string")


@dataclass(frozen=True)
class Generated:
    """Store under a random key.

    Args:
        extension: Forced extension; inferred from the payload when None
    """

    extension: Optional[str] = None


ObjectName = Union[Named, Generated]


def as_object_name(name) -> ObjectName:
    """Normalize None / str / Named / Generated to an ObjectName."""
    if name is None:
        return Generated()
    if isinstance(name, (Named, Generated)):
        return name
    if isinstance(name, str):
        return Named(name)
    raise TypeError(f"Unsupported object name: {name!r}")


def generate_key(extension: Optional[str] = None) -> str:
    """Random key of the form "<uuid4 hex>.<extension>"."""
    extension = (extension or DEFAULT_EXTENSION).lstrip(".")
    return f"{uuid.uuid4().hex}.{extension}"


def resolve_object_key(name: ObjectName, inferred_extension: Optional[str] = None) -> str:
    """Final key for an upload.

    Named keys are returned verbatim; generated keys use the forced
    extension, else the inferred one, else DEFAULT_EXTENSION.
    """
    if isinstance(name, Named):
        return name.name
    return generate_key(name.extension or inferred_extension)
