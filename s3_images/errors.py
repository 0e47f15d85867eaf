"""
Exceptions raised by s3-images.
"""

from typing import Iterable, Optional


class S3ImagesError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(S3ImagesError):
    """Required credentials are missing from the configuration."""

    def __init__(self, missing: Iterable[str]):
        self.missing = tuple(missing)
        super().__init__(
            f"Missing required settings: {', '.join(self.missing)}. "
            f"Define them in the environment or in a .env file."
        )


class DecodeError(S3ImagesError, ValueError):
    """The payload is not valid base64."""


class InvalidNameError(S3ImagesError, ValueError):
    """The object name cannot be used as a key."""


class UploadError(S3ImagesError):
    """The storage service rejected or failed a put-object call.

    The SDK exception is kept in ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, key: str, cause: BaseException):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to upload {key}: {cause}")

    @property
    def error_code(self) -> Optional[str]:
        """S3 error code (e.g. ``NoSuchBucket``) when the service answered."""
        response = getattr(self.cause, "response", None)
        if not isinstance(response, dict):
            return None
        return response.get("Error", {}).get("Code")

    @property
    def status_code(self) -> Optional[int]:
        response = getattr(self.cause, "response", None)
        if not isinstance(response, dict):
            return None
        return response.get("ResponseMetadata", {}).get("HTTPStatusCode")

    @property
    def is_throttling(self) -> bool:
        return self.status_code in (429, 503) or self.error_code in ("SlowDown", "Throttling")


class ImageProcessingError(S3ImagesError):
    """Base class for errors of the background helper."""


class ColorParseError(ImageProcessingError, ValueError):
    """The background color string could not be parsed."""


class ImageDecodeError(ImageProcessingError):
    """The decoded payload is not an image Pillow can open."""


class ImageEncodeError(ImageProcessingError):
    """The composed banner could not be encoded."""
