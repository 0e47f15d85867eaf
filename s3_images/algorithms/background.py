"""
Banner generation: a logo centred on a solid colour background.
"""

import logging
from io import BytesIO
from typing import Tuple

from PIL import Image, ImageColor, UnidentifiedImageError

from s3_images.common.codec import decode_base64, encode_base64
from s3_images.configuration import (
    BACKGROUND_IMAGE_HEIGHT,
    BACKGROUND_IMAGE_WIDTH,
    BACKGROUND_JPEG_QUALITY,
    LOGO_ALPHA_THRESHOLD,
    MAX_LOGO_HEIGHT,
    MAX_LOGO_WIDTH,
)
from s3_images.errors import ColorParseError, ImageDecodeError, ImageEncodeError

logger = logging.getLogger(__name__)


def parse_color(color: str) -> Tuple[int, int, int]:
    """Parse "#ff0", "#ffffff", "red", "rgb(1, 2, 3)" into an RGB tuple."""
    try:
        rgb = ImageColor.getrgb(color)
    except (ValueError, AttributeError) as e:
        raise ColorParseError(f"Invalid color {color!r}: {e}") from e
    return rgb[:3]


def fit_within(size: Tuple[int, int], max_size: Tuple[int, int]) -> Tuple[int, int]:
    """Largest size with the same aspect ratio that fits in max_size."""
    width, height = size
    max_width, max_height = max_size
    scale = min(max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def load_logo(payload: str) -> Image.Image:
    image = decode_base64(payload)
    try:
        logo = Image.open(BytesIO(image.data))
        logo.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Payload is not a readable image: {e}") from e
    return logo.convert("RGBA")


def compose_banner(logo: Image.Image, rgb: Tuple[int, int, int]) -> Image.Image:
    """Centre the logo on a BACKGROUND_IMAGE_WIDTH x BACKGROUND_IMAGE_HEIGHT canvas.

    Logo pixels with alpha below LOGO_ALPHA_THRESHOLD are painted with the
    background colour.
    """
    logo = logo.resize(
        fit_within(logo.size, (MAX_LOGO_WIDTH, MAX_LOGO_HEIGHT)),
        Image.Resampling.NEAREST,
    )
    logo_width, logo_height = logo.size

    left = BACKGROUND_IMAGE_WIDTH // 2 - logo_width // 2
    top = BACKGROUND_IMAGE_HEIGHT // 2 - logo_height // 2

    banner = Image.new("RGB", (BACKGROUND_IMAGE_WIDTH, BACKGROUND_IMAGE_HEIGHT), rgb)
    mask = logo.getchannel("A").point(lambda alpha: 255 if alpha >= LOGO_ALPHA_THRESHOLD else 0)
    banner.paste(logo.convert("RGB"), (left, top), mask)
    return banner


def change_background(payload: str, color: str) -> str:
    """Put a base64 logo on a coloured banner.

    Args:
        payload: Base64 image, optionally with a data-URI header
        color: Background colour, any format Pillow's ImageColor accepts

    Returns:
        The banner as a "data:image/jpeg;base64," payload

    Raises:
        ColorParseError: If the colour cannot be parsed
        DecodeError: If the payload is not valid base64
        ImageDecodeError: If the decoded bytes are not an image
        ImageEncodeError: If the banner cannot be written as JPEG
    """
    rgb = parse_color(color)
    banner = compose_banner(load_logo(payload), rgb)

    buffer = BytesIO()
    try:
        banner.save(buffer, format="JPEG", quality=BACKGROUND_JPEG_QUALITY)
    except (OSError, ValueError) as e:
        raise ImageEncodeError(f"Failed to encode banner: {e}") from e

    logger.debug(f"Composed {BACKGROUND_IMAGE_WIDTH}x{BACKGROUND_IMAGE_HEIGHT} banner on {color}")
    return encode_base64(buffer.getvalue(), "image/jpeg")
