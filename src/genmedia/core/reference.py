"""
Reference image loading.

Turns a local image file into the JPEG data URI the adapters accept as a
reference image. Oversized images are scaled down before encoding.
"""

import base64
import io
import math
import time
from pathlib import Path

from PIL import Image

from genmedia.core.encoding import make_data_uri
from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import ImageProcessingError, ValidationError

logger = get_logger(__name__)

SUPPORTED_FORMATS = {"PNG", "JPEG", "JPG", "WEBP", "BMP", "GIF"}
DEFAULT_MAX_PIXELS = 2_000_000  # 2 megapixels
JPEG_QUALITY = 95


def validate_image_format(image_path: Path) -> None:
    """
    Validate that an image file exists and has a supported extension.

    Raises:
        ValidationError: If format is not supported
        FileNotFoundError: If file doesn't exist
    """
    if not image_path.exists():
        raise FileNotFoundError(f"Image file not found: {image_path}")
    suffix = image_path.suffix.upper().lstrip(".")
    if suffix not in SUPPORTED_FORMATS:
        raise ValidationError(
            f"Unsupported image format: {suffix}. "
            f"Supported formats: {', '.join(sorted(SUPPORTED_FORMATS))}",
            field="image_format",
        )


def _downscale(image: Image.Image, max_pixels: int) -> Image.Image:
    w, h = image.size
    if w * h <= max_pixels:
        return image
    scale = math.sqrt(max_pixels / (w * h))
    new_size = (max(1, int(w * scale)), max(1, int(h * scale)))
    logger.debug("Resizing reference image from %dx%d to %dx%d", w, h, *new_size)
    return image.resize(new_size, Image.Resampling.LANCZOS)


def _to_rgb(image: Image.Image) -> Image.Image:
    """Flatten transparency onto white; JPEG has no alpha channel."""
    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA", "P"):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        return background
    return image.convert("RGB")


def load_reference_image(
    source: str | Path, max_pixels: int = DEFAULT_MAX_PIXELS
) -> str:
    """
    Load an image file and return it as a ``data:image/jpeg;base64,`` URI.

    Args:
        source: Path to the image file
        max_pixels: Images larger than this are scaled down, keeping aspect ratio

    Returns:
        JPEG data URI

    Raises:
        ValidationError: Unsupported file extension
        FileNotFoundError: Missing file
        ImageProcessingError: File cannot be decoded or encoded
    """
    path = Path(source)
    validate_image_format(path)
    start_time = time.time()
    try:
        image = Image.open(path)
        image.load()
    except Exception as e:
        raise ImageProcessingError(f"Failed to load image: {str(e)}", image_path=str(path)) from e

    image = _to_rgb(_downscale(image, max_pixels))
    try:
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    except Exception as e:
        raise ImageProcessingError(f"Failed to encode image: {str(e)}", image_path=str(path)) from e
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    w, h = image.size
    logger.info(
        "Processed reference image in %.2fs dimensions=%dx%d", time.time() - start_time, w, h
    )
    return make_data_uri("image/jpeg", encoded)


__all__ = ["DEFAULT_MAX_PIXELS", "SUPPORTED_FORMATS", "load_reference_image", "validate_image_format"]
