"""
image_normalizer.py — shrink and re-encode user photos before upload.

Phone photos are routinely 4000px+ and several MB; sending them as-is makes
the generation call slow and prone to 500s. Every image is therefore:
  1. decoded with Pillow (EXIF orientation applied)
  2. downscaled so neither edge exceeds MAX_IMAGE_DIM (aspect ratio kept)
  3. re-encoded as JPEG at a fixed quality, whatever the source format

Failures are terminal for the request and are never retried.
"""
from __future__ import annotations

import base64
import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from models import TransportImagePart

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIM = 1024
DEFAULT_QUALITY = 80        # 0.8 on a 0–1 scale
TRANSPORT_MIME  = "image/jpeg"


class ImageProcessingError(Exception):
    """Base for image failures; carries the message shown to the user."""

    user_message = "Failed to process the image. Please try a different photo."


class ImageDecodeError(ImageProcessingError):
    """The bytes could not be read as an image."""


class EncodeContextError(ImageProcessingError):
    """The image decoded but could not be converted / re-encoded."""


def scaled_size(width: int, height: int, max_dim: int = DEFAULT_MAX_DIM) -> tuple[int, int]:
    """
    Return (width, height) bounded by max_dim on both axes.
    The longer edge becomes max_dim; the other is scaled proportionally.
    """
    if width <= max_dim and height <= max_dim:
        return width, height
    if width > height:
        return max_dim, max(1, round(height * max_dim / width))
    return max(1, round(width * max_dim / height)), max_dim


def normalize_image(
    image_bytes: bytes,
    max_dim: int = DEFAULT_MAX_DIM,
    quality: int = DEFAULT_QUALITY,
) -> TransportImagePart:
    """Decode, bound and JPEG-encode image_bytes for the generation call."""
    if not image_bytes:
        raise ImageDecodeError("empty image payload")

    try:
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
    except (
        UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError,
    ) as exc:
        raise ImageDecodeError(f"could not decode image: {exc}") from exc

    try:
        img = ImageOps.exif_transpose(img)
        src_w, src_h = img.size
        width, height = scaled_size(src_w, src_h, max_dim)
        if (width, height) != (src_w, src_h):
            img = img.resize((width, height), Image.Resampling.LANCZOS)

        # JPEG has no alpha: flatten on white, like drawing onto a blank canvas
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            canvas = Image.new("RGB", rgba.size, (255, 255, 255))
            canvas.paste(rgba, mask=rgba.getchannel("A"))
            img = canvas
        elif img.mode != "RGB":
            img = img.convert("RGB")

        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        raise EncodeContextError(f"could not re-encode image: {exc}") from exc

    payload = buf.getvalue()
    logger.info(
        "Normalized image: %dx%d → %dx%d, %d → %d bytes",
        src_w, src_h, width, height, len(image_bytes), len(payload),
    )
    return TransportImagePart(
        encoded_data=base64.b64encode(payload).decode("ascii"),
        mime_type=TRANSPORT_MIME,
    )
