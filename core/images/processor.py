import io
import logging
import random
import re
import time
from typing import Dict, Optional

import requests
from PIL import Image, ImageDraw, ImageFilter

from core.errors import ImageProcessingError

logger = logging.getLogger("images.processor")

DEFAULT_WATERMARK_OPTIONS = {
    # measured size of the watermark box
    "width": 120,
    "height": 50,
    "margin": 10,
    # cover grows this many times to the right and upwards
    "scale_x": 2,
    "scale_y": 5,
    "fill_color": "#FFFFFF",
    # 0 disables blurring
    "blur": 0,
}


def download_image(image_url: str, session: Optional[requests.Session] = None, timeout: int = 30) -> bytes:
    """Download an image and return its raw bytes.

    Raises:
        ImageProcessingError: if the request fails.
    """
    logger.info("Downloading image: %s", image_url)
    http = session or requests
    try:
        response = http.get(image_url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise ImageProcessingError(f"Failed to download image {image_url}: {e}") from e
    return response.content


def cover_rect(image_width: int, image_height: int, options: Dict) -> tuple:
    """(left, top, right, bottom) of the bottom-left anchored cover box."""
    margin = options["margin"]
    width = min(image_width - margin, round(options["width"] * options["scale_x"]))
    height = min(image_height - margin, round(options["height"] * options["scale_y"]))

    left = max(0, margin)
    top = max(0, image_height - height - margin)
    width = min(width, image_width - left)
    height = min(height, image_height - top)
    return left, top, left + width, top + height


def remove_watermark(image_bytes: bytes, options: Optional[Dict] = None) -> bytes:
    """Paint over the bottom-left watermark with a solid box.

    Any failure returns the original bytes unchanged.
    """
    cfg = dict(DEFAULT_WATERMARK_OPTIONS)
    cfg.update(options or {})

    try:
        image = Image.open(io.BytesIO(image_bytes))
        image_format = image.format or "PNG"
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        logger.warning("Could not read image, skipping watermark removal: %s", e)
        return image_bytes

    try:
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "transparency" in image.info else "RGB")

        rect = cover_rect(image.width, image.height, cfg)
        if rect[2] <= rect[0] or rect[3] <= rect[1]:
            logger.warning("Image too small for watermark cover, leaving it as is")
            return image_bytes

        ImageDraw.Draw(image).rectangle(rect, fill=cfg["fill_color"])
        if cfg["blur"] and cfg["blur"] > 0:
            image = image.filter(ImageFilter.GaussianBlur(cfg["blur"]))

        if image_format.upper() in ("JPEG", "JPG") and image.mode == "RGBA":
            image = image.convert("RGB")
        output = io.BytesIO()
        image.save(output, format=image_format)
    except (OSError, ValueError) as e:
        logger.error("Watermark removal failed: %s", e)
        return image_bytes

    logger.info(
        "Applied cover rect at (%d, %d) size %dx%d",
        rect[0], rect[1], rect[2] - rect[0], rect[3] - rect[1],
    )
    return output.getvalue()


def generate_image_filename(image_url: str) -> str:
    """Safe, unique file name derived from the last URL path segment."""
    filename = image_url.split("/")[-1].split("?")[0]
    filename = re.sub(r"[^a-zA-Z0-9._-]", "-", filename)
    filename = re.sub(r"-+", "-", filename).lower()
    return f"product-{int(time.time() * 1000)}-{random.randint(0, 999)}-{filename}"


def process_product_image(
    image_url: str,
    watermark_options: Optional[Dict] = None,
    session: Optional[requests.Session] = None,
) -> Dict:
    """Download one image and cover its watermark."""
    original = download_image(image_url, session=session)
    return {
        "buffer": remove_watermark(original, watermark_options),
        "filename": generate_image_filename(image_url),
        "original_url": image_url,
    }
