import logging
import mimetypes
import os
from typing import Dict, List, Optional, Sequence, Union

import requests
from requests.auth import HTTPBasicAuth

from config.settings import Settings, get_settings
from core.errors import ImageProcessingError, PlatformConfigError
from core.images.processor import process_product_image

logger = logging.getLogger("images.uploader")


def ensure_extension(filename: str, mime_type: str) -> str:
    _, ext = os.path.splitext(filename)
    if len(ext) > 1:
        return filename
    guessed = mimetypes.guess_extension(mime_type) or ""
    return filename + guessed


def upload_buffer_to_wp_media(
    buffer: bytes,
    filename: str,
    mime_type: Optional[str] = None,
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> Dict:
    """Upload raw image bytes to the WordPress media library.

    Returns ``{"id", "source_url", "filename"}`` for the new attachment.

    Raises:
        PlatformConfigError: if the WordPress application password is not set.
        ImageProcessingError: if the upload is rejected.
    """
    settings = settings or get_settings()
    if not settings.WOOCOMMERCE_URL or not settings.WP_API_USER or not settings.WP_API_APP_PASSWORD:
        raise PlatformConfigError(
            "Missing WOOCOMMERCE_URL or WP_API_USER/WP_API_APP_PASSWORD in .env"
        )

    content_type = mime_type or mimetypes.guess_type(filename)[0] or "image/jpeg"
    filename = ensure_extension(filename, content_type)

    http = session or requests
    try:
        response = http.post(
            settings.MEDIA_URL,
            files={"file": (filename, buffer, content_type)},
            data={"title": filename},
            auth=HTTPBasicAuth(settings.WP_API_USER, settings.WP_API_APP_PASSWORD),
            timeout=settings.MEDIA_UPLOAD_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        raise ImageProcessingError(f"WP Media upload failed: {e}") from e

    if not response.ok:
        raise ImageProcessingError(
            f"WP Media upload failed ({response.status_code}): {response.text}"
        )

    try:
        body = response.json()
    except ValueError as e:
        raise ImageProcessingError(f"WP Media upload returned invalid JSON: {e}") from e
    title = body.get("title") or {}
    return {
        "id": body.get("id"),
        "source_url": body.get("source_url"),
        "filename": title.get("rendered") or filename,
    }


def process_and_upload_images(
    images: Sequence[Union[str, Dict]],
    watermark_options: Optional[Dict] = None,
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> List[Dict]:
    """Download, cover the watermark and re-host each image, one at a time.

    An image that fails keeps its original URL so the product is never left
    without it.
    """
    settings = settings or get_settings()
    results = []

    for index, image in enumerate(images, 1):
        image_url = image if isinstance(image, str) else image.get("src", "")
        try:
            processed = process_product_image(image_url, watermark_options, session)
            uploaded = upload_buffer_to_wp_media(
                processed["buffer"],
                processed["filename"],
                settings=settings,
                session=session,
            )
        except (ImageProcessingError, PlatformConfigError) as e:
            logger.error("Failed processing/uploading image (%s): %s", image_url, e)
            results.append({
                "id": None,
                "src": image_url,
                "filename": image_url.split("/")[-1],
                "original_url": image_url,
                "error": str(e),
            })
            continue

        results.append({
            "id": uploaded["id"],
            "src": uploaded["source_url"] or image_url,
            "filename": uploaded["filename"],
            "original_url": image_url,
        })
        logger.info("Uploaded image %d/%d: %s", index, len(images), results[-1]["src"])

    return results
