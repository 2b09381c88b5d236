import io

import pytest
import requests
from PIL import Image
from unittest.mock import MagicMock, patch

from core.errors import ImageProcessingError, PlatformConfigError
from core.images.processor import (
    DEFAULT_WATERMARK_OPTIONS,
    cover_rect,
    download_image,
    generate_image_filename,
    remove_watermark,
)
from core.images.uploader import (
    ensure_extension,
    process_and_upload_images,
    upload_buffer_to_wp_media,
)


def png_bytes(width=400, height=400, color=(255, 0, 0)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestCoverRect:
    def test_bottom_left_anchor(self):
        # 120x50 box scaled 2x5 -> 240x250, 10px margin
        assert cover_rect(400, 400, DEFAULT_WATERMARK_OPTIONS) == (10, 140, 250, 390)

    def test_clamped_to_small_images(self):
        left, top, right, bottom = cover_rect(100, 100, DEFAULT_WATERMARK_OPTIONS)
        assert left == 10
        assert top == 0
        assert right <= 100
        assert bottom <= 100


class TestRemoveWatermark:
    def test_paints_cover_box(self):
        result = remove_watermark(png_bytes())
        image = Image.open(io.BytesIO(result)).convert("RGB")
        assert image.getpixel((20, 380)) == (255, 255, 255)
        assert image.getpixel((300, 20)) == (255, 0, 0)

    def test_custom_fill_color(self):
        result = remove_watermark(png_bytes(), {"fill_color": "#000000"})
        image = Image.open(io.BytesIO(result)).convert("RGB")
        assert image.getpixel((20, 380)) == (0, 0, 0)

    def test_keeps_format(self):
        buffer = io.BytesIO()
        Image.new("RGB", (300, 300), (0, 0, 255)).save(buffer, format="JPEG")
        result = remove_watermark(buffer.getvalue())
        assert Image.open(io.BytesIO(result)).format == "JPEG"

    def test_unreadable_image_is_returned_unchanged(self):
        assert remove_watermark(b"not an image") == b"not an image"


class TestFilenames:
    def test_generate_image_filename(self):
        name = generate_image_filename("https://s.example.com/uploads/My Photo (1).JPG?ver=2")
        assert name.startswith("product-")
        assert name.endswith("-my-photo-1-.jpg")

    @pytest.mark.parametrize("filename, mime_type, expected", [
        ("photo.png", "image/jpeg", "photo.png"),
        ("photo", "image/png", "photo.png"),
        ("photo", "application/x-unknown", "photo"),
    ])
    def test_ensure_extension(self, filename, mime_type, expected):
        assert ensure_extension(filename, mime_type) == expected


class TestDownload:
    def test_download_error(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(ImageProcessingError):
            download_image("https://s.example.com/a.jpg", session=session)


class TestWpMediaUpload:
    def test_requires_credentials(self, settings):
        settings.WP_API_APP_PASSWORD = ""
        with pytest.raises(PlatformConfigError):
            upload_buffer_to_wp_media(b"x", "a.png", settings=settings)

    def test_uploads_multipart(self, settings):
        session = MagicMock()
        session.post.return_value = MagicMock(
            ok=True,
            json=lambda: {
                "id": 31,
                "source_url": "https://shop.example.com/wp-content/uploads/a.png",
                "title": {"rendered": "a.png"},
            },
        )
        result = upload_buffer_to_wp_media(b"data", "a", "image/png", settings=settings, session=session)

        assert result == {
            "id": 31,
            "source_url": "https://shop.example.com/wp-content/uploads/a.png",
            "filename": "a.png",
        }
        args, kwargs = session.post.call_args
        assert args[0] == "https://shop.example.com/wp-json/wp/v2/media"
        assert kwargs["files"]["file"] == ("a.png", b"data", "image/png")

    def test_rejected_upload(self, settings):
        session = MagicMock()
        session.post.return_value = MagicMock(ok=False, status_code=401, text="nope")
        with pytest.raises(ImageProcessingError, match="401"):
            upload_buffer_to_wp_media(b"data", "a.png", settings=settings, session=session)

    def test_failed_images_keep_original_url(self, settings):
        uploaded = {"id": 5, "source_url": "https://shop.example.com/new.png", "filename": "new.png"}
        processed = {"buffer": b"x", "filename": "f.png", "original_url": "u"}

        def fake_process(url, options=None, session=None):
            if "bad" in url:
                raise ImageProcessingError("download failed")
            return processed

        with patch("core.images.uploader.process_product_image", side_effect=fake_process), \
                patch("core.images.uploader.upload_buffer_to_wp_media", return_value=uploaded):
            results = process_and_upload_images(
                ["https://s.example.com/good.png", {"src": "https://s.example.com/bad.png"}],
                settings=settings,
            )

        assert results[0]["src"] == "https://shop.example.com/new.png"
        assert results[0]["id"] == 5
        assert results[1]["src"] == "https://s.example.com/bad.png"
        assert results[1]["id"] is None
        assert "download failed" in results[1]["error"]

    def test_media_without_source_url_keeps_original_url(self, settings):
        uploaded = {"id": 6, "source_url": None, "filename": "f.png"}
        processed = {"buffer": b"x", "filename": "f.png", "original_url": "u"}
        with patch("core.images.uploader.process_product_image", return_value=processed), \
                patch("core.images.uploader.upload_buffer_to_wp_media", return_value=uploaded):
            results = process_and_upload_images(["https://s.example.com/good.png"], settings=settings)

        assert results[0]["src"] == "https://s.example.com/good.png"
        assert results[0]["id"] == 6
