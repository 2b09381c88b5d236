import os
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables with defaults.

    Credentials for the WooCommerce REST API and the WordPress media endpoint
    have no defaults; the platform client refuses to start without them.
    """

    # WooCommerce REST API
    WOOCOMMERCE_URL = os.getenv("WOOCOMMERCE_URL", "")
    WOOCOMMERCE_CONSUMER_KEY = os.getenv("WOOCOMMERCE_CONSUMER_KEY", "")
    WOOCOMMERCE_CONSUMER_SECRET = os.getenv("WOOCOMMERCE_CONSUMER_SECRET", "")
    WOOCOMMERCE_API_VERSION = os.getenv("WOOCOMMERCE_API_VERSION", "wc/v3")

    # WordPress media uploads (application password)
    WP_API_USER = os.getenv("WP_API_USER", "").strip()
    WP_API_APP_PASSWORD = os.getenv("WP_API_APP_PASSWORD", "").strip()

    # Scraping
    CUSTOM_SITE_BASE_URL = os.getenv("CUSTOM_SITE_BASE_URL", "")
    USER_AGENT = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )
    REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))
    MEDIA_UPLOAD_TIMEOUT = int(os.getenv("MEDIA_UPLOAD_TIMEOUT", "120"))
    REQUEST_DELAY = float(os.getenv("REQUEST_DELAY", "0"))

    # Payload shaping
    FEATURE_SUMMARY_LIMIT = int(os.getenv("FEATURE_SUMMARY_LIMIT", "5"))
    DESCRIPTION_MAX_LENGTH = int(os.getenv("DESCRIPTION_MAX_LENGTH", "700"))
    SHORT_DESCRIPTION_MAX_LENGTH = int(os.getenv("SHORT_DESCRIPTION_MAX_LENGTH", "200"))

    # Image post-processing
    PROCESS_IMAGES = _env_bool("PROCESS_IMAGES")
    WATERMARK_WIDTH = int(os.getenv("WATERMARK_WIDTH", "120"))
    WATERMARK_HEIGHT = int(os.getenv("WATERMARK_HEIGHT", "50"))
    WATERMARK_MARGIN = int(os.getenv("WATERMARK_MARGIN", "10"))
    WATERMARK_SCALE_X = float(os.getenv("WATERMARK_SCALE_X", "2"))
    WATERMARK_SCALE_Y = float(os.getenv("WATERMARK_SCALE_Y", "5"))
    WATERMARK_FILL_COLOR = os.getenv("WATERMARK_FILL_COLOR", "#FFFFFF")
    WATERMARK_BLUR = float(os.getenv("WATERMARK_BLUR", "0"))

    @property
    def API_BASE_URL(self) -> str:
        """Root of the WooCommerce REST API, e.g. https://shop/wp-json/wc/v3."""
        return f"{self.WOOCOMMERCE_URL.rstrip('/')}/wp-json/{self.WOOCOMMERCE_API_VERSION}"

    @property
    def MEDIA_URL(self) -> str:
        """WordPress media library endpoint."""
        return f"{self.WOOCOMMERCE_URL.rstrip('/')}/wp-json/wp/v2/media"

    @property
    def WATERMARK_OPTIONS(self) -> dict:
        return {
            "width": self.WATERMARK_WIDTH,
            "height": self.WATERMARK_HEIGHT,
            "margin": self.WATERMARK_MARGIN,
            "scale_x": self.WATERMARK_SCALE_X,
            "scale_y": self.WATERMARK_SCALE_Y,
            "fill_color": self.WATERMARK_FILL_COLOR,
            "blur": self.WATERMARK_BLUR,
        }


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

