"""
Application configuration using Pydantic Settings
"""

from typing import List, Optional, Union
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # API Settings
    api_title: str = "AdStudio Media API"
    api_description: str = (
        "Product image resolution and product data service for AI ad generation"
    )
    api_version: str = "1.0.0"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # CORS Settings
    cors_origins: Union[List[str], str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["GET", "POST", "DELETE", "OPTIONS"]
    cors_allow_headers: list = ["*"]

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string to list.

        Args:
            v: Can be either a list of origins or a comma-separated string.
               If "*" is provided, allows all origins.

        Returns:
            List[str]: List of allowed origins

        Example:
            >>> parse_cors_origins("http://localhost:3000,http://localhost:8080")
            ['http://localhost:3000', 'http://localhost:8080']
            >>> parse_cors_origins("*")
            ['*']
        """
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Logging Settings
    log_level: str = "INFO"
    log_format: str = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    log_file: str = "data/app.log"

    # Image Probe Settings
    image_probe_timeout: float = 10.0  # seconds per attempt
    image_probe_max_attempts: int = 3
    image_probe_backoff_base: float = 1.0  # sleep = base * attempt
    image_probe_skip_loopback: bool = True
    image_probe_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )

    # Image Resolution Settings
    image_fallback_url: str = (
        "https://via.placeholder.com/400x400/cccccc/666666?text=Product+Image"
    )
    image_default_base_origin: str = "http://localhost:3000"
    # Prefer the validated original URL over the placeholder when the
    # pipeline errors out after validation
    image_lenient_original: bool = True
    image_resolve_timeout: Optional[float] = None

    # Image Proxy Settings (images.weserv.nl)
    image_proxy_base_url: str = "https://images.weserv.nl/"
    image_proxy_output: str = "jpg"
    image_proxy_quality: int = 80
    image_proxy_max_width: int = 800
    image_proxy_max_height: int = 800
    image_proxy_fit: str = "inside"

    # Image Inline Settings
    image_fetch_timeout: float = 30.0
    image_inline_jpeg_quality: int = 90
    image_inline_max_bytes: int = 20 * 1024 * 1024  # 20 MB

    # Cache Settings
    cache_default_ttl_seconds: int = 24 * 60 * 60  # 24 hours
    cache_key_prefix: str = "product_cache_"

    # Apify Settings
    apify_token: str = ""
    apify_base_url: str = "https://api.apify.com/v2"
    apify_actor_id: str = "junglee~free-amazon-product-scraper"
    apify_timeout: int = 300  # 5 minutes
    scrape_default_max_items: int = 100
    scrape_default_max_pages: int = 9999
    scrape_preload_batch_size: int = 3
    scrape_supported_domains: list = [
        "amazon.com",
        "amazon.co.uk",
        "amazon.ca",
        "amazon.de",
        "amazon.fr",
        "amazon.it",
        "amazon.es",
        "amazon.in",
        "amazon.com.au",
        "amazon.co.jp",
    ]

    # Security Settings
    rate_limit_calls: int = 60
    rate_limit_period: int = 60

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        # Allow unknown/legacy env vars without failing validation
        "extra": "ignore",
    }

    @property
    def proxy_params(self) -> dict:
        """Fixed output parameters appended to every proxy URL."""
        return {
            "output": self.image_proxy_output,
            "q": self.image_proxy_quality,
            "w": self.image_proxy_max_width,
            "h": self.image_proxy_max_height,
            "fit": self.image_proxy_fit,
        }


# Global settings instance
settings = Settings()
