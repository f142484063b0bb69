"""
Custom exception handlers and error types
"""

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging
import traceback
from typing import Optional

logger = logging.getLogger(__name__)


class AdStudioError(Exception):
    """Base exception for the service"""

    status_code: int = 500

    def __init__(self, message: str, error_code: "Optional[str]" = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InvalidImageUrlError(AdStudioError):
    """Raised when an image URL is not an absolute http(s) URL"""

    status_code = 400

    def __init__(self, message: str = "Invalid URL format", url: Optional[str] = None):
        super().__init__(message, "INVALID_IMAGE_URL")
        self.url = url


class ImageFetchError(AdStudioError):
    """Raised when an image cannot be downloaded

    Args:
        message (str): Error message
        url (Optional[str]): Source URL
        status (Optional[int]): Upstream HTTP status (if available)
    """

    status_code = 502

    def __init__(
        self, message: str, url: Optional[str] = None, status: Optional[int] = None
    ):
        super().__init__(message, "IMAGE_FETCH_ERROR")
        self.url = url
        self.status = status


class UnsupportedImageError(AdStudioError):
    """Raised when image bytes cannot be converted to a supported format"""

    status_code = 415

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message, "UNSUPPORTED_IMAGE")
        self.mime_type = mime_type


class ScrapeError(AdStudioError):
    """Raised when the scraping provider fails"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, "SCRAPE_ERROR")
        self.url = url


class ProductNotFoundError(ScrapeError):
    """Raised when the scraping provider returns no items"""

    status_code = 404

    def __init__(self, message: str = "No products found for the given URL", url: Optional[str] = None):
        super().__init__(message, url)
        self.error_code = "PRODUCT_NOT_FOUND"


class UnsupportedProductUrlError(ScrapeError):
    """Raised for product URLs outside the supported marketplaces"""

    status_code = 400

    def __init__(
        self,
        message: str = "Unsupported URL. Only Amazon product URLs are supported",
        url: Optional[str] = None,
    ):
        super().__init__(message, url)
        self.error_code = "UNSUPPORTED_URL"


class ConfigurationError(AdStudioError):
    """Exception raised when configuration is invalid"""

    status_code = 503

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, "CONFIGURATION_ERROR")
        self.config_key = config_key


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "error": "Validation error",
                "details": "Invalid request data",
                "errors": jsonable_errors(exc),
            }
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that are not JSON serializable
    return [
        {k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()
    ]


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format"""
    logger.warning(f"HTTP exception: {exc.status_code} - {exc.detail}")

    # Ensure detail is in our standard format
    if isinstance(exc.detail, dict):
        detail = exc.detail
    else:
        detail = {"error": "HTTP Error", "details": str(exc.detail)}

    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


async def adstudio_exception_handler(request: Request, exc: AdStudioError):
    """Handle service errors"""
    logger.error(f"Service error [{exc.error_code}]: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": {
                "error": "Request failed",
                "details": exc.message,
                "error_code": exc.error_code,
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.error(f"Unexpected error: {type(exc).__name__}: {str(exc)}")
    logger.error(f"Traceback: {traceback.format_exc()}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": {
                "error": "Internal server error",
                "details": "An unexpected error occurred",
            }
        },
    )
