"""
Error classes raised by the service layer.

Each class carries the HTTP status code it maps to; the exception handlers
registered in main.py turn them into {"error": message} responses.
"""

from typing import Optional


class ShortenerError(Exception):
    """
    Base service error.

    Attributes:
        status_code: HTTP status code (default: 500)
        message: Error message (default: "Internal server error")
    """

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class InvalidInput(ShortenerError):
    """400 malformed or missing URL."""

    status_code = 400
    message = "Valid URL required (must start with http/https)"


class NotFound(ShortenerError):
    """404 no record for the given short code."""

    status_code = 404
    message = "URL not found"


class CodeGenerationExhausted(ShortenerError):
    """500 every candidate short code collided."""

    status_code = 500
    message = "Failed to generate unique code"


class InternalError(ShortenerError):
    """500 unexpected store failure."""

    status_code = 500
    message = "Internal server error"
