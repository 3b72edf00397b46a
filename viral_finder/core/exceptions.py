"""Custom exceptions for the viral video finder"""

from typing import Optional


class ViralFinderError(Exception):
    """Base exception for the viral video finder"""
    pass


class ConfigurationError(ViralFinderError):
    """Exception raised for configuration errors (e.g. a missing API key)"""
    pass


class YouTubeAPIError(ViralFinderError):
    """
    Exception raised for YouTube Data API errors.

    Covers both non-success HTTP responses and transport failures.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint


class FetchInProgressError(ViralFinderError):
    """Exception raised when a comment fetch for the same video is already running"""
    pass


class ExportError(ViralFinderError):
    """Exception raised when there is nothing to export"""
    pass
