from enum import Enum, auto
from typing import Iterable, Optional

from blackmate.config.settings import config
from blackmate.utils.url import has_marker


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    UNSUPPORTED = auto()
    INVALID = auto()


class UrlValidator:
    """
    Validate submitted URLs without throwing exceptions.
    Returns result enum for separation of concerns.
    """

    @staticmethod
    def validate_url(url: str, markers: Optional[Iterable[str]] = None) -> UrlValidationResult:
        """A URL is supported when it contains one of the configured platform markers"""
        if not url or any(ch.isspace() for ch in url) or url.startswith("-"):
            return UrlValidationResult.INVALID

        markers = config.download.allowed_url_markers if markers is None else markers
        if not has_marker(url, markers):
            return UrlValidationResult.UNSUPPORTED

        return UrlValidationResult.OK
