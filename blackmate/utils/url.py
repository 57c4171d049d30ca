from typing import Iterable
from urllib.parse import urlparse


def has_marker(url: str, markers: Iterable[str]) -> bool:
    return any(marker in url for marker in markers)


def safe_url_for_log(url: str) -> str:
    """Strip query and fragment before logging"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "invalid_url"
    if not parsed.scheme or not parsed.netloc:
        return url.split("?", 1)[0][:200]
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
