from .errors import (
    BlackMateError,
    DownloadError,
    FileStatError,
    MetadataFetchError,
    NotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "BlackMateError",
    "DownloadError",
    "FileStatError",
    "MetadataFetchError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
