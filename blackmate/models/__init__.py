from .internal import DownloadedFile, DownloadIntent, MediaMetadata, MediaType
from .request import DownloadRequest
from .response import DownloadResult, ErrorResponse, VideoInfo

__all__ = [
    "DownloadedFile",
    "DownloadIntent",
    "DownloadRequest",
    "DownloadResult",
    "ErrorResponse",
    "MediaMetadata",
    "MediaType",
    "VideoInfo",
]
