from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MediaType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


class DownloadIntent(BaseModel):
    """Internal download intent (separated from HTTP concerns)"""
    url: str
    media_type: MediaType = MediaType.VIDEO
    quality: Optional[str] = None

    @property
    def audio_only(self) -> bool:
        return self.media_type == MediaType.AUDIO


class MediaMetadata(BaseModel):
    """Media metadata"""
    format_str: str
    ext: str


class DownloadedFile(BaseModel):
    """A file produced by yt-dlp in the output directory"""
    path: str
    file_name: str
    size: int
