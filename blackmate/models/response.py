from pydantic import BaseModel


class VideoInfo(BaseModel):
    """Video information derived from the yt-dlp info query"""
    title: str
    duration: str
    thumbnail: str = ""
    description: str = ""


class DownloadResult(BaseModel):
    """Body of a successful /generate-url response"""
    size: int
    url: str
    actual_file_name: str
    video_info: VideoInfo


class ErrorResponse(BaseModel):
    error: str
