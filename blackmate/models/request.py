from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blackmate.models.internal import DownloadIntent, MediaType


class DownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., min_length=1, description="Video URL")
    media_type: MediaType = Field(MediaType.VIDEO, alias="type", description="video or audio")
    quality: Optional[str] = Field(None, description="Maximum video height, e.g. 720")

    @field_validator("url")
    @classmethod
    def strip_url(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("URL must not be empty")
        return v

    @field_validator("quality", mode="before")
    @classmethod
    def validate_quality(cls, v):
        """Quality is a plain height; empty means no ceiling"""
        if v is None:
            return None
        v = str(v).strip()
        if not v:
            return None
        if not v.isdigit() or not v.isascii():
            raise ValueError("Quality must be a number such as 720")
        return v

    def to_intent(self) -> DownloadIntent:
        """Convert to download intent"""
        return DownloadIntent(
            url=self.url,
            media_type=self.media_type,
            quality=self.quality
        )
