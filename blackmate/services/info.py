import asyncio
import json
import logging

from blackmate.config.settings import config
from blackmate.core.errors import MetadataFetchError
from blackmate.models.response import VideoInfo
from blackmate.services.ytdlp import YTDLPCommandBuilder, SubprocessExecutor
from blackmate.utils.url import safe_url_for_log

logger = logging.getLogger(__name__)

STDERR_TAIL_CHARS = 200


def format_duration(seconds: int) -> str:
    """HH:MM:SS from one hour up, MM:SS below"""
    seconds = max(int(seconds), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def _text(value) -> str:
    return value if isinstance(value, str) else ""


class VideoInfoService:
    """Video info fetching service"""

    @staticmethod
    def parse(raw: bytes) -> VideoInfo:
        """Parse a single --dump-json object into VideoInfo"""
        try:
            info = json.loads(raw.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as e:
            raise MetadataFetchError(f"error parsing video info: {e}")

        if not isinstance(info, dict):
            raise MetadataFetchError("error parsing video info: expected a JSON object")

        try:
            duration = int(info.get("duration") or 0)
        except (TypeError, ValueError):
            raise MetadataFetchError(f"error parsing video info: bad duration {info.get('duration')!r}")

        return VideoInfo(
            title=_text(info.get("title")),
            duration=format_duration(duration),
            thumbnail=_text(info.get("thumbnail")),
            description=_text(info.get("description"))
        )

    @staticmethod
    async def fetch(url: str) -> VideoInfo:
        """Run yt-dlp in info-only mode and build VideoInfo"""
        cmd = YTDLPCommandBuilder.build_info_command(url)
        logger.info(f"Fetching info for {safe_url_for_log(url)}")

        try:
            result = await SubprocessExecutor.run(cmd, timeout=config.download.info_timeout_seconds)
        except asyncio.TimeoutError:
            raise MetadataFetchError("error fetching video info: yt-dlp timed out")
        except OSError as e:
            raise MetadataFetchError(f"error fetching video info: {e}")

        if result.returncode != 0:
            error_msg = result.stderr.decode(errors="ignore").strip()
            logger.error(f"yt-dlp info failed ({result.returncode}): {error_msg[-STDERR_TAIL_CHARS:]}")
            raise MetadataFetchError(
                f"error fetching video info: yt-dlp exited with status {result.returncode}"
            )

        return VideoInfoService.parse(result.stdout)
