import asyncio
import logging
import os
from collections import deque
from contextlib import suppress
from datetime import datetime
from typing import Optional

from blackmate.core.errors import DownloadError, FileStatError, StorageError
from blackmate.infra.concurrency import DownloadGate
from blackmate.models.internal import DownloadedFile, DownloadIntent, MediaMetadata
from blackmate.services.format import FormatDecision
from blackmate.services.ytdlp import YTDLPCommandBuilder
from blackmate.utils.filename import sanitize_filename
from blackmate.utils.hash import hash_stable
from blackmate.utils.url import safe_url_for_log

logger = logging.getLogger(__name__)

STDERR_MAX_LINES = 50
STDERR_CHUNK_SIZE = 64 * 1024
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"


def ensure_output_dir(path: str) -> str:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create output directory {path}: {e}")
        raise StorageError("Failed to create output directory")
    return path


class DownloadService:
    """Runs yt-dlp downloads into the output directory"""

    @staticmethod
    def build_stem(title: str, url: str, now: Optional[datetime] = None) -> str:
        """`{sanitizedTitle}_{timestamp}`; untitled media falls back to a URL hash"""
        now = now or datetime.now()
        name = sanitize_filename(title) or f"video_{hash_stable(url)[:8]}"
        return f"{name}_{now.strftime(TIMESTAMP_FORMAT)}"

    @staticmethod
    async def download(
        intent: DownloadIntent,
        title: str,
        output_dir: str,
        gate: DownloadGate
    ) -> DownloadedFile:
        """
        Download `intent.url` into `output_dir` while holding one gate slot.
        Raises DownloadError when yt-dlp fails and FileStatError when it
        reports success without leaving the expected file behind.
        """
        metadata = FormatDecision.get_metadata(intent)
        stem = DownloadService.build_stem(title, intent.url)
        file_name = f"{stem}.{metadata.ext}"
        file_path = os.path.join(output_dir, file_name)
        # yt-dlp treats % as a template field marker
        output_template = os.path.join(output_dir, stem).replace("%", "%%") + ".%(ext)s"

        cmd = YTDLPCommandBuilder.build_download_command(intent, metadata, output_template)
        safe_url = safe_url_for_log(intent.url)

        async with gate.slot():
            logger.info(f"Starting {intent.media_type.value} download of {safe_url} -> {file_name}")
            await DownloadService._run(cmd, metadata)

        try:
            size = os.stat(file_path).st_size
        except OSError as e:
            logger.error(f"Unable to get file info for {file_path}: {e}")
            raise FileStatError("Unable to get file info")

        logger.info(f"Download finished: {file_name} ({size / 1024 / 1024:.1f} MB)")
        return DownloadedFile(path=file_path, file_name=file_name, size=size)

    @staticmethod
    async def _run(cmd: list, metadata: MediaMetadata) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            logger.error(f"Failed to start download: {e}")
            raise DownloadError(f"Failed to start download: {e}")

        stderr_lines = deque(maxlen=STDERR_MAX_LINES)

        async def drain_stderr():
            """Drain stderr to prevent buffer deadlock"""
            while True:
                chunk = await process.stderr.read(STDERR_CHUNK_SIZE)
                if not chunk:
                    break
                stderr_lines.extend(chunk.decode(errors="ignore").splitlines())

        stderr_task = asyncio.create_task(drain_stderr())

        try:
            returncode = await process.wait()
            await stderr_task
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise
        finally:
            if not stderr_task.done():
                stderr_task.cancel()
                with suppress(asyncio.CancelledError):
                    await stderr_task

        if returncode != 0:
            error_summary = "\n".join(line for line in stderr_lines if line)
            logger.error(f"yt-dlp failed ({returncode}): {error_summary[-500:]}")
            raise DownloadError(f"Failed to download {metadata.ext}: yt-dlp exited with status {returncode}")
