from typing import List, Optional, NamedTuple
import asyncio
from blackmate.config.settings import config
from blackmate.models.internal import DownloadIntent, MediaMetadata


class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes


class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: Optional[float] = None,
        capture_stderr: bool = True
    ) -> CompletedProcess:
        """
        Run subprocess with optional timeout and proper cleanup.
        Prevents process leaks and ensures consistent error handling.
        """
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE if capture_stderr else asyncio.subprocess.DEVNULL,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr if capture_stderr else b""
            )

        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise


class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    @staticmethod
    def _base() -> List[str]:
        cmd = [
            config.ytdlp.binary,
            '--no-playlist',
            '--socket-timeout', str(config.download.socket_timeout),
            '--retries', str(config.download.retries),
        ]

        if config.ytdlp.js_runtime:
            cmd.extend(['--js-runtimes', config.ytdlp.js_runtime])

        return cmd

    @staticmethod
    def build_version_command() -> List[str]:
        return [config.ytdlp.binary, '--version']

    @staticmethod
    def build_info_command(url: str) -> List[str]:
        """Build command for fetching video info"""
        cmd = YTDLPCommandBuilder._base()
        cmd.extend(['--dump-json', '--', url])
        return cmd

    @staticmethod
    def build_download_command(
        intent: DownloadIntent,
        metadata: MediaMetadata,
        output_template: str
    ) -> List[str]:
        """Build command for downloading to a file"""
        cmd = YTDLPCommandBuilder._base()
        cmd.extend(['-f', metadata.format_str])

        if intent.audio_only:
            cmd.extend(['--extract-audio', '--audio-format', metadata.ext])
        else:
            cmd.extend([
                '--merge-output-format', metadata.ext,
                '--remux-video', metadata.ext,
            ])

        cmd.extend([
            '--newline',
            '--no-progress',
            '--embed-thumbnail',
            '--embed-metadata',
            # Keep mtime at creation time; retention is measured from it
            '--no-mtime',
            '-o', output_template,
            '--', intent.url,
        ])

        return cmd


async def detect_version(timeout: float = 10.0) -> Optional[str]:
    """yt-dlp version string, or None when the binary is unusable"""
    try:
        result = await SubprocessExecutor.run(YTDLPCommandBuilder.build_version_command(), timeout=timeout)
    except (OSError, asyncio.TimeoutError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.decode(errors="ignore").strip() or None
