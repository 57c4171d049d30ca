import asyncio
from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, Request

from blackmate.config.settings import config
from blackmate.core.errors import BlackMateError, ValidationError
from blackmate.core.logging import log_error, log_info
from blackmate.core.security import UrlValidator, UrlValidationResult
from blackmate.core.state import state
from blackmate.models.request import DownloadRequest
from blackmate.models.response import DownloadResult, ErrorResponse
from blackmate.services.download import DownloadService, ensure_output_dir
from blackmate.services.info import VideoInfoService
from blackmate.services.janitor import sweep_expired
from blackmate.utils.url import safe_url_for_log

router = APIRouter()


def build_download_url(request: Request, file_name: str) -> str:
    base_url = config.server.public_base_url or str(request.base_url)
    return f"{base_url.rstrip('/')}/download/{quote(file_name)}"


async def schedule_expiry(path: str) -> None:
    state.expiry.schedule(path, config.cleanup.retention_seconds)


@router.post(
    "/generate-url",
    response_model=DownloadResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def generate_download_url(
    request: Request,
    download_request: DownloadRequest,
    background_tasks: BackgroundTasks
):
    """Fetch info, download and transcode synchronously, return the file descriptor"""

    validation_result = UrlValidator.validate_url(download_request.url)
    if validation_result == UrlValidationResult.INVALID:
        raise ValidationError("Invalid input")
    if validation_result == UrlValidationResult.UNSUPPORTED:
        raise ValidationError("Invalid YouTube URL")

    intent = download_request.to_intent()
    log_info(request, f"Generating {intent.media_type.value} for {safe_url_for_log(intent.url)}")

    try:
        video_info = await VideoInfoService.fetch(intent.url)
        output_dir = ensure_output_dir(config.storage.path)

        # yt-dlp keeps partial files in the output directory while it runs
        if state.download_gate.active == 0:
            removed = await asyncio.to_thread(
                sweep_expired, output_dir, config.cleanup.retention_seconds
            )
            if removed:
                log_info(request, f"Swept {len(removed)} expired file(s)")

        downloaded = await DownloadService.download(
            intent, video_info.title, output_dir, state.download_gate
        )
    except BlackMateError as e:
        log_error(request, f"Download pipeline failed: {e.message}")
        raise

    # Runs after the response has been sent
    background_tasks.add_task(schedule_expiry, downloaded.path)

    log_info(request, f"Ready: {downloaded.file_name} ({downloaded.size} bytes)")
    return DownloadResult(
        size=downloaded.size,
        url=build_download_url(request, downloaded.file_name),
        actual_file_name=downloaded.file_name,
        video_info=video_info
    )
