import os
from urllib.parse import quote

import aiofiles
from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from blackmate.config.settings import config
from blackmate.core.errors import NotFoundError
from blackmate.core.logging import log_info
from blackmate.models.response import ErrorResponse
from blackmate.services.format import content_type_for

CHUNK_SIZE = 4 * 1024 * 1024

router = APIRouter()


def resolve_output_file(file_name: str) -> str:
    """Path of `file_name` inside the output directory; names with path parts never resolve"""
    if not file_name or file_name in (".", "..") or os.path.basename(file_name) != file_name:
        raise NotFoundError("File not found")
    return os.path.join(config.storage.path, file_name)


def content_disposition(file_name: str) -> str:
    if file_name.isascii():
        return f'attachment; filename="{file_name}"'
    fallback = file_name.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


@router.get("/download/{file_name}", responses={404: {"model": ErrorResponse}})
async def serve_file(request: Request, file_name: str):
    """Stream a previously produced file as an attachment"""
    file_path = resolve_output_file(file_name)

    try:
        f = await aiofiles.open(file_path, "rb")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        raise NotFoundError("File not found")

    # Size from the open handle; the janitor may unlink the path meanwhile
    file_size = os.fstat(f.fileno()).st_size
    log_info(request, f"Serving {file_name} ({file_size} bytes)")

    async def generate():
        try:
            while True:
                chunk = await f.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            await f.close()

    headers = {
        "Content-Disposition": content_disposition(file_name),
        "Content-Length": str(file_size),
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-cache",
    }

    return StreamingResponse(
        generate(),
        media_type=content_type_for(file_name),
        headers=headers
    )
