import asyncio
from contextlib import suppress

from rich.console import Console

from blackmate.config.settings import config
from blackmate.core.state import state
from blackmate.infra.concurrency import DownloadGate
from blackmate.services.download import ensure_output_dir
from blackmate.services.janitor import periodic_sweep
from blackmate.services.ytdlp import detect_version

console = Console()


async def init_runtime() -> None:
    """Detect the yt-dlp version, prepare the output directory and start the periodic sweep"""
    version = await detect_version()
    if version:
        state.ytdlp_version = version
        console.print(f"[green]✓ yt-dlp {version}[/green]")
    else:
        state.ytdlp_version = "unknown"
        console.print(f"[yellow]⚠ yt-dlp not usable at '{config.ytdlp.binary}'[/yellow]")

    if state.download_gate.capacity != config.download.max_concurrent:
        state.download_gate = DownloadGate(config.download.max_concurrent)

    output_dir = ensure_output_dir(config.storage.path)
    console.print(
        f"[green]✓ Output directory {output_dir} "
        f"(retention {config.cleanup.retention_seconds}s, "
        f"{config.download.max_concurrent} download slot(s))[/green]"
    )

    interval = config.cleanup.sweep_interval_seconds
    if interval > 0:
        state.sweep_task = asyncio.create_task(
            periodic_sweep(
                output_dir,
                config.cleanup.retention_seconds,
                interval,
                is_busy=lambda: state.download_gate.active > 0
            )
        )


async def close_runtime() -> None:
    """Stop the periodic sweep and drop pending one-shot deletions"""
    if state.sweep_task:
        state.sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await state.sweep_task
        state.sweep_task = None

    pending = len(state.expiry)
    state.expiry.cancel_all()
    console.print(f"[dim]✓ Janitor stopped ({pending} scheduled deletion(s) left to the next sweep)[/dim]")
