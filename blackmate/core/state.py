import asyncio
from dataclasses import dataclass, field
from typing import Optional

from blackmate.config.settings import config
from blackmate.infra.concurrency import DownloadGate
from blackmate.services.janitor import ExpiryScheduler


@dataclass
class RuntimeState:
    """Centralized runtime state"""
    download_gate: DownloadGate = field(
        default_factory=lambda: DownloadGate(config.download.max_concurrent)
    )
    expiry: ExpiryScheduler = field(default_factory=ExpiryScheduler)
    sweep_task: Optional[asyncio.Task] = None
    ytdlp_version: str = "unknown"


state = RuntimeState()
