import asyncio
import logging
import os
import time
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def remove_quietly(path: str) -> bool:
    """
    Delete a file, logging failures instead of raising.
    A file that is already gone counts as removed.
    """
    try:
        os.remove(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning(f"Failed to delete file {path}: {e}")
        return False
    logger.info(f"Deleted expired file: {path}")
    return True


def sweep_expired(directory: str, max_age: float, now: Optional[float] = None) -> List[str]:
    """
    Remove every regular file in `directory` whose mtime is older than `max_age` seconds.
    Returns the names of the removed files.
    """
    now = time.time() if now is None else now
    removed: List[str] = []

    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        return removed
    except OSError as e:
        logger.warning(f"Failed to read directory {directory}: {e}")
        return removed

    for entry in entries:
        try:
            if not entry.is_file(follow_symlinks=False):
                continue
            mtime = entry.stat(follow_symlinks=False).st_mtime
        except OSError as e:
            logger.warning(f"Failed to get file info for {entry.path}: {e}")
            continue

        if now - mtime > max_age and remove_quietly(entry.path):
            removed.append(entry.name)

    return removed


class ExpiryScheduler:
    """
    One-shot deletion timers keyed by file path.
    Timers live on the running event loop; `expire` is the timer callback
    and may also be called directly.
    """

    def __init__(self):
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def schedule(self, path: str, delay: float) -> None:
        """Delete `path` after `delay` seconds, replacing any earlier timer for it"""
        self.cancel(path)
        loop = asyncio.get_running_loop()
        self._timers[path] = loop.call_later(delay, self.expire, path)
        logger.debug(f"Scheduled deletion of {path} in {delay:.0f}s")

    def cancel(self, path: str) -> bool:
        handle = self._timers.pop(path, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    def pending(self) -> Dict[str, float]:
        """Scheduled paths mapped to their loop-time deadline"""
        return {path: handle.when() for path, handle in self._timers.items()}

    def expire(self, path: str) -> None:
        handle = self._timers.pop(path, None)
        if handle is not None:
            handle.cancel()
        remove_quietly(path)

    def __contains__(self, path: str) -> bool:
        return path in self._timers

    def __len__(self) -> int:
        return len(self._timers)


async def periodic_sweep(
    directory: str,
    max_age: float,
    interval: float,
    is_busy: Optional[Callable[[], bool]] = None
) -> None:
    """
    Sweep once immediately, then every `interval` seconds until cancelled.
    A tick is skipped while `is_busy()` is true, so the partial files of a
    long-running yt-dlp process are never swept from under it.
    """
    while True:
        if is_busy is not None and is_busy():
            logger.debug("Download in progress, skipping periodic sweep")
        else:
            removed = await asyncio.to_thread(sweep_expired, directory, max_age)
            if removed:
                logger.info(f"Periodic sweep removed {len(removed)} file(s)")
        await asyncio.sleep(interval)
