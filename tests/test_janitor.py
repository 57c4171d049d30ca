import asyncio
import os
import time

import pytest

from blackmate.services.janitor import ExpiryScheduler, periodic_sweep, remove_quietly, sweep_expired

RETENTION = 300


def make_file(directory, name, age_seconds, now):
    path = directory / name
    path.write_bytes(b"data")
    mtime = now - age_seconds
    os.utime(path, (mtime, mtime))
    return path


def test_sweep_removes_only_expired_files(tmp_path):
    now = time.time()
    old = make_file(tmp_path, "old.mp4", 6 * 60, now)
    fresh = make_file(tmp_path, "fresh.mp3", 4 * 60, now)

    removed = sweep_expired(str(tmp_path), RETENTION, now=now)

    assert removed == ["old.mp4"]
    assert not old.exists()
    assert fresh.exists()


def test_sweep_skips_directories(tmp_path):
    now = time.time()
    sub = tmp_path / "nested"
    sub.mkdir()
    os.utime(sub, (now - 3600, now - 3600))

    assert sweep_expired(str(tmp_path), RETENTION, now=now) == []
    assert sub.exists()


def test_sweep_of_missing_directory_is_noop(tmp_path):
    assert sweep_expired(str(tmp_path / "absent"), RETENTION) == []


def test_remove_quietly_treats_missing_file_as_removed(tmp_path):
    assert remove_quietly(str(tmp_path / "gone.mp4")) is True


@pytest.mark.asyncio
async def test_schedule_registers_timer_without_deleting(tmp_path):
    path = tmp_path / "a.mp4"
    path.write_bytes(b"x")
    scheduler = ExpiryScheduler()
    loop = asyncio.get_running_loop()

    scheduler.schedule(str(path), RETENTION)

    assert str(path) in scheduler
    assert scheduler.pending()[str(path)] == pytest.approx(loop.time() + RETENTION, abs=5)
    assert path.exists()
    scheduler.cancel_all()


@pytest.mark.asyncio
async def test_expire_deletes_and_unregisters(tmp_path):
    path = tmp_path / "a.mp3"
    path.write_bytes(b"x")
    scheduler = ExpiryScheduler()
    scheduler.schedule(str(path), RETENTION)

    scheduler.expire(str(path))

    assert not path.exists()
    assert len(scheduler) == 0


@pytest.mark.asyncio
async def test_expire_after_sweep_already_deleted(tmp_path):
    path = tmp_path / "a.mp3"
    path.write_bytes(b"x")
    scheduler = ExpiryScheduler()
    scheduler.schedule(str(path), RETENTION)
    path.unlink()

    scheduler.expire(str(path))

    assert len(scheduler) == 0


@pytest.mark.asyncio
async def test_cancel_keeps_file(tmp_path):
    path = tmp_path / "a.mp4"
    path.write_bytes(b"x")
    scheduler = ExpiryScheduler()
    scheduler.schedule(str(path), 0.01)

    assert scheduler.cancel(str(path)) is True
    await asyncio.sleep(0.05)

    assert path.exists()
    assert scheduler.cancel(str(path)) is False


@pytest.mark.asyncio
async def test_reschedule_replaces_timer(tmp_path):
    path = str(tmp_path / "a.mp4")
    scheduler = ExpiryScheduler()
    scheduler.schedule(path, 10)
    first = scheduler.pending()[path]

    scheduler.schedule(path, 100)

    assert len(scheduler) == 1
    assert scheduler.pending()[path] > first
    scheduler.cancel_all()


@pytest.mark.asyncio
async def test_timer_fires_on_the_loop(tmp_path):
    path = tmp_path / "a.mp4"
    path.write_bytes(b"x")
    scheduler = ExpiryScheduler()

    scheduler.schedule(str(path), 0.01)
    await asyncio.sleep(0.2)

    assert not path.exists()
    assert str(path) not in scheduler


@pytest.mark.asyncio
async def test_periodic_sweep_runs_immediately(tmp_path):
    old = make_file(tmp_path, "orphan.mp4", 3600, time.time())

    task = asyncio.create_task(periodic_sweep(str(tmp_path), RETENTION, interval=3600))
    for _ in range(50):
        if not old.exists():
            break
        await asyncio.sleep(0.02)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not old.exists()


@pytest.mark.asyncio
async def test_periodic_sweep_waits_while_busy(tmp_path):
    partial = make_file(tmp_path, "clip.f137.mp4.part", 3600, time.time())
    busy = True

    task = asyncio.create_task(
        periodic_sweep(str(tmp_path), RETENTION, interval=0.02, is_busy=lambda: busy)
    )
    await asyncio.sleep(0.2)
    assert partial.exists()

    busy = False
    for _ in range(50):
        if not partial.exists():
            break
        await asyncio.sleep(0.02)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not partial.exists()
