import os
import stat
import sys
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from blackmate.config.settings import config
from blackmate.core.state import state
from blackmate.infra.concurrency import DownloadGate
from blackmate.services.janitor import ExpiryScheduler

# Stand-in for the yt-dlp binary. Behaviour is driven by FAKE_YTDLP_* env vars.
FAKE_YTDLP = r'''#!__PYTHON__
import json
import os
import sys
import time

args = sys.argv[1:]
env = os.environ.get


def log(event):
    path = env("FAKE_YTDLP_LOG")
    if path:
        with open(path, "a") as f:
            f.write("%s %d %f\n" % (event, os.getpid(), time.time()))


if "--version" in args:
    print("2099.01.01")
    sys.exit(0)

if "--dump-json" in args:
    log("info")
    if env("FAKE_YTDLP_INFO_FAIL"):
        sys.stderr.write("ERROR: Video unavailable\n")
        sys.exit(1)
    if env("FAKE_YTDLP_INFO_GARBAGE"):
        print("this is not json")
        sys.exit(0)
    print(json.dumps({
        "title": env("FAKE_YTDLP_TITLE", "Test Video"),
        "duration": int(env("FAKE_YTDLP_DURATION", "3661")),
        "thumbnail": "https://i.ytimg.com/vi/abc/hqdefault.jpg",
        "description": "A test video",
    }))
    sys.exit(0)

log("start")
for i in range(int(env("FAKE_YTDLP_STDERR_LINES", "20"))):
    sys.stderr.write("[download] %5.1f%% of 10.00MiB at 1.00MiB/s\n" % (i % 100))
sys.stderr.flush()
time.sleep(float(env("FAKE_YTDLP_DELAY", "0")))

if env("FAKE_YTDLP_DOWNLOAD_FAIL"):
    sys.stderr.write("ERROR: Requested format is not available\n")
    log("end")
    sys.exit(1)

template = args[args.index("-o") + 1]
ext = "mp3" if "--extract-audio" in args else "mp4"
if not env("FAKE_YTDLP_SKIP_OUTPUT"):
    with open(template.replace("%(ext)s", ext).replace("%%", "%"), "wb") as f:
        f.write(b"fake media payload")
log("end")
'''

@pytest.fixture(autouse=True)
def fresh_state():
    """Every test gets its own gate and timer registry"""
    state.download_gate = DownloadGate(1)
    state.expiry = ExpiryScheduler()
    yield state
    state.expiry.cancel_all()


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    path = tmp_path / "BlackMate"
    monkeypatch.setattr(config.storage, "output_dir", str(path))
    return path


@pytest.fixture
def fake_ytdlp(tmp_path, monkeypatch):
    script = tmp_path / "yt-dlp"
    script.write_text(FAKE_YTDLP.replace("__PYTHON__", sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log_path = tmp_path / "yt-dlp.log"
    monkeypatch.setenv("FAKE_YTDLP_LOG", str(log_path))
    monkeypatch.setattr(config.ytdlp, "binary", str(script))

    def events():
        if not os.path.exists(log_path):
            return []
        with open(log_path) as f:
            return [
                (event, int(pid), float(ts))
                for event, pid, ts in (line.split() for line in f if line.strip())
            ]

    return SimpleNamespace(path=script, log=log_path, events=events)


@pytest_asyncio.fixture
async def client():
    from blackmate.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
