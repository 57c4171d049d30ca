from fastapi import APIRouter

from blackmate.config.settings import config
from blackmate.core.state import state

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": "running",
        "service": config.api.title,
        "version": config.api.version,
        "ytdlp_version": state.ytdlp_version
    }


@router.get("/health")
async def health_check():
    """Health check with download gate status"""
    return {
        "status": "ok",
        "ytdlp_version": state.ytdlp_version,
        "downloads": state.download_gate.snapshot(),
        "scheduled_deletions": len(state.expiry),
        "output_dir": config.storage.path
    }
