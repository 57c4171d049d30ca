from blackmate.models.internal import DownloadIntent, MediaMetadata

AUDIO_EXT = "mp3"
VIDEO_EXT = "mp4"

CONTENT_TYPES = {
    AUDIO_EXT: "audio/mpeg",
    VIDEO_EXT: "video/mp4",
}


class FormatDecision:
    """Make format decisions"""

    @staticmethod
    def decide(intent: DownloadIntent) -> str:
        """Decide format string based on intent"""
        if intent.audio_only:
            # yt-dlp converts to mp3 via -x --audio-format mp3
            return "bestaudio"

        if intent.quality:
            return (
                f"bestvideo[height<={intent.quality}][ext=mp4]+bestaudio[ext=m4a]/"
                f"best[height<={intent.quality}][ext=mp4]/best"
            )

        # Prefer mp4 video + m4a audio, fall back to a progressive mp4, then anything
        return "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"

    @staticmethod
    def get_metadata(intent: DownloadIntent) -> MediaMetadata:
        """Get media metadata based on intent"""
        return MediaMetadata(
            format_str=FormatDecision.decide(intent),
            ext=AUDIO_EXT if intent.audio_only else VIDEO_EXT
        )


def content_type_for(file_name: str) -> str:
    """Content type for a served file, by extension"""
    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return CONTENT_TYPES.get(ext, "application/octet-stream")
