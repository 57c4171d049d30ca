import re

MAX_FILENAME_LENGTH = 200
# 200 bytes, less the "_YYYYmmdd_HHMMSS_ffffff" suffix and yt-dlp's ".fNNN.mp4.part" intermediates
MAX_FILENAME_BYTES = 160

RESERVED_CHARS = re.compile(r'[<>:"/\\|?*]')
WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_filename(
    name: str,
    max_length: int = MAX_FILENAME_LENGTH,
    max_bytes: int = MAX_FILENAME_BYTES
) -> str:
    """
    Sanitize a title for use as a filename.

    Reserved characters become underscores and whitespace runs collapse to a
    single space. The result is cut to `max_length` characters, then shortened
    until its UTF-8 encoding fits `max_bytes`, before leading/trailing spaces
    and periods are trimmed, so a trimmed name may end up shorter than the
    limits. May return an empty string.
    """
    name = RESERVED_CHARS.sub("_", name)
    name = WHITESPACE_RUN.sub(" ", name)
    name = name[:max_length]

    while len(name.encode("utf-8")) > max_bytes:
        name = name[:-1]

    return name.strip(" .")
