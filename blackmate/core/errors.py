class BlackMateError(Exception):
    """Base error rendered as {"error": message} at the request boundary"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlackMateError):
    """Malformed or unsupported URL / request body"""
    status_code = 400


class MetadataFetchError(BlackMateError):
    """yt-dlp info query failed or returned unparseable data"""


class DownloadError(BlackMateError):
    """yt-dlp exited non-zero during fetch/transcode"""


class FileStatError(BlackMateError):
    """yt-dlp reported success but the expected output file is missing"""


class StorageError(BlackMateError):
    """Output directory unusable"""


class NotFoundError(BlackMateError):
    status_code = 404
