from .filename import sanitize_filename
from .hash import hash_stable
from .url import safe_url_for_log

__all__ = ["hash_stable", "safe_url_for_log", "sanitize_filename"]
