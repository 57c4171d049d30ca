import hashlib


def hash_stable(data: str, length: int = 16) -> str:
    """Stable short SHA256 hex digest, used for fallback file names"""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:length]
