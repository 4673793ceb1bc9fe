"""On-disk cache of compiled PTX keyed by a content hash."""

from __future__ import annotations

import os
from pathlib import Path

from lunara.errors import LunaraError

_FNV_OFFSET = 1469598103934665603
_FNV_PRIME = 1099511628211
_MASK64 = (1 << 64) - 1


def cache_dir() -> str:
    """Cache directory: ``$LUNARA_CACHE_DIR``, else ``$HOME/.cache/lunara``."""
    configured = os.environ.get("LUNARA_CACHE_DIR", "")
    if configured:
        return configured
    home = os.environ.get("HOME", "")
    if not home:
        return ".lunara_cache"
    return home + "/.cache/lunara"


def fnv1a_64_hex(s: str) -> str:
    """64-bit FNV-1a hash of the UTF-8 bytes of ``s`` as 16 lower-case hex digits."""
    h = _FNV_OFFSET
    for byte in s.encode("utf-8"):
        h ^= byte
        h = (h * _FNV_PRIME) & _MASK64
    return f"{h:016x}"


def _ptx_path(key_hex: str) -> Path:
    return Path(cache_dir()) / f"ptx_{key_hex}.ptx"


def load_ptx(key_hex: str) -> str:
    """Return the cached PTX for ``key_hex``; raise :class:`LunaraError` on a miss."""
    try:
        return _ptx_path(key_hex).read_text()
    except OSError:
        raise LunaraError("cache: miss") from None


def store_ptx(key_hex: str, ptx: str) -> None:
    """Write ``ptx`` into the cache under ``key_hex``, creating the directory."""
    try:
        Path(cache_dir()).mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    try:
        _ptx_path(key_hex).write_text(ptx)
    except OSError:
        raise LunaraError("cache: cannot write ptx") from None