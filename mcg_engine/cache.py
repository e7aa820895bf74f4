from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """
    Cache simples in-memory para cotações repetidas.
    - Com uvicorn --workers > 1, cada worker tem o seu.
    - ttl 0 desliga o cache.
    - Limitado a max_entries; ao encher, sai a entrada mais antiga.
    """
    def __init__(self, default_ttl_seconds: int = 3600, max_entries: int = 1024):
        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries
        # dict preserva ordem de inserção: o primeiro item é o mais antigo
        self._data: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at < time.time():
            self._data.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        if ttl <= 0 or self.max_entries <= 0:
            return
        now = time.time()
        self._purge_expired(now)
        self._data.pop(key, None)
        while len(self._data) >= self.max_entries:
            self._data.pop(next(iter(self._data)))
        self._data[key] = CacheEntry(value=value, expires_at=now + ttl)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._data.items() if e.expires_at < now]
        for k in expired:
            del self._data[k]

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


def make_cache_key(*parts: Any) -> str:
    return "|".join(str(p).strip().upper() for p in parts)
