# src/persist_hub/adapters/cache/memory.py
"""
基于 cachetools 的进程内缓存，对应配置中的 `memory` 适配器。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from cachetools import LRUCache, TTLCache

from .base import NamespacedCache


class MemoryCache(NamespacedCache):
    """
    进程内缓存。

    options:
        limit / maxsize: 最大条目数，默认 1000。
        ttl: 设置后使用 TTLCache（全局过期时间，秒），否则使用 LRUCache。

    注意：cachetools 的 TTL 是缓存级别的，`set()` 的单项 ttl 参数在此实现中被忽略。
    """

    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        options = options or {}
        maxsize = int(options.get("limit") or options.get("maxsize") or 1000)
        ttl = options.get("ttl")
        self._cache: Union[LRUCache[str, Any], TTLCache[str, Any]]
        if ttl:
            self._cache = TTLCache(maxsize=maxsize, ttl=float(ttl))
        else:
            self._cache = LRUCache(maxsize=maxsize)

    @property
    def maxsize(self) -> float:
        return self._cache.maxsize

    def _read(self, full_key: str, default: Any) -> Any:
        return self._cache.get(full_key, default)

    def _write(self, full_key: str, value: Any, ttl: int | None) -> None:
        self._cache[full_key] = value

    def _remove(self, full_key: str) -> None:
        self._cache.pop(full_key, None)

    def clear(self) -> None:
        if not self.namespace:
            self._cache.clear()
            return
        prefix = self._make_key("")
        for full_key in [k for k in self._cache.keys() if k.startswith(prefix)]:
            self._cache.pop(full_key, None)
