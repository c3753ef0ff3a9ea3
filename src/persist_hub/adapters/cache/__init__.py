# src/persist_hub/adapters/cache/__init__.py
"""内置缓存适配器。"""

from .base import NamespacedCache
from .filesystem import FilesystemCache
from .memory import MemoryCache
from .redis import RedisCache

__all__ = ["NamespacedCache", "MemoryCache", "FilesystemCache", "RedisCache"]
