# src/persist_hub/adapters/cache/base.py
"""缓存适配器的公共基类：统一处理命名空间与键前缀。"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

_MISSING = object()


class NamespacedCache(ABC):
    """
    所有内置缓存适配器的基类。

    子类只需实现针对“完整键”的读写原语；命名空间前缀由基类统一拼接，
    因此同一个后端上的不同命名空间互不干扰。
    """

    def __init__(self) -> None:
        self._namespace = ""

    @property
    def namespace(self) -> str:
        return self._namespace

    def set_namespace(self, namespace: str) -> None:
        self._namespace = namespace

    def _make_key(self, key: str) -> str:
        """生成带命名空间前缀的缓存键。"""
        if not self._namespace:
            return key
        return f"{self._namespace}:{key}"

    def get(self, key: str, default: Any = None) -> Any:
        value = self._read(self._make_key(key), _MISSING)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._write(self._make_key(key), value, ttl)

    def delete(self, key: str) -> None:
        self._remove(self._make_key(key))

    def has(self, key: str) -> bool:
        return self._read(self._make_key(key), _MISSING) is not _MISSING

    def close(self) -> None:
        """释放后端资源；内存类后端无需任何操作。"""
        return None

    @abstractmethod
    def clear(self) -> None:
        """清空当前命名空间下的所有键。"""
        raise NotImplementedError

    @abstractmethod
    def _read(self, full_key: str, default: Any) -> Any:
        raise NotImplementedError

    @abstractmethod
    def _write(self, full_key: str, value: Any, ttl: int | None) -> None:
        raise NotImplementedError

    @abstractmethod
    def _remove(self, full_key: str) -> None:
        raise NotImplementedError
