# src/persist_hub/core/registry.py
"""
显式的工厂注册表：把配置中的字符串标识符映射到构造函数。

配置里不再出现类名，而是出现诸如 `memory`、`declarative` 这样的标识符；
未知标识符会抛出 `AdapterNotFoundError`，由构建器包装为 `ConstructionError`。
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from .exceptions import AdapterNotFoundError
from .interfaces import Initializable

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FactoryEntry(Generic[T]):
    """注册表中的一项：工厂函数及其在注册时判定的能力。"""

    identifier: str
    factory: Callable[..., T]
    initializable: bool = False
    uses_reader_cache: bool = False


class FactoryRegistry(Generic[T]):
    """某一类适配器的 标识符 -> 工厂 注册表，由容器持有而非进程全局。"""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._entries: dict[str, FactoryEntry[T]] = {}

    def register(
        self,
        identifier: str,
        factory: Callable[..., T],
        *,
        initializable: bool | None = None,
    ) -> None:
        """
        注册（或覆盖）一个工厂。

        Args:
            identifier: 配置中使用的标识符。
            factory: 构造函数或类。
            initializable: 构建出的实例是否实现 `initialize(record)`。
                为 None 时，若 factory 是类，则按 `Initializable` 协议判定一次。
        """
        if initializable is None:
            initializable = isinstance(factory, type) and issubclass(factory, Initializable)
        if identifier in self._entries:
            logger.debug("覆盖已注册的适配器", kind=self.kind, identifier=identifier)
        self._entries[identifier] = FactoryEntry(
            identifier=identifier,
            factory=factory,
            initializable=initializable,
            uses_reader_cache=bool(getattr(factory, "uses_reader_cache", False)),
        )

    def entry(self, identifier: str) -> FactoryEntry[T]:
        """获取注册项；未注册时抛出 AdapterNotFoundError。"""
        try:
            return self._entries[identifier]
        except KeyError:
            raise AdapterNotFoundError(self.kind, identifier, list(self._entries)) from None

    def resolve(self, identifier: str) -> Callable[..., T]:
        """返回工厂本身（不调用）。"""
        return self.entry(identifier).factory

    def create(self, identifier: str, *args: Any, **kwargs: Any) -> T:
        """调用工厂创建实例。"""
        return self.entry(identifier).factory(*args, **kwargs)

    def is_initializable(self, identifier: str) -> bool:
        return self.entry(identifier).initializable

    def identifiers(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers())

    def __len__(self) -> int:
        return len(self._entries)
