# src/persist_hub/core/interfaces.py
"""
定义了 Persist-Hub 中各类适配器与容器上下文的抽象接口协议 (Protocols)。
构建器只依赖这些协议，不依赖具体的适配器实现。
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from persist_hub.registries import AdapterRegistries

    from .categories import ServiceCategory


class CacheBackend(Protocol):
    """缓存实例的接口。所有键都会被加上命名空间前缀。"""

    @property
    def namespace(self) -> str: ...

    def set_namespace(self, namespace: str) -> None:
        """设置缓存键的命名空间。"""
        ...

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, ttl: int | None = None) -> None: ...

    def delete(self, key: str) -> None: ...

    def has(self, key: str) -> bool: ...

    def clear(self) -> None: ...


@runtime_checkable
class Initializable(Protocol):
    """
    可选能力：构建完成后接受一次完整配置记录的初始化钩子。
    是否具备该能力在工厂注册时判定一次，而不是每次构建时探测。
    """

    def initialize(self, record: Mapping[str, Any]) -> None: ...


@runtime_checkable
class Closable(Protocol):
    """可选能力：持有外部资源（连接池、网络客户端）的实例。"""

    def close(self) -> None: ...


class EventSubscriber(Protocol):
    """SQLAlchemy 引擎事件订阅者：返回 事件名 -> 处理函数 的映射。"""

    def subscribed_events(self) -> Mapping[str, Callable[..., Any]]: ...


class MetadataDriver(Protocol):
    """映射元数据驱动：负责发现某一命名空间下的所有映射类。"""

    def get_all_class_names(self) -> list[str]: ...

    def load_class(self, class_name: str) -> type: ...


class ServiceContext(Protocol):
    """构建器可见的容器上下文。跨类别的引用只能通过 `get` 解析。"""

    registries: "AdapterRegistries"

    def get(self, category: "ServiceCategory", name: str | None = None) -> Any: ...

    def default_name(self, category: "ServiceCategory") -> str: ...
