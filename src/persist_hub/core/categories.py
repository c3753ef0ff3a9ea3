# src/persist_hub/core/categories.py
"""定义容器管理的四类服务，以及它们在配置树中的键名约定。"""

from __future__ import annotations

from enum import Enum


class ServiceCategory(str, Enum):
    """容器中的服务类别。枚举值即为配置树中的顶层段名。"""

    CONNECTION = "dbal"
    CACHE_INSTANCE = "cache"
    ENTITY_MANAGER = "orm"
    DOCUMENT_MANAGER = "odm"

    @property
    def section(self) -> str:
        """配置树中的顶层段名。"""
        return self.value

    @property
    def default_key(self) -> str:
        """指定默认实例名称的键。"""
        return _DEFAULT_KEYS[self]

    @property
    def collection_key(self) -> str:
        """具名实例集合的键。"""
        return _COLLECTION_KEYS[self]

    @property
    def label(self) -> str:
        """用于日志与错误消息的可读名称。"""
        return _LABELS[self]


_DEFAULT_KEYS = {
    ServiceCategory.CONNECTION: "default_connection",
    ServiceCategory.CACHE_INSTANCE: "default_cache_instance",
    ServiceCategory.ENTITY_MANAGER: "default_entity_manager",
    ServiceCategory.DOCUMENT_MANAGER: "default_document_manager",
}

_COLLECTION_KEYS = {
    ServiceCategory.CONNECTION: "connections",
    ServiceCategory.CACHE_INSTANCE: "instances",
    ServiceCategory.ENTITY_MANAGER: "entity_managers",
    ServiceCategory.DOCUMENT_MANAGER: "document_managers",
}

_LABELS = {
    ServiceCategory.CONNECTION: "DBAL Connection",
    ServiceCategory.CACHE_INSTANCE: "Cache Instance",
    ServiceCategory.ENTITY_MANAGER: "ORM EntityManager",
    ServiceCategory.DOCUMENT_MANAGER: "ODM DocumentManager",
}

# 规范化顺序：ORM/ODM 的默认模板引用已解析的默认连接名与默认缓存名
NORMALIZATION_ORDER: tuple[ServiceCategory, ...] = (
    ServiceCategory.CONNECTION,
    ServiceCategory.CACHE_INSTANCE,
    ServiceCategory.ENTITY_MANAGER,
    ServiceCategory.DOCUMENT_MANAGER,
)
