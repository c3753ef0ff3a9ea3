# src/persist_hub/orm/configuration.py
"""EntityManager 的运行期配置对象，由 ORM 构建器根据配置记录装配。"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import MetaData

from persist_hub.core.exceptions import MappingError
from persist_hub.core.interfaces import CacheBackend

# 与原有配置格式保持一致的“假值”集合：这些值会关闭代理类自动生成
_FALSY_FLAGS: tuple[Any, ...] = ("0", "false", "", None, False)


def parse_auto_generate(value: Any) -> bool:
    """解析 `proxy.auto_generate_classes`：True，或任何不在假值集合中的值，都视为开启。"""
    return value is True or value not in _FALSY_FLAGS


@dataclass
class ProxySettings:
    auto_generate_classes: bool = True
    namespace: str = "Proxy"
    dir: str = ""


@dataclass
class EntityManagerConfiguration:
    """EntityManager 的完整配置。"""

    metadata_driver: Any
    metadata_cache: CacheBackend
    query_cache: CacheBackend
    result_cache: CacheBackend
    proxy: ProxySettings = field(default_factory=ProxySettings)
    entity_namespaces: dict[str, str] = field(default_factory=dict)
    naming_convention: dict[str, str] = field(default_factory=dict)
    sql_functions: dict[str, dict[str, Callable[..., Any]]] = field(default_factory=dict)
    default_repository_class: type | None = None

    def add_entity_namespace(self, alias: str, namespace: str) -> None:
        self.entity_namespaces[alias] = namespace

    def get_entity_namespace(self, alias: str) -> str:
        try:
            return self.entity_namespaces[alias]
        except KeyError:
            raise MappingError(f"未注册的实体命名空间别名 '{alias}'。") from None

    def all_sql_functions(self) -> dict[str, Callable[..., Any]]:
        """把 numeric/datetime/string 三组函数合并为一个 名称 -> 实现 的映射。"""
        merged: dict[str, Callable[..., Any]] = {}
        for functions in self.sql_functions.values():
            merged.update(functions)
        return merged

    def create_metadata(self, schema: str | None = None) -> MetaData:
        """创建一个应用了本配置命名策略的 MetaData，供应用定义模型时使用。"""
        return MetaData(schema=schema, naming_convention=self.naming_convention)
