# src/persist_hub/registries.py
"""
容器持有的全部工厂注册表。

每个 `Container` 拥有一份独立的 `AdapterRegistries`，不存在进程级的全局注册表；
需要扩展时，先用 `create_default_registries()` 得到内置注册项，再按需 `register`。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from persist_hub.adapters.cache import FilesystemCache, MemoryCache, RedisCache
from persist_hub.adapters.events import SQLiteForeignKeysSubscriber, StructlogSQLLogger
from persist_hub.adapters.metadata import DeclarativeDriver, DocumentDriver, StaticDriver
from persist_hub.adapters.schema import (
    BUILTIN_COLUMN_TYPES,
    BUILTIN_SQL_FUNCTIONS,
    TypeRegistry,
    default_naming_strategy,
    underscore_naming_strategy,
)
from persist_hub.core.registry import FactoryRegistry
from persist_hub.odm import DocumentManager
from persist_hub.orm import EntityManager, EntityRepository


def _registry(kind: str) -> Callable[[], FactoryRegistry[Any]]:
    return lambda: FactoryRegistry(kind)


@dataclass
class AdapterRegistries:
    """按适配器种类分组的工厂注册表集合。"""

    cache_adapters: FactoryRegistry[Any] = field(default_factory=_registry("cache"))
    event_subscribers: FactoryRegistry[Any] = field(default_factory=_registry("event subscriber"))
    sql_loggers: FactoryRegistry[Any] = field(default_factory=_registry("sql logger"))
    column_types: FactoryRegistry[Any] = field(default_factory=_registry("column type"))
    naming_strategies: FactoryRegistry[Any] = field(default_factory=_registry("naming strategy"))
    orm_metadata_drivers: FactoryRegistry[Any] = field(
        default_factory=_registry("orm metadata driver")
    )
    odm_metadata_drivers: FactoryRegistry[Any] = field(
        default_factory=_registry("odm metadata driver")
    )
    sql_functions: FactoryRegistry[Any] = field(default_factory=_registry("sql function"))
    entity_managers: FactoryRegistry[Any] = field(default_factory=_registry("entity manager"))
    document_managers: FactoryRegistry[Any] = field(default_factory=_registry("document manager"))
    repositories: FactoryRegistry[Any] = field(default_factory=_registry("repository"))
    types: TypeRegistry = field(default_factory=TypeRegistry)


def create_default_registries() -> AdapterRegistries:
    """创建一份带有全部内置适配器的注册表集合。"""
    registries = AdapterRegistries()

    registries.cache_adapters.register("memory", MemoryCache)
    registries.cache_adapters.register("filesystem", FilesystemCache)
    registries.cache_adapters.register("redis", RedisCache)

    registries.event_subscribers.register("sqlite_foreign_keys", SQLiteForeignKeysSubscriber)
    registries.sql_loggers.register("structlog", StructlogSQLLogger)

    for name, type_class in BUILTIN_COLUMN_TYPES.items():
        registries.column_types.register(name, type_class)

    registries.naming_strategies.register("default", default_naming_strategy)
    registries.naming_strategies.register("underscore", underscore_naming_strategy)

    registries.orm_metadata_drivers.register("declarative", DeclarativeDriver)
    registries.orm_metadata_drivers.register("static", StaticDriver)
    registries.odm_metadata_drivers.register("document", DocumentDriver)
    registries.odm_metadata_drivers.register("static", StaticDriver)

    for name, function in BUILTIN_SQL_FUNCTIONS.items():
        registries.sql_functions.register(name, function)

    registries.entity_managers.register("default", EntityManager)
    registries.document_managers.register("default", DocumentManager)
    registries.repositories.register("default", EntityRepository)
    return registries
