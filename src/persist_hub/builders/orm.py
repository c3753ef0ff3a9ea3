# src/persist_hub/builders/orm.py
"""ORM EntityManager 构建器。"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from persist_hub.core.categories import ServiceCategory
from persist_hub.core.interfaces import ServiceContext
from persist_hub.core.registry import FactoryRegistry
from persist_hub.infrastructure.db import register_sql_functions
from persist_hub.orm import EntityManagerConfiguration, ProxySettings, parse_auto_generate

from ._metadata import CacheResolver, build_driver_chain
from .options import EntityManagerOptions


def build_entity_manager(record: Mapping[str, Any], context: ServiceContext) -> Any:
    options = EntityManagerOptions.model_validate(record)
    registries = context.registries
    resolve_cache = CacheResolver(context)

    engine = context.get(ServiceCategory.CONNECTION, options.connection)

    metadata_cache = resolve_cache(options.metadata_cache)
    result_cache = resolve_cache(options.result_cache)
    query_cache = resolve_cache(options.query_cache)

    metadata_driver = build_driver_chain(
        options.metadata_drivers.drivers,
        registries.orm_metadata_drivers,
        resolve_cache,
        default_cache=context.default_name(ServiceCategory.CACHE_INSTANCE),
        default_adapter="declarative",
    )

    repository_class = None
    if options.default_repository_class:
        repository_class = registries.repositories.resolve(options.default_repository_class)

    configuration = EntityManagerConfiguration(
        metadata_driver=metadata_driver,
        metadata_cache=metadata_cache,
        query_cache=query_cache,
        result_cache=result_cache,
        proxy=ProxySettings(
            auto_generate_classes=parse_auto_generate(options.proxy.auto_generate_classes),
            namespace=options.proxy.namespace,
            dir=options.proxy.dir,
        ),
        naming_convention=registries.naming_strategies.create(options.naming_strategy),
        sql_functions={
            "numeric": _resolve_functions(options.sql_functions.numeric, registries.sql_functions),
            "datetime": _resolve_functions(options.sql_functions.datetime, registries.sql_functions),
            "string": _resolve_functions(options.sql_functions.string, registries.sql_functions),
        },
        default_repository_class=repository_class,
    )

    for alias, namespace in options.entity_namespaces.items():
        configuration.add_entity_namespace(alias, namespace)

    # SQL 函数只在管理器构建成功后注册到共享引擎
    factory = registries.entity_managers.resolve(options.entity_manager)
    entity_manager = factory(engine, configuration)
    register_sql_functions(engine, configuration.all_sql_functions())
    return entity_manager


def _resolve_functions(
    functions: Mapping[str, str], registry: FactoryRegistry[Any]
) -> dict[str, Callable[..., Any]]:
    """SQL 函数名 -> 已注册的实现（标识符通过 SQL 函数注册表解析）。"""
    return {name: registry.resolve(identifier) for name, identifier in functions.items()}
