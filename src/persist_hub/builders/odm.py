# src/persist_hub/builders/odm.py
"""ODM DocumentManager 构建器。"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pymongo import MongoClient

from persist_hub.core.categories import ServiceCategory
from persist_hub.core.interfaces import ServiceContext
from persist_hub.odm import DocumentManagerConfiguration, HydratorSettings
from persist_hub.orm import ProxySettings, parse_auto_generate

from ._metadata import CacheResolver, build_driver_chain
from .options import DocumentManagerOptions


def build_document_manager(record: Mapping[str, Any], context: ServiceContext) -> Any:
    options = DocumentManagerOptions.model_validate(record)
    registries = context.registries
    resolve_cache = CacheResolver(context)

    configuration = DocumentManagerConfiguration(
        metadata_cache=resolve_cache(options.metadata_cache),
        metadata_driver=build_driver_chain(
            options.metadata_drivers.drivers,
            registries.odm_metadata_drivers,
            resolve_cache,
            default_cache=context.default_name(ServiceCategory.CACHE_INSTANCE),
            default_adapter="document",
        ),
        proxy=ProxySettings(
            auto_generate_classes=parse_auto_generate(options.proxy.auto_generate_classes),
            namespace=options.proxy.namespace,
            dir=options.proxy.dir,
        ),
        hydrator=HydratorSettings(
            namespace=options.hydrator.namespace, dir=options.hydrator.dir
        ),
        # environment 存在时覆盖 default_db
        default_db=options.environment or options.default_db,
    )
    for alias, namespace in options.document_namespaces.items():
        configuration.add_document_namespace(alias, namespace)

    # 先解析工厂，再创建客户端
    factory = registries.document_managers.resolve(options.document_manager)
    client: MongoClient[Any] = MongoClient(
        options.connection_string or None, connect=False, **options.client_options
    )
    return factory(client, configuration)
