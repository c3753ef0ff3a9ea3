# src/persist_hub/builders/_metadata.py
"""ORM/ODM 构建器共用的缓存解析与元数据驱动链装配。"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from persist_hub.adapters.metadata import MetadataDriverChain, collapse_chain
from persist_hub.core.categories import ServiceCategory
from persist_hub.core.interfaces import CacheBackend, ServiceContext
from persist_hub.core.merge import deep_merge
from persist_hub.core.normalizer import metadata_driver_template
from persist_hub.core.registry import FactoryRegistry

from .options import MetadataDriverOptions


class CacheResolver:
    """一次构建内的缓存实例解析器：同一个名称只向容器请求一次。"""

    def __init__(self, context: ServiceContext) -> None:
        self._context = context
        self._resolved: dict[str, CacheBackend] = {}

    def __call__(self, name: str) -> CacheBackend:
        if name not in self._resolved:
            self._resolved[name] = self._context.get(ServiceCategory.CACHE_INSTANCE, name)
        return self._resolved[name]


def build_driver_chain(
    descriptors: Iterable[Mapping[str, Any]],
    registry: FactoryRegistry[Any],
    resolve_cache: Callable[[str], CacheBackend],
    *,
    default_cache: str,
    default_adapter: str,
) -> Any:
    """
    把驱动描述符列表装配为驱动链。

    每个描述符先与驱动模板深度合并；只有在注册时声明了 `uses_reader_cache`
    的驱动才会解析并接收 reader 缓存。恰好一个驱动时直接返回该驱动。
    """
    chain = MetadataDriverChain()
    template = metadata_driver_template(default_cache, default_adapter)
    for raw in descriptors:
        descriptor = MetadataDriverOptions.model_validate(deep_merge(template, raw))
        entry = registry.entry(descriptor.adapter)
        kwargs: dict[str, Any] = {"mapping_namespace": descriptor.mapping_namespace}
        if entry.uses_reader_cache:
            kwargs["reader_cache"] = resolve_cache(descriptor.reader_cache)
            kwargs["reader_namespaces"] = descriptor.reader_namespaces
        driver = entry.factory(descriptor.mapping_dirs, **kwargs)
        chain.add_driver(driver, descriptor.mapping_namespace)
    return collapse_chain(chain)
