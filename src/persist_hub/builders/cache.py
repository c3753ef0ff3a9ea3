# src/persist_hub/builders/cache.py
"""缓存实例构建器。"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from persist_hub.core.interfaces import CacheBackend, ServiceContext

from .options import CacheInstanceOptions

# 记录中属于容器本身的字段；其余顶层字段作为适配器选项的简写
_RECORD_FIELDS = frozenset({"id", "adapter", "namespace", "options"})


def build_cache_instance(record: Mapping[str, Any], context: ServiceContext) -> CacheBackend:
    options = CacheInstanceOptions.model_validate(record)

    # `options` 中的值优先于顶层简写
    adapter_options = {key: value for key, value in record.items() if key not in _RECORD_FIELDS}
    adapter_options.update(options.options)

    entry = context.registries.cache_adapters.entry(options.adapter)
    cache = entry.factory(adapter_options)

    if options.namespace:
        cache.set_namespace(options.namespace)

    if entry.initializable:
        cache.initialize(record)

    return cache
