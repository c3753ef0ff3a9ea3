# src/persist_hub/builders/__init__.py
"""
各服务类别的构建器。

构建器签名统一为 `build(record, context) -> instance`；
跨类别引用只能通过 `context.get(category, name)` 解析。
"""

from collections.abc import Callable, Mapping
from typing import Any

from persist_hub.core.categories import ServiceCategory
from persist_hub.core.interfaces import ServiceContext

from .cache import build_cache_instance
from .connection import build_connection
from .odm import build_document_manager
from .orm import build_entity_manager

Builder = Callable[[Mapping[str, Any], ServiceContext], Any]

BUILDERS: dict[ServiceCategory, Builder] = {
    ServiceCategory.CONNECTION: build_connection,
    ServiceCategory.CACHE_INSTANCE: build_cache_instance,
    ServiceCategory.ENTITY_MANAGER: build_entity_manager,
    ServiceCategory.DOCUMENT_MANAGER: build_document_manager,
}

__all__ = [
    "BUILDERS",
    "Builder",
    "build_cache_instance",
    "build_connection",
    "build_document_manager",
    "build_entity_manager",
]
