# src/persist_hub/core/__init__.py
"""
Persist-Hub 核心契约包：服务类别、异常、接口协议、配置规范化与工厂注册表。
本包不依赖任何持久化框架。
"""

from .categories import NORMALIZATION_ORDER, ServiceCategory
from .exceptions import (
    AdapterNotFoundError,
    ConfigurationError,
    ConstructionError,
    MappingError,
    NameNotFoundError,
    PersistHubError,
)
from .interfaces import (
    CacheBackend,
    Closable,
    EventSubscriber,
    Initializable,
    MetadataDriver,
    ServiceContext,
)
from .merge import deep_merge
from .normalizer import DEFAULT_NAME, NormalizedConfiguration, normalize_section, normalize_tree
from .registry import FactoryEntry, FactoryRegistry

__all__ = [
    # from categories.py
    "ServiceCategory", "NORMALIZATION_ORDER",
    # from exceptions.py
    "PersistHubError", "ConfigurationError", "NameNotFoundError",
    "ConstructionError", "MappingError", "AdapterNotFoundError",
    # from interfaces.py
    "CacheBackend", "Initializable", "Closable", "EventSubscriber",
    "MetadataDriver", "ServiceContext",
    # from merge.py / normalizer.py
    "deep_merge", "DEFAULT_NAME", "NormalizedConfiguration",
    "normalize_section", "normalize_tree",
    # from registry.py
    "FactoryEntry", "FactoryRegistry",
]
