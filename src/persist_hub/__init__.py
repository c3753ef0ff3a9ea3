# src/persist_hub/__init__.py
"""
Persist-Hub：配置驱动的持久化服务容器。

由一棵声明式配置树按名称懒加载 SQL 连接、缓存实例、EntityManager 与 DocumentManager，
并在它们之间解析交叉引用。
"""

from persist_hub.container import Container
from persist_hub.core import (
    AdapterNotFoundError,
    ConfigurationError,
    ConstructionError,
    MappingError,
    NameNotFoundError,
    PersistHubError,
    ServiceCategory,
)
from persist_hub.registries import AdapterRegistries, create_default_registries

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # 容器
    "Container",
    "ServiceCategory",
    "AdapterRegistries",
    "create_default_registries",
    # 异常
    "PersistHubError",
    "ConfigurationError",
    "NameNotFoundError",
    "ConstructionError",
    "MappingError",
    "AdapterNotFoundError",
]
