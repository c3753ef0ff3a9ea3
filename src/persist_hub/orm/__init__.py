# src/persist_hub/orm/__init__.py
"""ORM 层：EntityManager、其配置对象与通用仓库。"""

from .configuration import EntityManagerConfiguration, ProxySettings, parse_auto_generate
from .entity_manager import EntityManager
from .repository import EntityRepository

__all__ = [
    "EntityManager",
    "EntityManagerConfiguration",
    "EntityRepository",
    "ProxySettings",
    "parse_auto_generate",
]
