# src/persist_hub/container.py
"""
Persist-Hub 服务容器。

容器在创建时一次性规范化配置树，按类别保存配置记录；
实例在首次 `get` 时才构建，之后按名称缓存，直到 `reset()` 或 `close()`。

线程安全：容器级的可重入锁串行化所有 `get` 与 `reset`。
构建 EntityManager 时会在持锁状态下递归获取连接与缓存实例，因此锁必须可重入。
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine

from persist_hub.builders import BUILDERS
from persist_hub.core.categories import NORMALIZATION_ORDER, ServiceCategory
from persist_hub.core.exceptions import ConfigurationError
from persist_hub.core.interfaces import Closable
from persist_hub.core.normalizer import DEFAULT_NAME, NormalizedConfiguration, normalize_tree
from persist_hub.infrastructure.db import dispose_engine
from persist_hub.registries import AdapterRegistries, create_default_registries
from persist_hub.services import NamedServiceRegistry

logger = structlog.get_logger(__name__)


class Container:
    """按名称懒加载并缓存连接、缓存实例、EntityManager 与 DocumentManager。"""

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        registries: AdapterRegistries | None = None,
        default_name: str = DEFAULT_NAME,
        application_path: str | Path | None = None,
    ) -> None:
        """
        Args:
            config: 配置树，包含 `dbal` / `cache` / `orm` / `odm` 段。容器保存其深拷贝，
                之后对原对象的修改不会影响容器。
            registries: 工厂注册表集合；缺省时使用全部内置适配器。
            default_name: 各类别未显式指定默认名时使用的名称。
            application_path: 代理类与 hydrator 默认目录的根路径，缺省为当前工作目录。

        Raises:
            ConfigurationError: 配置树不合法。
        """
        self._container_config: Any = copy.deepcopy(config) if config is not None else {}
        self.registries = registries or create_default_registries()
        self._default_name = default_name
        self._application_path = Path(application_path) if application_path else None
        self._lock = threading.RLock()
        self._services = self._empty_services()
        self._load()

    # ---------- 内部 ----------

    def _empty_services(self) -> dict[ServiceCategory, NamedServiceRegistry]:
        return {
            category: NamedServiceRegistry(category, BUILDERS[category], self._default_name, {})
            for category in NORMALIZATION_ORDER
        }

    def _load(self) -> None:
        normalized: NormalizedConfiguration = normalize_tree(
            self._container_config,
            default_name=self._default_name,
            application_path=self._application_path,
        )
        self._services = {
            category: NamedServiceRegistry(
                category,
                BUILDERS[category],
                normalized.default_names[category],
                normalized.records[category],
            )
            for category in NORMALIZATION_ORDER
        }
        logger.debug(
            "容器配置已规范化",
            **{
                category.section: sorted(normalized.records[category])
                for category in NORMALIZATION_ORDER
            },
        )

    # ---------- 通用接口 ----------

    def get(self, category: ServiceCategory, name: str | None = None) -> Any:
        """
        获取某一类别下的具名实例，省略 name 时使用该类别的默认名。

        Raises:
            NameNotFoundError: 该名称既没有配置记录也没有已构建的实例。
            ConstructionError: 构建失败；配置记录保留，可重试。
        """
        with self._lock:
            return self._services[category].get(self, name)

    def names(self, category: ServiceCategory) -> set[str]:
        """已配置与已加载名称的并集。"""
        with self._lock:
            return self._services[category].names()

    def default_name(self, category: ServiceCategory) -> str:
        return self._services[category].default_name

    # ---------- 具名快捷方法 ----------

    def get_connection(self, name: str | None = None) -> Any:
        return self.get(ServiceCategory.CONNECTION, name)

    def get_cache_instance(self, name: str | None = None) -> Any:
        return self.get(ServiceCategory.CACHE_INSTANCE, name)

    def get_entity_manager(self, name: str | None = None) -> Any:
        return self.get(ServiceCategory.ENTITY_MANAGER, name)

    def get_document_manager(self, name: str | None = None) -> Any:
        return self.get(ServiceCategory.DOCUMENT_MANAGER, name)

    def connection_names(self) -> set[str]:
        return self.names(ServiceCategory.CONNECTION)

    def cache_instance_names(self) -> set[str]:
        return self.names(ServiceCategory.CACHE_INSTANCE)

    def entity_manager_names(self) -> set[str]:
        return self.names(ServiceCategory.ENTITY_MANAGER)

    def document_manager_names(self) -> set[str]:
        return self.names(ServiceCategory.DOCUMENT_MANAGER)

    # ---------- 生命周期 ----------

    def reset(self) -> None:
        """
        丢弃所有已构建的实例，并从原始配置重新规范化。
        被外部持有的旧实例不会被关闭；需要释放资源时请使用 `close()`。

        重新规范化失败时，容器保持为空（没有记录也没有实例），异常继续抛出。
        """
        with self._lock:
            self._services = self._empty_services()
            try:
                self._load()
            except ConfigurationError:
                logger.error("容器重置失败，容器已清空", exc_info=True)
                raise
            logger.info("容器已重置")

    def _detach_instances(self) -> list[tuple[ServiceCategory, str, Any]]:
        """取出全部已加载实例（管理器在前、连接在后）并重置容器。"""
        with self._lock:
            detached = [
                (category, name, instance)
                for category in reversed(NORMALIZATION_ORDER)
                for name, instance in self._services[category].loaded_instances().items()
            ]
            self.reset()
        return detached

    def close(self) -> None:
        """
        释放所有已加载实例持有的资源（引擎连接池、客户端、缓存连接），然后重置容器。
        单个实例关闭失败不会中断其余实例的关闭；第一个错误在最后重新抛出。
        """
        errors: list[Exception] = []
        for category, name, instance in self._detach_instances():
            if isinstance(instance, AsyncEngine):
                logger.warning(
                    "异步引擎需要 await 释放，请改用 aclose()",
                    category=category.section,
                    name=name,
                )
                continue
            try:
                self._close_instance(instance)
            except Exception as e:
                logger.error(
                    "关闭服务实例失败", category=category.section, name=name, exc_info=True
                )
                errors.append(e)
        logger.info("容器已关闭")
        if errors:
            raise errors[0]

    async def aclose(self) -> None:
        """`close()` 的异步版本，会 await 异步引擎的释放。"""
        errors: list[Exception] = []
        for category, name, instance in self._detach_instances():
            try:
                if isinstance(instance, AsyncEngine):
                    await dispose_engine(instance)
                else:
                    self._close_instance(instance)
            except Exception as e:
                logger.error(
                    "关闭服务实例失败", category=category.section, name=name, exc_info=True
                )
                errors.append(e)
        logger.info("容器已关闭")
        if errors:
            raise errors[0]

    @staticmethod
    def _close_instance(instance: Any) -> None:
        if isinstance(instance, Engine):
            instance.dispose()
        elif isinstance(instance, Closable):
            instance.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        loaded = {c.section: sorted(self._services[c].loaded_names()) for c in NORMALIZATION_ORDER}
        return f"<Container loaded={loaded}>"
