# src/persist_hub/orm/entity_manager.py
"""
EntityManager：把一个数据库引擎、会话工厂和 ORM 配置组合在一起的门面对象。

同一个连接可以被多个 EntityManager 共享；EntityManager 不拥有引擎，
因此 `close()` 只清理自身持有的仓库缓存，引擎的释放由容器负责。
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session, sessionmaker

from persist_hub.core.exceptions import MappingError
from persist_hub.infrastructure.db import (
    AnyEngine,
    async_session_scope,
    create_async_sessionmaker,
    create_sessionmaker,
    session_scope,
    sync_engine_of,
)

from .configuration import EntityManagerConfiguration
from .repository import EntityRepository

logger = structlog.get_logger(__name__)


class EntityManager:
    """按名称构建、由容器缓存的 ORM 门面。"""

    def __init__(self, engine: AnyEngine, configuration: EntityManagerConfiguration) -> None:
        self.engine = engine
        self.configuration = configuration
        self._repositories: dict[type, EntityRepository[Any]] = {}
        self._sessionmaker: sessionmaker[Session] | None = None
        self._async_sessionmaker: async_sessionmaker[AsyncSession] | None = None
        if isinstance(engine, AsyncEngine):
            self._async_sessionmaker = create_async_sessionmaker(engine)
        else:
            self._sessionmaker = create_sessionmaker(engine)

    @property
    def is_async(self) -> bool:
        return self._async_sessionmaker is not None

    @property
    def sync_engine(self) -> Engine:
        return sync_engine_of(self.engine)

    # ---------- 会话 ----------

    def session(self) -> Session:
        """返回一个新的同步会话，调用方负责关闭（推荐 `with em.session() as s:`）。"""
        return self._require_sync()()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """自动提交/回滚的同步事务作用域。"""
        with session_scope(self._require_sync()) as session:
            yield session

    def async_session(self) -> AsyncSession:
        return self._require_async()()

    @asynccontextmanager
    async def async_session_scope(self) -> AsyncIterator[AsyncSession]:
        async with async_session_scope(self._require_async()) as session:
            yield session

    def _require_sync(self) -> sessionmaker[Session]:
        if self._sessionmaker is None:
            raise RuntimeError("该 EntityManager 基于异步引擎，请使用 async_session()。")
        return self._sessionmaker

    def _require_async(self) -> async_sessionmaker[AsyncSession]:
        if self._async_sessionmaker is None:
            raise RuntimeError("该 EntityManager 基于同步引擎，请使用 session()。")
        return self._async_sessionmaker

    # ---------- 映射类 ----------

    def resolve_entity_class(self, entity: type | str) -> type:
        """
        解析实体类。支持三种形式：类对象、完整路径、`Alias:ClassName`
        （别名来自 `entity_namespaces`）。
        """
        if isinstance(entity, type):
            return entity
        if ":" in entity:
            alias, _, short_name = entity.partition(":")
            entity = f"{self.configuration.get_entity_namespace(alias)}.{short_name}"
        return self.configuration.metadata_driver.load_class(entity)

    def get_mapped_classes(self) -> list[type]:
        return list(self.configuration.metadata_driver.load_all_classes())

    def get_repository(self, entity: type | str) -> EntityRepository[Any]:
        entity_class = self.resolve_entity_class(entity)
        repository = self._repositories.get(entity_class)
        if repository is None:
            repository_class = self.configuration.default_repository_class or EntityRepository
            repository = repository_class(self, entity_class)
            self._repositories[entity_class] = repository
        return repository

    # ---------- 表结构 ----------

    def create_schema(self) -> None:
        """为驱动发现的所有映射类建表（仅同步引擎）。"""
        if self.is_async:
            raise RuntimeError("异步 EntityManager 请在连接上自行执行 run_sync(metadata.create_all)。")
        for metadata in self._metadatas():
            metadata.create_all(self.sync_engine)

    def drop_schema(self) -> None:
        if self.is_async:
            raise RuntimeError("异步 EntityManager 请在连接上自行执行 run_sync(metadata.drop_all)。")
        for metadata in self._metadatas():
            metadata.drop_all(self.sync_engine)

    def _metadatas(self) -> list[Any]:
        metadatas: list[Any] = []
        for cls in self.get_mapped_classes():
            table = getattr(cls, "__table__", None)
            if table is None:
                raise MappingError(f"映射类 '{cls.__name__}' 没有关联的表。")
            if table.metadata not in metadatas:
                metadatas.append(table.metadata)
        return metadatas

    def close(self) -> None:
        self._repositories.clear()
        logger.debug("EntityManager 已关闭")

