# src/persist_hub/orm/repository.py
"""通用实体仓库。"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select

if TYPE_CHECKING:
    from .entity_manager import EntityManager

T = TypeVar("T")


class EntityRepository(Generic[T]):
    """针对单个映射类的常用查询。每个方法使用独立的短事务。"""

    def __init__(self, entity_manager: "EntityManager", entity_class: type[T]) -> None:
        self.entity_manager = entity_manager
        self.entity_class = entity_class

    def find(self, ident: Any) -> T | None:
        with self.entity_manager.session() as session:
            return session.get(self.entity_class, ident)

    def find_all(self) -> list[T]:
        with self.entity_manager.session() as session:
            return list(session.scalars(select(self.entity_class)))

    def find_by(self, **criteria: Any) -> list[T]:
        with self.entity_manager.session() as session:
            return list(session.scalars(select(self.entity_class).filter_by(**criteria)))

    def find_one_by(self, **criteria: Any) -> T | None:
        with self.entity_manager.session() as session:
            return session.scalars(
                select(self.entity_class).filter_by(**criteria).limit(1)
            ).first()

    def count(self, **criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.entity_class).filter_by(**criteria)
        with self.entity_manager.session() as session:
            return int(session.scalar(stmt) or 0)

    def add(self, *entities: T) -> None:
        with self.entity_manager.session_scope() as session:
            session.add_all(entities)
