# src/persist_hub/infrastructure/db/session.py
"""
会话工厂与事务作用域

- create_sessionmaker / create_async_sessionmaker：标准化创建会话工厂
- session_scope / async_session_scope：统一事务域（自动提交/回滚/关闭）
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session, sessionmaker


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """基于同步引擎创建 Session 工厂。"""
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def create_async_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """基于异步引擎创建 AsyncSession 工厂。"""
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """标准化事务作用域：自动提交/回滚与资源释放。"""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@asynccontextmanager
async def async_session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """异步版本的事务作用域。"""
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
