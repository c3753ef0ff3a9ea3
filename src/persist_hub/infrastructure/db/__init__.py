# src/persist_hub/infrastructure/db/__init__.py
"""
数据库公共 API

使用约定：仅从本包导入公共函数，不直接引用内部模块路径。
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from .engine import (
    AnyEngine,
    create_db_engine,
    is_sqlite,
    register_sql_functions,
    sync_engine_of,
)
from .session import (
    async_session_scope,
    create_async_sessionmaker,
    create_sessionmaker,
    session_scope,
)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    释放异步引擎的底层连接池资源。
    SQLAlchemy 2.x 中 AsyncEngine.dispose() 为 awaitable，需由上层显式 await。
    """
    await engine.dispose()


__all__ = [
    "AnyEngine",
    "create_db_engine",
    "is_sqlite",
    "register_sql_functions",
    "sync_engine_of",
    "create_sessionmaker",
    "create_async_sessionmaker",
    "session_scope",
    "async_session_scope",
    "dispose_engine",
]
