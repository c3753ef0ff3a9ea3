# src/persist_hub/infrastructure/db/engine.py
"""
引擎工厂

- 同步引擎：`sqlalchemy.create_engine`
- 异步引擎：`create_async_engine`；SQLite 使用 NullPool，忽略不适用的池参数
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Union

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

logger = structlog.get_logger(__name__)

AnyEngine = Union[Engine, AsyncEngine]

_POOL_ONLY_OPTIONS = ("pool_size", "max_overflow", "pool_timeout", "pool_recycle")


def is_sqlite(url: URL | str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def create_db_engine(
    url: URL | str,
    *,
    async_engine: bool = False,
    connect_args: Mapping[str, Any] | None = None,
    **engine_options: Any,
) -> AnyEngine:
    """创建同步或异步引擎。创建引擎本身不会建立任何数据库连接。"""
    kwargs: dict[str, Any] = dict(engine_options)
    if connect_args:
        kwargs["connect_args"] = dict(connect_args)

    sqlite = is_sqlite(url)
    if async_engine:
        if sqlite:
            # SQLite 推荐使用 NullPool，避免多进程/多线程下的共享句柄问题
            kwargs.setdefault("poolclass", NullPool)
            for option in _POOL_ONLY_OPTIONS:
                kwargs.pop(option, None)
        engine: AnyEngine = create_async_engine(url, **kwargs)
    else:
        engine = create_engine(url, **kwargs)

    logger.debug(
        "数据库引擎已创建",
        backend=make_url(url).get_backend_name(),
        driver=engine.dialect.driver,
        async_engine=async_engine,
    )
    return engine


def sync_engine_of(engine: AnyEngine) -> Engine:
    """事件监听只能挂在同步引擎上；异步引擎取其代理的同步引擎。"""
    if isinstance(engine, AsyncEngine):
        return engine.sync_engine
    return engine


def register_sql_functions(
    engine: AnyEngine, functions: Mapping[str, Callable[..., Any]]
) -> bool:
    """
    在每个新建的 SQLite 连接上注册 Python 实现的 SQL 函数。

    Returns:
        是否完成注册；非 SQLite 方言没有运行时注册函数的能力，直接跳过。
    """
    if not functions:
        return False
    target = sync_engine_of(engine)
    if target.dialect.name != "sqlite":
        logger.debug(
            "当前方言不支持运行时注册 SQL 函数，已跳过",
            dialect=target.dialect.name,
            functions=sorted(functions),
        )
        return False

    registered = dict(functions)

    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        for name, func in registered.items():
            dbapi_connection.create_function(name, -1, func)

    event.listen(target, "connect", _on_connect)
    return True
