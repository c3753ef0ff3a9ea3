# src/persist_hub/adapters/events.py
"""
内置的 SQLAlchemy 引擎事件订阅者与 SQL 日志记录器。

订阅者通过 `subscribed_events()` 声明 事件名 -> 处理函数，
连接构建器负责用 `sqlalchemy.event.listen` 把它们挂到引擎上。
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from sqlalchemy import event
from sqlalchemy.engine import Engine

from persist_hub.core.interfaces import EventSubscriber

logger = structlog.get_logger(__name__)


def attach_subscriber(engine: Engine, subscriber: EventSubscriber) -> None:
    """把订阅者声明的所有事件挂到同步引擎上。"""
    for event_name, handler in subscriber.subscribed_events().items():
        event.listen(engine, event_name, handler)


class SQLiteForeignKeysSubscriber:
    """为每个新的 SQLite 连接开启外键约束。仅可用于 SQLite 连接。"""

    def subscribed_events(self) -> Mapping[str, Callable[..., Any]]:
        return {"connect": self.on_connect}

    def on_connect(self, dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


class StructlogSQLLogger:
    """
    把每条执行的 SQL 语句记录为一条结构化日志。

    params:
        level: 日志级别（debug/info/warning），默认 debug。
        log_parameters: 是否记录绑定参数，默认 False（避免泄露敏感数据）。
        logger_name: 使用的 logger 名称，默认 persist_hub.sql。
    """

    _START_KEY = "persist_hub_query_start"

    def __init__(self, params: Mapping[str, Any] | None = None) -> None:
        params = params or {}
        self._level = str(params.get("level", "debug")).lower()
        self._log_parameters = bool(params.get("log_parameters", False))
        self._logger = structlog.get_logger(params.get("logger_name", "persist_hub.sql"))

    def subscribed_events(self) -> Mapping[str, Callable[..., Any]]:
        return {
            "before_cursor_execute": self.before_cursor_execute,
            "after_cursor_execute": self.after_cursor_execute,
        }

    def before_cursor_execute(
        self, conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        conn.info.setdefault(self._START_KEY, []).append(time.perf_counter())

    def after_cursor_execute(
        self, conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        starts = conn.info.get(self._START_KEY) or [time.perf_counter()]
        elapsed_ms = (time.perf_counter() - starts.pop()) * 1000
        fields: dict[str, Any] = {
            "statement": statement,
            "duration_ms": round(elapsed_ms, 3),
            "executemany": executemany,
        }
        if self._log_parameters:
            fields["parameters"] = parameters
        log_method = getattr(self._logger, self._level, self._logger.debug)
        log_method("SQL 已执行", **fields)
