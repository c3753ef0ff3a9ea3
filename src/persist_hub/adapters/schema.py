# src/persist_hub/adapters/schema.py
"""
与表结构相关的内置注册项：列类型、命名策略、SQL 自定义函数。
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import sqlalchemy as sa
import structlog
from sqlalchemy.sql.schema import DEFAULT_NAMING_CONVENTION
from sqlalchemy.types import TypeEngine

from persist_hub.core.exceptions import AdapterNotFoundError

logger = structlog.get_logger(__name__)

# ===================== 列类型 =====================

BUILTIN_COLUMN_TYPES: dict[str, type[TypeEngine[Any]]] = {
    "string": sa.String,
    "text": sa.Text,
    "integer": sa.Integer,
    "bigint": sa.BigInteger,
    "smallint": sa.SmallInteger,
    "boolean": sa.Boolean,
    "float": sa.Float,
    "decimal": sa.Numeric,
    "date": sa.Date,
    "datetime": sa.DateTime,
    "time": sa.Time,
    "json": sa.JSON,
    "uuid": sa.Uuid,
    "binary": sa.LargeBinary,
}


class TypeRegistry:
    """
    容器级的 DBAL 类型注册表：别名 -> SQLAlchemy 类型类。

    连接配置中的 `types` 会写入这里：已存在则覆盖，否则新增。
    """

    def __init__(self) -> None:
        self._types: dict[str, type[TypeEngine[Any]]] = {}

    def has_type(self, name: str) -> bool:
        return name in self._types

    def add_type(self, name: str, type_class: type[TypeEngine[Any]]) -> None:
        self._types[name] = type_class

    def override_type(self, name: str, type_class: type[TypeEngine[Any]]) -> None:
        if name not in self._types:
            raise AdapterNotFoundError("type", name, list(self._types))
        self._types[name] = type_class

    def register(self, name: str, type_class: type[TypeEngine[Any]]) -> None:
        """存在则覆盖，否则新增。"""
        if self.has_type(name):
            logger.debug("覆盖已注册的 DBAL 类型", name=name, type=type_class.__name__)
            self.override_type(name, type_class)
        else:
            self.add_type(name, type_class)

    def get_type(self, name: str) -> type[TypeEngine[Any]]:
        try:
            return self._types[name]
        except KeyError:
            raise AdapterNotFoundError("type", name, list(self._types)) from None

    def names(self) -> list[str]:
        return sorted(self._types)


# ===================== 命名策略 =====================


def default_naming_strategy() -> dict[str, str]:
    """SQLAlchemy 的默认命名约定（只约定索引名）。"""
    return dict(DEFAULT_NAMING_CONVENTION)


def underscore_naming_strategy() -> dict[str, str]:
    """为所有约束生成确定性的下划线风格名称，便于迁移工具比对。"""
    return {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }


# ===================== SQL 自定义函数 =====================


def sql_regexp(pattern: str | None, value: str | None) -> bool | None:
    """SQLite 缺少内置的 REGEXP 实现；`x REGEXP y` 会调用 regexp(y, x)。"""
    if pattern is None or value is None:
        return None
    return re.search(pattern, value) is not None


def sql_reverse(value: str | None) -> str | None:
    return None if value is None else value[::-1]


BUILTIN_SQL_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "regexp": sql_regexp,
    "reverse": sql_reverse,
}
