# src/persist_hub/builders/connection.py
"""DBAL 连接构建器：配置记录 -> SQLAlchemy (Async)Engine。"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy.engine import Engine

from persist_hub.adapters.events import attach_subscriber
from persist_hub.core.interfaces import ServiceContext
from persist_hub.infrastructure.db import AnyEngine, create_db_engine, sync_engine_of
from persist_hub.registries import AdapterRegistries

from .options import ConnectionOptions

logger = structlog.get_logger(__name__)


def build_connection(record: Mapping[str, Any], context: ServiceContext) -> AnyEngine:
    options = ConnectionOptions.model_validate(record)
    registries = context.registries

    # 类型注册是容器级的：已存在则覆盖，否则新增
    for name, identifier in options.types.items():
        registries.types.register(name, registries.column_types.resolve(identifier))

    parameters = options.parameters
    engine = create_db_engine(
        parameters.to_url(),
        async_engine=options.async_engine,
        connect_args=parameters.driver_options,
        **options.engine_options,
    )
    target = sync_engine_of(engine)

    if options.type_mapping:
        _apply_type_mapping(target, options.type_mapping, registries)

    for identifier in options.event_subscribers:
        if identifier:
            attach_subscriber(target, registries.event_subscribers.create(identifier))

    if options.sql_logger:
        if options.sql_logger_params:
            sql_logger = registries.sql_loggers.create(
                options.sql_logger, options.sql_logger_params
            )
        else:
            sql_logger = registries.sql_loggers.create(options.sql_logger)
        attach_subscriber(target, sql_logger)

    return engine


def _apply_type_mapping(
    engine: Engine, type_mapping: Mapping[str, str], registries: AdapterRegistries
) -> None:
    """
    把 数据库类型名 -> 类型名 写入本引擎方言的反射映射表。
    只修改方言实例上的副本，不影响同一方言类的其他引擎。
    """
    dialect = engine.dialect
    ischema_names = getattr(dialect, "ischema_names", None)
    if ischema_names is None:
        raise ValueError(f"方言 '{dialect.name}' 不支持数据库类型映射。")

    mapped = dict(ischema_names)
    for db_type, type_name in type_mapping.items():
        if registries.types.has_type(type_name):
            mapped[db_type] = registries.types.get_type(type_name)
        else:
            mapped[db_type] = registries.column_types.resolve(type_name)
    dialect.ischema_names = mapped
    logger.debug("已应用数据库类型映射", dialect=dialect.name, mapping=dict(type_mapping))
