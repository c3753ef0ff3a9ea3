# src/persist_hub/core/normalizer.py
"""
配置规范化器。

把用户提供的配置树转换为“每个具名服务一条完整配置记录”的形式：
1. 解析每个类别的默认实例名（显式的 `default_xxx` 键，否则使用全局默认名）；
2. 对每个具名实例（或单实例简写形式中的唯一隐式实例），把类别默认模板与用户覆盖项做深度合并；
3. 实例可以通过 `id` 字段覆盖自己的存储名称。

本模块中的函数都是纯函数：不修改输入，不产生副作用，重复调用结果相同。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .categories import NORMALIZATION_ORDER, ServiceCategory
from .exceptions import ConfigurationError
from .merge import deep_merge

DEFAULT_NAME = "default"

Record = dict[str, Any]


# ===================== 默认模板 =====================


def connection_template() -> Record:
    """DBAL 连接的默认配置模板。"""
    return {
        "event_subscribers": [],
        "sql_logger": None,
        "sql_logger_params": None,
        "types": {},
        "type_mapping": {},
        "async_engine": False,
        "engine_options": {},
        "parameters": {
            "url": None,
            "driver": "mysql+pymysql",
            "host": "localhost",
            "user": "root",
            "password": None,
            "port": None,
            "dbname": None,
            "driver_options": {},
        },
    }


def cache_instance_template() -> Record:
    """缓存实例的默认配置模板。"""
    return {
        "adapter": "memory",
        "namespace": "",
        "options": {},
    }


def entity_manager_template(
    default_connection: str, default_cache: str, application_path: Path
) -> Record:
    """ORM EntityManager 的默认配置模板。"""
    return {
        "entity_manager": "default",
        "entity_namespaces": {},
        "connection": default_connection,
        "proxy": {
            "auto_generate_classes": True,
            "namespace": "Proxy",
            "dir": str(application_path / "library" / "Proxy"),
        },
        "query_cache": default_cache,
        "result_cache": default_cache,
        "metadata_cache": default_cache,
        "metadata_drivers": {},
        "naming_strategy": "default",
        "sql_functions": {
            "numeric": {},
            "datetime": {},
            "string": {},
        },
    }


def document_manager_template(default_cache: str, application_path: Path) -> Record:
    """ODM DocumentManager 的默认配置模板。"""
    return {
        "document_manager": "default",
        "document_namespaces": {},
        "proxy": {
            "auto_generate_classes": True,
            "namespace": "Proxy",
            "dir": str(application_path / "library" / "Proxy"),
        },
        "hydrator": {
            "namespace": "Hydrators",
            "dir": str(application_path / "cache"),
        },
        "metadata_cache": default_cache,
        "metadata_drivers": {},
        "connection_string": "",
        "client_options": {},
    }


def metadata_driver_template(default_cache: str, adapter: str = "declarative") -> Record:
    """单个元数据驱动描述符的默认模板（在构建期逐个合并）。"""
    return {
        "adapter": adapter,
        "mapping_namespace": "",
        "mapping_dirs": [],
        "reader_cache": default_cache,
        "reader_namespaces": {},
    }


# ===================== 规范化 =====================


def normalize_section(
    category: ServiceCategory,
    raw: Mapping[str, Any],
    template: Mapping[str, Any],
    fallback_default_name: str = DEFAULT_NAME,
) -> tuple[str, dict[str, Record]]:
    """
    规范化单个类别的配置段。

    Args:
        category: 配置段所属的服务类别。
        raw: 用户提供的配置段，可以包含具名集合，也可以本身就是单实例配置。
        template: 该类别的默认模板。
        fallback_default_name: 未显式指定默认名时使用的名称。

    Returns:
        (默认实例名, {名称: 完整配置记录})

    Raises:
        ConfigurationError: 配置段或实例条目不是映射，或存储名称冲突。
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"配置段 '{category.section}' 必须是映射类型，实际为 {type(raw).__name__}。"
        )

    section = dict(raw)
    default_name = section.pop(category.default_key, None) or fallback_default_name
    if not isinstance(default_name, str):
        raise ConfigurationError(
            f"'{category.section}.{category.default_key}' 必须是字符串。"
        )

    if category.collection_key not in section:
        # 单实例简写：整个配置段就是默认实例的覆盖项
        return default_name, {default_name: deep_merge(template, section)}

    collection = section[category.collection_key] or {}
    if not isinstance(collection, Mapping):
        raise ConfigurationError(
            f"'{category.section}.{category.collection_key}' 必须是映射类型。"
        )

    records: dict[str, Record] = {}
    for name, overrides in collection.items():
        if not isinstance(overrides, Mapping):
            raise ConfigurationError(
                f"{category.label} '{name}' 的配置必须是映射类型。"
            )
        explicit_id = overrides.get("id")
        storage_name = str(name if explicit_id is None else explicit_id)
        if storage_name in records:
            raise ConfigurationError(
                f"{category.label} 名称 '{storage_name}' 重复定义。"
            )
        records[storage_name] = deep_merge(template, overrides)

    return default_name, records


@dataclass(frozen=True)
class NormalizedConfiguration:
    """整棵配置树的规范化结果。"""

    default_names: dict[ServiceCategory, str] = field(default_factory=dict)
    records: dict[ServiceCategory, dict[str, Record]] = field(default_factory=dict)


def normalize_tree(
    tree: Mapping[str, Any],
    *,
    default_name: str = DEFAULT_NAME,
    application_path: Path | None = None,
) -> NormalizedConfiguration:
    """
    规范化整棵配置树。

    各类别按 DBAL → Cache → ORM → ODM 的顺序处理，因为 ORM/ODM 的默认模板
    引用的是已经解析出的默认连接名与默认缓存实例名。缺失的配置段不产生任何记录。
    """
    if not isinstance(tree, Mapping):
        raise ConfigurationError(
            f"容器配置必须是映射类型，实际为 {type(tree).__name__}。"
        )
    if ServiceCategory.ENTITY_MANAGER.section in tree and (
        ServiceCategory.CONNECTION.section not in tree
    ):
        raise ConfigurationError(
            "配置了 'orm' 段但缺少 'dbal' 段，EntityManager 无法引用任何连接。"
        )

    app_path = application_path or Path.cwd()
    default_names: dict[ServiceCategory, str] = {}
    records: dict[ServiceCategory, dict[str, Record]] = {}

    for category in NORMALIZATION_ORDER:
        template = _template_for(category, default_names, app_path, default_name)
        raw = tree.get(category.section)
        if raw is None:
            default_names[category] = default_name
            records[category] = {}
            continue
        default_names[category], records[category] = normalize_section(
            category, raw, template, default_name
        )

    return NormalizedConfiguration(default_names=default_names, records=records)


def _template_for(
    category: ServiceCategory,
    resolved: Mapping[ServiceCategory, str],
    application_path: Path,
    fallback: str,
) -> Record:
    default_connection = resolved.get(ServiceCategory.CONNECTION, fallback)
    default_cache = resolved.get(ServiceCategory.CACHE_INSTANCE, fallback)
    if category is ServiceCategory.CONNECTION:
        return connection_template()
    if category is ServiceCategory.CACHE_INSTANCE:
        return cache_instance_template()
    if category is ServiceCategory.ENTITY_MANAGER:
        return entity_manager_template(default_connection, default_cache, application_path)
    return document_manager_template(default_cache, application_path)
