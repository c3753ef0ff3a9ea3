# src/persist_hub/services.py
"""
单个服务类别的具名服务注册表。

名称的生命周期：已配置（有记录） -> 构建中 -> 已加载（有实例）；
构建失败时记录保留，下次 `get` 会重新尝试构建。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from persist_hub.builders import Builder
from persist_hub.core.categories import ServiceCategory
from persist_hub.core.exceptions import (
    ConstructionError,
    NameNotFoundError,
    PersistHubError,
)
from persist_hub.core.interfaces import ServiceContext
from persist_hub.core.normalizer import Record

logger = structlog.get_logger(__name__)


class NamedServiceRegistry:
    """某一类别的 名称 -> 配置记录 / 名称 -> 实例 存储。不自带锁，由容器串行化访问。"""

    def __init__(
        self,
        category: ServiceCategory,
        builder: Builder,
        default_name: str,
        records: Mapping[str, Record],
    ) -> None:
        self.category = category
        self.default_name = default_name
        self._builder = builder
        self._records: dict[str, Record] = dict(records)
        self._instances: dict[str, Any] = {}

    def get(self, context: ServiceContext, name: str | None = None) -> Any:
        name = name or self.default_name
        if name in self._instances:
            return self._instances[name]

        record = self._records.get(name)
        if record is None:
            raise NameNotFoundError(self.category, name)

        log = logger.bind(category=self.category.section, name=name)
        log.debug("开始构建服务实例")
        try:
            instance = self._builder(record, context)
        except (NameNotFoundError, ConstructionError):
            # 嵌套解析产生的错误原样抛出，保留被引用的类别与名称
            log.warning("服务实例构建失败：依赖解析出错", exc_info=True)
            raise
        except PersistHubError as e:
            log.warning("服务实例构建失败", error=str(e))
            raise ConstructionError(self.category, name, str(e)) from e
        except Exception as e:
            log.error("服务实例构建时发生意外错误", exc_info=True)
            raise ConstructionError(self.category, name, f"{type(e).__name__}: {e}") from e

        self._instances[name] = instance
        del self._records[name]
        log.debug("服务实例已构建", type=type(instance).__name__)
        return instance

    def names(self) -> set[str]:
        return set(self._records) | set(self._instances)

    def configured_names(self) -> set[str]:
        return set(self._records)

    def loaded_names(self) -> set[str]:
        return set(self._instances)

    def loaded_instances(self) -> dict[str, Any]:
        return dict(self._instances)

    def __contains__(self, name: object) -> bool:
        return name in self._records or name in self._instances
