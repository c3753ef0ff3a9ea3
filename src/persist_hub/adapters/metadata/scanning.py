# src/persist_hub/adapters/metadata/scanning.py
"""
基于模块扫描的映射元数据驱动。

驱动会导入 `mapping_dirs` 中列出的模块（若为包，则递归遍历其子模块），
收集其中定义的映射类。发现结果（类的完整路径列表）写入驱动的 reader 缓存，
后续构建可直接从缓存恢复而无需再次扫描。
"""

from __future__ import annotations

import importlib
import pkgutil
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import ModuleType
from typing import Any

import structlog
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from persist_hub.core.exceptions import MappingError
from persist_hub.core.interfaces import CacheBackend

logger = structlog.get_logger(__name__)


def import_class(path: str) -> type:
    """按 `package.module.ClassName` 形式导入一个类。"""
    module_name, _, class_name = path.rpartition(".")
    if not module_name:
        raise MappingError(f"类路径 '{path}' 缺少模块部分。")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise MappingError(f"无法导入映射类 '{path}': {e}") from e
    if not isinstance(target, type):
        raise MappingError(f"'{path}' 不是一个类。")
    return target


class ModuleScanDriver(ABC):
    """扫描模块发现映射类的驱动基类。子类通过 `is_mapped` 定义何为映射类。"""

    uses_reader_cache = True

    def __init__(
        self,
        mapping_dirs: Iterable[str],
        *,
        mapping_namespace: str = "",
        reader_cache: CacheBackend | None = None,
        reader_namespaces: Mapping[str, str] | None = None,
    ) -> None:
        self.mapping_dirs = list(mapping_dirs)
        self.mapping_namespace = mapping_namespace
        self.reader_cache = reader_cache
        self.reader_namespaces = dict(reader_namespaces or {})

    @abstractmethod
    def is_mapped(self, candidate: type) -> bool:
        raise NotImplementedError

    @property
    def cache_key(self) -> str:
        # 同一组模块在不同命名空间过滤下的结果不同
        aliases = ",".join(
            f"{alias}={module}" for alias, module in sorted(self.reader_namespaces.items())
        )
        return (
            f"metadata:{type(self).__name__}:{'|'.join(self.mapping_dirs)}"
            f":{self.mapping_namespace}:{aliases}"
        )

    def get_all_class_names(self) -> list[str]:
        if self.reader_cache is not None:
            cached = self.reader_cache.get(self.cache_key)
            if cached is not None:
                return list(cached)

        names = self._discover()
        if self.reader_cache is not None:
            self.reader_cache.set(self.cache_key, names)
        logger.debug(
            "映射类扫描完成",
            driver=type(self).__name__,
            mapping_dirs=self.mapping_dirs,
            count=len(names),
        )
        return names

    def load_class(self, class_name: str) -> type:
        """按完整路径或 `Alias:ClassName` 形式加载映射类。"""
        if ":" in class_name:
            alias, _, short_name = class_name.partition(":")
            module = self.reader_namespaces.get(alias)
            if module is None:
                raise MappingError(f"未注册的映射命名空间别名 '{alias}'。")
            class_name = f"{module}.{short_name}"
        return import_class(class_name)

    def load_all_classes(self) -> list[type]:
        return [import_class(name) for name in self.get_all_class_names()]

    def _discover(self) -> list[str]:
        names: list[str] = []
        for module in self._iter_modules():
            for attr in vars(module).values():
                if not isinstance(attr, type) or attr.__module__ != module.__name__:
                    continue
                if not self.is_mapped(attr):
                    continue
                qualified = f"{attr.__module__}.{attr.__qualname__}"
                if self.mapping_namespace and not qualified.startswith(self.mapping_namespace):
                    continue
                if qualified not in names:
                    names.append(qualified)
        return names

    def _iter_modules(self) -> Iterable[ModuleType]:
        for module_name in self.mapping_dirs:
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                raise MappingError(f"无法导入映射模块 '{module_name}': {e}") from e
            yield module
            # 包：递归遍历所有子模块
            if hasattr(module, "__path__"):
                for info in pkgutil.walk_packages(module.__path__, f"{module.__name__}."):
                    yield importlib.import_module(info.name)


class DeclarativeDriver(ModuleScanDriver):
    """发现 SQLAlchemy 声明式映射类（存在 Mapper 的类）。"""

    def is_mapped(self, candidate: type) -> bool:
        return isinstance(sa_inspect(candidate, raiseerr=False), Mapper)


class DocumentDriver(ModuleScanDriver):
    """发现声明了 `__collection__` 字符串属性的文档类。"""

    def is_mapped(self, candidate: type) -> bool:
        return isinstance(getattr(candidate, "__collection__", None), str)


class StaticDriver:
    """
    静态驱动：`mapping_dirs` 直接列出映射类的完整路径，不需要扫描，也不使用 reader 缓存。
    """

    uses_reader_cache = False

    def __init__(
        self,
        mapping_dirs: Iterable[str],
        *,
        mapping_namespace: str = "",
        **_: Any,
    ) -> None:
        self.mapping_dirs = list(mapping_dirs)
        self.mapping_namespace = mapping_namespace

    def get_all_class_names(self) -> list[str]:
        return list(self.mapping_dirs)

    def load_class(self, class_name: str) -> type:
        return import_class(class_name)

    def load_all_classes(self) -> list[type]:
        return [import_class(name) for name in self.mapping_dirs]
