# src/persist_hub/adapters/metadata/chain.py
"""按命名空间前缀把多个元数据驱动串联起来。"""

from __future__ import annotations

from typing import Any

from persist_hub.core.exceptions import MappingError
from persist_hub.core.interfaces import MetadataDriver


class MetadataDriverChain:
    """
    驱动链：类名以某驱动的命名空间开头时，由该驱动负责加载。
    没有任何驱动匹配时，退回到默认驱动（若已设置）。
    """

    def __init__(self) -> None:
        self._drivers: dict[str, MetadataDriver] = {}
        self.default_driver: MetadataDriver | None = None

    def add_driver(self, driver: MetadataDriver, namespace: str) -> None:
        self._drivers[namespace] = driver

    def get_drivers(self) -> dict[str, MetadataDriver]:
        return dict(self._drivers)

    def get_all_class_names(self) -> list[str]:
        names: list[str] = []
        drivers: list[Any] = list(self._drivers.values())
        if self.default_driver is not None:
            drivers.append(self.default_driver)
        for driver in drivers:
            for name in driver.get_all_class_names():
                if name not in names:
                    names.append(name)
        return names

    def load_class(self, class_name: str) -> type:
        for namespace, driver in self._drivers.items():
            if class_name.startswith(namespace):
                return driver.load_class(class_name)
        if self.default_driver is not None:
            return self.default_driver.load_class(class_name)
        raise MappingError(f"类 '{class_name}' 不属于驱动链中的任何命名空间。")

    def load_all_classes(self) -> list[type]:
        return [self.load_class(name) for name in self.get_all_class_names()]

    def __len__(self) -> int:
        return len(self._drivers)


def collapse_chain(chain: MetadataDriverChain) -> Any:
    """只有一个驱动时直接返回该驱动，否则返回驱动链本身。"""
    drivers = chain.get_drivers()
    if len(drivers) == 1:
        return next(iter(drivers.values()))
    return chain
