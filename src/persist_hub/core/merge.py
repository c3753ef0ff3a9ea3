# src/persist_hub/core/merge.py
"""
配置值的递归结构合并。

配置树中的值只有三种形态：映射、序列、标量。合并规则：
- 映射 + 映射：逐键递归合并，覆盖方的键优先，默认方的兄弟键原样保留；
- 其余任意组合：覆盖方整体替换默认值（序列不按下标合并，标量不做部分合并）。

两个输入都不会被修改，返回值与输入不共享任何可变子结构。
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any


def deep_merge(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """把 `overrides` 递归合并到 `defaults` 之上，返回一个新的字典。"""
    merged: dict[str, Any] = {key: copy.deepcopy(value) for key, value in defaults.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = _plain_copy(value)
    return merged


def _plain_copy(value: Any) -> Any:
    # 映射统一转为 dict，便于记录之间做相等比较
    if isinstance(value, Mapping):
        return {key: _plain_copy(item) for key, item in value.items()}
    return copy.deepcopy(value)
