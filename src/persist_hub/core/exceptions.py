# src/persist_hub/core/exceptions.py
"""
本模块定义了 Persist-Hub 中所有自定义的、语义化的异常类型。

容器的调用方只需要区分三类错误：
- 名称不存在（NameNotFoundError）：需要修改配置才能解决；
- 构建失败（ConstructionError）：底层原因可能是暂时的，配置记录会被保留，可重试；
- 配置错误（ConfigurationError）：输入的配置树本身不合法。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .categories import ServiceCategory


class PersistHubError(Exception):
    """
    所有 Persist-Hub 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    pass


class ConfigurationError(PersistHubError):
    """
    表示在加载、解析或规范化配置时发生的错误。
    例如，配置段不是映射类型，或 ORM 段存在但缺少 DBAL 段。
    """

    pass


class NameNotFoundError(PersistHubError, KeyError):
    """
    请求的（或默认的）名称在目标类别中既没有配置记录，也没有已构建的实例。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """

    def __init__(self, category: "ServiceCategory", name: str) -> None:
        self.category = category
        self.name = name
        super().__init__(f"无法找到 {category.label} '{name}'。")

    def __str__(self) -> str:
        # KeyError 默认会给消息加引号，这里保持原样输出
        return str(self.args[0])


class ConstructionError(PersistHubError):
    """
    构建器在创建服务实例时失败。
    原始异常通过 `__cause__` 链接，调用方可据此判断是否值得重试。
    """

    def __init__(
        self,
        category: "ServiceCategory",
        name: str,
        reason: str | None = None,
    ) -> None:
        self.category = category
        self.name = name
        message = f"构建 {category.label} '{name}' 失败"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MappingError(PersistHubError, LookupError):
    """映射类无法被任何元数据驱动解析，或实体别名未注册。"""

    pass


class AdapterNotFoundError(PersistHubError, LookupError):
    """
    工厂注册表中不存在请求的适配器标识符。
    构建器会把它包装为 ConstructionError 再抛给 `get` 的调用方。
    """

    def __init__(self, kind: str, identifier: str, known: list[str]) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(
            f"{kind} 适配器 '{identifier}' 未注册。已注册的适配器: {sorted(known)}"
        )
