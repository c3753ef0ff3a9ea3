# tests/unit/core/test_exceptions.py
"""异常类型的测试。"""

from persist_hub.core import (
    ConstructionError,
    NameNotFoundError,
    PersistHubError,
    ServiceCategory,
)


def test_name_not_found_carries_category_and_name() -> None:
    error = NameNotFoundError(ServiceCategory.CACHE_INSTANCE, "session")
    assert error.category is ServiceCategory.CACHE_INSTANCE
    assert error.name == "session"
    assert isinstance(error, KeyError)
    assert isinstance(error, PersistHubError)
    # 不带 KeyError 默认添加的引号
    assert str(error) == "无法找到 Cache Instance 'session'。"


def test_construction_error_message() -> None:
    error = ConstructionError(ServiceCategory.CONNECTION, "main", "boom")
    assert error.category is ServiceCategory.CONNECTION
    assert error.name == "main"
    assert "main" in str(error) and "boom" in str(error)
