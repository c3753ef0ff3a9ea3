# tests/conftest.py
"""项目全局共享的测试 Fixtures。"""

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from pytest_mock import MockerFixture
from rich.console import Console

from persist_hub import Container


@pytest.fixture(scope="session", autouse=True)
def disable_rich_colors_for_tests(
    session_mocker: MockerFixture,
) -> Generator[None, None, None]:
    """全局禁用 rich 库的颜色输出，以确保测试结果的确定性。"""
    original_init = Console.__init__

    def new_init(self: Console, *args: Any, **kwargs: Any) -> None:
        kwargs["force_terminal"] = False
        kwargs["color_system"] = None
        original_init(self, *args, **kwargs)

    session_mocker.patch("rich.console.Console.__init__", new=new_init)
    yield


@pytest.fixture
def sqlite_tree(tmp_path: Path) -> dict[str, Any]:
    """一棵使用内存 SQLite 与内存缓存的完整配置树。"""
    return {
        "dbal": {
            "connections": {
                "default": {"parameters": {"url": "sqlite://"}},
            },
        },
        "cache": {
            "instances": {
                "default": {"adapter": "memory"},
                "sessions": {
                    "adapter": "filesystem",
                    "namespace": "sessions",
                    "options": {"directory": str(tmp_path / "cache")},
                },
            },
        },
        "orm": {
            "entity_managers": {
                "default": {
                    "query_cache": "sessions",
                    "entity_namespaces": {"App": "sample_models.entities"},
                    "metadata_drivers": {
                        "drivers": [
                            {"adapter": "declarative", "mapping_dirs": ["sample_models.entities"]},
                        ],
                    },
                    "sql_functions": {"string": {"regexp": "regexp", "reverse": "reverse"}},
                },
            },
        },
    }


@pytest.fixture
def container(sqlite_tree: dict[str, Any], tmp_path: Path) -> Generator[Container, None, None]:
    """基于 sqlite_tree 的服务容器，测试结束时关闭。"""
    c = Container(sqlite_tree, application_path=tmp_path)
    yield c
    c.close()


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """测试结束后还原根 logger 的处理器与级别，以及 structlog 的全局配置。"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
