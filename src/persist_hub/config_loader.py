# src/persist_hub/config_loader.py
"""
配置装载器

职责：
- 加载 .env / .env.test；
- 构造 PersistHubSettings；
- 从 .json / .toml 文件读取服务容器的配置树。
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Literal

import structlog
from dotenv import load_dotenv

from persist_hub.config import PersistHubSettings
from persist_hub.core.exceptions import ConfigurationError

__all__ = ["load_settings_from_env", "load_container_config"]

logger = structlog.get_logger(__name__)


def _load_env_files(mode: Literal["test", "prod"]) -> list[Path]:
    """
    加载 .env / .env.test：
    - test 模式：先加载 .env（override=False），再加载 .env.test（override=True）
    - prod 模式：仅加载 .env（override=False）
    """
    cwd = Path.cwd()
    loaded: list[Path] = []

    env_path = cwd / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
        loaded.append(env_path)

    if mode == "test":
        env_test_path = cwd / ".env.test"
        if env_test_path.exists():
            # 测试环境允许 .env.test 覆盖 .env
            load_dotenv(env_test_path, override=True)
            loaded.append(env_test_path)

    return loaded


def load_settings_from_env(mode: Literal["test", "prod"] = "prod") -> PersistHubSettings:
    """加载 dotenv 文件后，以 PERSISTHUB_ 前缀从环境构造配置对象。"""
    loaded = _load_env_files(mode)
    logger.debug("dotenv 文件已加载", files=[str(p) for p in loaded], mode=mode)
    return PersistHubSettings()


def load_container_config(path: str | Path) -> dict[str, Any]:
    """
    读取服务容器的配置树。

    Raises:
        ConfigurationError: 文件不存在、格式不受支持、内容无法解析或顶层不是映射。
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigurationError(f"容器配置文件不存在：{file_path}")

    suffix = file_path.suffix.lower()
    try:
        if suffix == ".json":
            with file_path.open("r", encoding="utf-8") as f:
                tree = json.load(f)
        elif suffix == ".toml":
            with file_path.open("rb") as f:
                tree = tomllib.load(f)
        else:
            raise ConfigurationError(
                f"不支持的容器配置文件格式 '{suffix}'，仅支持 .json 与 .toml。"
            )
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"无法解析容器配置文件 {file_path}: {e}") from e

    if not isinstance(tree, dict):
        raise ConfigurationError(f"容器配置文件 {file_path} 的顶层必须是映射。")

    logger.debug("容器配置文件已读取", path=str(file_path), sections=sorted(tree))
    return tree
