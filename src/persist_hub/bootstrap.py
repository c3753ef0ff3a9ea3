# src/persist_hub/bootstrap.py
"""
应用引导程序。

本模块是应用的唯一初始化入口，负责：
1. 加载配置。
2. 创建并装配 DI 容器。
3. 初始化日志与服务容器资源。
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

import structlog
from dependency_injector import providers

from persist_hub.config import PersistHubSettings
from persist_hub.config_loader import load_settings_from_env
from persist_hub.di.container import AppContainer

logger = structlog.get_logger("persist_hub.bootstrap")


def create_app_config(env_mode: Literal["prod", "test"] = "prod") -> PersistHubSettings:
    """加载、验证并返回进程级配置对象。"""
    return load_settings_from_env(env_mode)


def create_container(
    settings: PersistHubSettings, tree: Mapping[str, Any] | None = None
) -> AppContainer:
    """
    创建并装配 DI 容器，并初始化其资源。

    Args:
        settings: 进程级配置。
        tree: 服务容器配置树；为 None 时从 `settings.container_file` 读取。
    """
    container = AppContainer()

    # 1. 注入整块配置对象
    container.settings.override(settings)

    # 2. 从整块配置中派生出字段级配置
    container.config.from_pydantic(settings)

    # 3. 显式提供的配置树优先于配置文件
    if tree is not None:
        container.container_config.override(providers.Object(dict(tree)))

    # 4. 初始化日志与服务容器
    container.init_resources()
    logger.debug("DI 容器已装配", service=settings.service_name)
    return container
