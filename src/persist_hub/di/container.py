# src/persist_hub/di/container.py
"""
应用依赖注入 (DI) 容器。

使用 `dependency-injector` 装配进程级配置、日志系统、工厂注册表与服务容器。
服务容器作为 Resource 提供：`init_resources()` 时创建，`shutdown_resources()` 时关闭。
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from dependency_injector import containers, providers

from persist_hub.config import PersistHubSettings
from persist_hub.config_loader import load_container_config
from persist_hub.container import Container
from persist_hub.observability.logging_config import setup_logging
from persist_hub.registries import AdapterRegistries, create_default_registries


def load_container_tree(settings: PersistHubSettings) -> dict[str, Any]:
    """未配置 container_file 时返回空配置树。"""
    if settings.container_file is None:
        return {}
    return load_container_config(settings.container_file)


def open_container(
    settings: PersistHubSettings,
    tree: dict[str, Any],
    registries: AdapterRegistries,
) -> Iterator[Container]:
    container = Container(
        tree,
        registries=registries,
        default_name=settings.default_name,
        application_path=settings.application_path,
    )
    try:
        yield container
    finally:
        container.close()


class AppContainer(containers.DeclarativeContainer):
    """Persist-Hub 的组合根。"""

    # --- 核心配置通道 ---
    # 1. 整块配置对象，作为唯一事实来源向下传递
    settings = providers.Dependency(instance_of=PersistHubSettings)
    # 2. 字段级配置提供者，用于日志等需要细粒度配置的场景
    config = providers.Configuration()

    logging = providers.Resource(
        setup_logging,
        log_level=config.logging.level,
        log_format=config.logging.format,
        service=config.service_name,
    )

    registries = providers.Singleton(create_default_registries)

    container_config = providers.Singleton(load_container_tree, settings=settings)

    persistence = providers.Resource(
        open_container,
        settings=settings,
        tree=container_config,
        registries=registries,
    )
