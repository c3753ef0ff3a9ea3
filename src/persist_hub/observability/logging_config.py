# src/persist_hub/observability/logging_config.py
"""
集中配置日志系统：structlog ⇄ 标准 logging，console 模式使用 Rich 面板输出。

- console：本地时间，面板式输出，键值对按列对齐；
- json   ：ISO-8601 + UTC 的结构化日志，每条一行。

容器、构建器、适配器都通过 `structlog.get_logger(__name__)` 取 logger，
因此日志统一挂在 `persist_hub` 命名空间下。
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Literal

import structlog
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from structlog.typing import Processor

if TYPE_CHECKING:
    from persist_hub.config import PersistHubSettings

APP_LOGGER_NAME = "persist_hub"

_NOISY_LOGGERS = ("sqlalchemy.engine.Engine", "sqlalchemy.pool", "pymongo", "redis", "asyncio")


class PanelRenderer:
    """structlog 最终处理器：把一条日志渲染为 Rich 面板字符串。"""

    _LEVEL_STYLES: dict[str, tuple[str, str]] = {
        "debug": ("cyan", "DEBUG   "),
        "info": ("green", "INFO    "),
        "warning": ("yellow", "WARNING "),
        "error": ("bold red", "ERROR   "),
        "critical": ("magenta", "CRITICAL"),
    }

    def __init__(
        self,
        *,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
        kv_truncate_at: int = 256,
        kv_key_width: int = 15,
        console: Console | None = None,
    ) -> None:
        self._console = console or Console()
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name
        self._kv_truncate_at = kv_truncate_at
        self._kv_key_width = kv_key_width

    def __call__(self, logger: Any, name: str, event_dict: MutableMapping[str, Any]) -> str:
        event = str(event_dict.pop("event", "")).strip()
        if not event:
            return ""

        timestamp = event_dict.pop("timestamp", "")
        level = str(event_dict.pop("level", "info")).lower()
        logger_name = event_dict.pop("logger", "unknown")
        event_dict.pop("_record", None)
        event_dict.pop("_from_structlog", None)

        border_style, level_text = self._LEVEL_STYLES.get(level, ("dim", level.upper()))
        title = f"[{border_style}]{level_text}[/]"
        if self._show_logger_name:
            title = f"{title} [cyan dim]({logger_name})[/]"

        body: list[Any] = [Text(event)]
        if event_dict:
            table = Table(show_header=False, show_edge=False, box=None, padding=(0, 1))
            table.add_column(style="dim", justify="right", width=self._kv_key_width)
            table.add_column(style="bright_white", overflow="fold")
            for key, value in sorted(event_dict.items()):
                table.add_row(f"{key} :", Text(self._format_value(value)))
            body.append(table)

        with self._console.capture() as capture:
            self._console.print(
                Panel(
                    Group(*body),
                    title=Text.from_markup(title),
                    title_align="left",
                    subtitle=Text(str(timestamp), style="dim")
                    if self._show_timestamp and timestamp
                    else None,
                    subtitle_align="right",
                    border_style=border_style,
                    expand=False,
                )
            )
        return capture.get().rstrip()

    def _format_value(self, value: Any) -> str:
        text = value if isinstance(value, str) else repr(value)
        if len(text) > self._kv_truncate_at:
            return f"{text[: self._kv_truncate_at]}…"
        return text


def setup_logging(
    *,
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    root_level: str | None = None,
    service: str | None = None,
    silence_noisy_libs: bool = True,
) -> None:
    """
    配置全局 structlog 日志系统。

    Args:
        log_level: `persist_hub` logger 的最低级别。
        log_format: 'console'（Rich 面板）或 'json'（结构化输出）。
        root_level: 根 logger 级别；默认 WARNING。
        service: 通过 contextvars 绑定到所有日志的服务名。
        silence_noisy_libs: 是否把 SQLAlchemy/pymongo/redis 等 logger 下调到 WARNING。
    """
    timestamper = (
        structlog.processors.TimeStamper(fmt="iso", utc=True)
        if log_format == "json"
        else structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor
    if log_format == "console":
        renderer = PanelRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            timestamper,
        ],
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((root_level or "WARNING").upper())

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.contextvars.clear_contextvars()
    if service:
        structlog.contextvars.bind_contextvars(service=service)

    if silence_noisy_libs:
        for noisy in _NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.get_logger(f"{APP_LOGGER_NAME}.logging_config").info(
        "日志系统已配置完成。",
        log_format=log_format,
        app_log_level=log_level.upper(),
        service=service,
    )


def setup_logging_from_config(settings: "PersistHubSettings") -> None:
    """根据 PersistHubSettings 一键初始化日志系统。"""
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        service=settings.service_name,
    )
