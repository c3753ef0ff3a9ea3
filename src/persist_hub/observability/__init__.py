# src/persist_hub/observability/__init__.py
"""可观测性：日志配置。"""

from .logging_config import PanelRenderer, setup_logging, setup_logging_from_config

__all__ = ["PanelRenderer", "setup_logging", "setup_logging_from_config"]
