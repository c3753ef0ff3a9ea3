# src/persist_hub/di/__init__.py
"""依赖注入组合根。"""

from .container import AppContainer

__all__ = ["AppContainer"]
