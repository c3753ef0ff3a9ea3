# src/persist_hub/adapters/metadata/__init__.py
"""内置的映射元数据驱动。"""

from .chain import MetadataDriverChain, collapse_chain
from .scanning import DeclarativeDriver, DocumentDriver, ModuleScanDriver, StaticDriver, import_class

__all__ = [
    "MetadataDriverChain",
    "collapse_chain",
    "ModuleScanDriver",
    "DeclarativeDriver",
    "DocumentDriver",
    "StaticDriver",
    "import_class",
]
