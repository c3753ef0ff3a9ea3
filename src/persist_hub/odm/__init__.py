# src/persist_hub/odm/__init__.py
"""ODM 层：基于 pymongo 的 DocumentManager。"""

from .document_manager import DocumentManager, DocumentManagerConfiguration, HydratorSettings

__all__ = ["DocumentManager", "DocumentManagerConfiguration", "HydratorSettings"]
