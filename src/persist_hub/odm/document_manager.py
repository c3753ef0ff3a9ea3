# src/persist_hub/odm/document_manager.py
"""
DocumentManager：对 pymongo 客户端的轻量封装。

客户端以 `connect=False` 创建，构建期不会发生任何网络 I/O；
首次访问数据库时才会真正建立连接。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from persist_hub.core.exceptions import MappingError
from persist_hub.core.interfaces import CacheBackend
from persist_hub.orm.configuration import ProxySettings

logger = structlog.get_logger(__name__)


@dataclass
class HydratorSettings:
    namespace: str = "Hydrators"
    dir: str = ""


@dataclass
class DocumentManagerConfiguration:
    metadata_driver: Any
    metadata_cache: CacheBackend
    proxy: ProxySettings = field(default_factory=ProxySettings)
    hydrator: HydratorSettings = field(default_factory=HydratorSettings)
    document_namespaces: dict[str, str] = field(default_factory=dict)
    default_db: str | None = None

    def add_document_namespace(self, alias: str, namespace: str) -> None:
        self.document_namespaces[alias] = namespace

    def get_document_namespace(self, alias: str) -> str:
        try:
            return self.document_namespaces[alias]
        except KeyError:
            raise MappingError(f"未注册的文档命名空间别名 '{alias}'。") from None


class DocumentManager:
    """按名称构建、由容器缓存的文档数据库门面。"""

    def __init__(
        self, client: MongoClient[Any], configuration: DocumentManagerConfiguration
    ) -> None:
        self.client = client
        self.configuration = configuration

    @property
    def database(self) -> Database[Any]:
        """默认数据库：`default_db`，未配置时使用连接串中的数据库。"""
        if self.configuration.default_db:
            return self.client[self.configuration.default_db]
        return self.client.get_default_database()

    def resolve_document_class(self, document: type | str) -> type:
        if isinstance(document, type):
            return document
        if ":" in document:
            alias, _, short_name = document.partition(":")
            document = f"{self.configuration.get_document_namespace(alias)}.{short_name}"
        return self.configuration.metadata_driver.load_class(document)

    def get_collection(self, document: type | str) -> Collection[Any]:
        """按文档类的 `__collection__` 属性返回对应的集合。"""
        document_class = self.resolve_document_class(document)
        collection_name = getattr(document_class, "__collection__", None)
        if not isinstance(collection_name, str):
            raise MappingError(f"文档类 '{document_class.__name__}' 未声明 __collection__。")
        return self.database[collection_name]

    def close(self) -> None:
        self.client.close()
        logger.debug("DocumentManager 已关闭")
