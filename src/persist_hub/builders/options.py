# src/persist_hub/builders/options.py
"""
配置记录的类型化视图（Pydantic v2）。

规范化之后的记录仍是普通字典；构建器在读取之前先用这些模型校验一次，
字段类型不符会抛出 `pydantic.ValidationError`，并最终被包装为 `ConstructionError`。
记录中的未知字段一律忽略，以便适配器读取自己的扩展字段。
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import URL, make_url


class _RecordModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ===================== DBAL =====================


class ConnectionParameters(_RecordModel):
    url: Optional[str] = Field(default=None, description="完整 DSN；提供时忽略其余连接字段")
    driver: str = Field(default="mysql+pymysql")
    host: Optional[str] = Field(default="localhost")
    user: Optional[str] = Field(default="root")
    password: Optional[str] = Field(default=None)
    port: Optional[int] = Field(default=None)
    dbname: Optional[str] = Field(default=None)
    driver_options: dict[str, Any] = Field(default_factory=dict)

    def to_url(self) -> URL:
        """显式 `url` 优先；否则由各字段组装。SQLite 只使用 `dbname` 作为数据库路径。"""
        if self.url:
            return make_url(self.url)
        if self.driver.split("+", 1)[0] == "sqlite":
            return URL.create(self.driver, database=self.dbname)
        return URL.create(
            self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.dbname,
        )


class ConnectionOptions(_RecordModel):
    event_subscribers: list[Optional[str]] = Field(default_factory=list)
    sql_logger: Optional[str] = None
    sql_logger_params: Optional[dict[str, Any]] = None
    types: dict[str, str] = Field(default_factory=dict)
    type_mapping: dict[str, str] = Field(default_factory=dict)
    async_engine: bool = False
    engine_options: dict[str, Any] = Field(default_factory=dict)
    parameters: ConnectionParameters = Field(default_factory=ConnectionParameters)


# ===================== Cache =====================


class CacheInstanceOptions(_RecordModel):
    adapter: str = "memory"
    namespace: str = ""
    options: dict[str, Any] = Field(default_factory=dict)


# ===================== ORM / ODM 公共部分 =====================


class ProxyOptions(_RecordModel):
    # 保留原始值，由 parse_auto_generate 解释
    auto_generate_classes: Any = True
    namespace: str = "Proxy"
    dir: str = ""


class MetadataDriverOptions(_RecordModel):
    adapter: str
    mapping_namespace: str = ""
    mapping_dirs: list[str] = Field(default_factory=list)
    reader_cache: str
    reader_namespaces: dict[str, str] = Field(default_factory=dict)


class MetadataDriversSection(_RecordModel):
    # 每个描述符在构建期与驱动模板合并后再校验
    drivers: list[dict[str, Any]] = Field(default_factory=list)


# ===================== ORM =====================


class SqlFunctionsOptions(_RecordModel):
    numeric: dict[str, str] = Field(default_factory=dict)
    datetime: dict[str, str] = Field(default_factory=dict)
    string: dict[str, str] = Field(default_factory=dict)


class EntityManagerOptions(_RecordModel):
    entity_manager: str = "default"
    entity_namespaces: dict[str, str] = Field(default_factory=dict)
    connection: str
    proxy: ProxyOptions = Field(default_factory=ProxyOptions)
    query_cache: str
    result_cache: str
    metadata_cache: str
    metadata_drivers: MetadataDriversSection = Field(default_factory=MetadataDriversSection)
    naming_strategy: str = "default"
    sql_functions: SqlFunctionsOptions = Field(default_factory=SqlFunctionsOptions)
    default_repository_class: Optional[str] = None


# ===================== ODM =====================


class HydratorOptions(_RecordModel):
    namespace: str = "Hydrators"
    dir: str = ""


class DocumentManagerOptions(_RecordModel):
    document_manager: str = "default"
    document_namespaces: dict[str, str] = Field(default_factory=dict)
    proxy: ProxyOptions = Field(default_factory=ProxyOptions)
    hydrator: HydratorOptions = Field(default_factory=HydratorOptions)
    metadata_cache: str
    metadata_drivers: MetadataDriversSection = Field(default_factory=MetadataDriversSection)
    connection_string: str = ""
    client_options: dict[str, Any] = Field(default_factory=dict)
    default_db: Optional[str] = None
    environment: Optional[str] = None
