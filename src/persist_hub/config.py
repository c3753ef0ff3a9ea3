# src/persist_hub/config.py
"""
Persist-Hub 进程级配置（Pydantic v2）

- 环境变量前缀 `PERSISTHUB_`，嵌套字段以 `__` 分隔，例如 `PERSISTHUB_LOGGING__LEVEL`。
- 这里只描述进程级设置；服务容器的配置树由 `config_loader.load_container_config` 读取。
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ===================== 子模型 =====================


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")


# ===================== 主配置 =====================


class PersistHubSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PERSISTHUB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    service_name: str = Field(default="persist-hub")
    default_name: str = Field(default="default", description="各服务类别的全局默认实例名")
    application_path: Optional[Path] = Field(
        default=None, description="代理类与 hydrator 默认目录的根路径；缺省为当前工作目录"
    )
    container_file: Optional[Path] = Field(
        default=None, description="容器配置树文件（.json / .toml）"
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("default_name")
    @classmethod
    def _validate_default_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_name 不能为空")
        return v
