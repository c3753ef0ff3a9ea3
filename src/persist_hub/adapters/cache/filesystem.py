# src/persist_hub/adapters/cache/filesystem.py
"""
基于本地文件系统的缓存，对应配置中的 `filesystem` 适配器。

每个键对应一个 JSON 文件，文件名为完整键的 SHA-256 摘要；
不同命名空间的文件存放在各自的子目录中，`clear()` 只删除当前命名空间的子目录内容。
"""

from __future__ import annotations

import hashlib
import json
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from .base import NamespacedCache

logger = structlog.get_logger(__name__)

_DEFAULT_BUCKET = "_default"


class FilesystemCache(NamespacedCache):
    """
    文件系统缓存。

    options:
        directory: 缓存根目录（必填）。
        default_ttl: 未显式传入 ttl 时使用的过期时间（秒），默认永不过期。
    """

    def __init__(self, options: Mapping[str, Any]) -> None:
        super().__init__()
        directory = options.get("directory")
        if not directory:
            raise ValueError("filesystem 缓存需要配置 options.directory")
        self._root = Path(directory)
        self._default_ttl = options.get("default_ttl")

    @property
    def directory(self) -> Path:
        return self._root

    def initialize(self, record: Mapping[str, Any]) -> None:
        """创建缓存目录。由构建器在实例创建后调用一次。"""
        self._bucket().mkdir(parents=True, exist_ok=True)
        logger.debug("文件系统缓存目录已就绪", directory=str(self._bucket()))

    def _bucket(self) -> Path:
        return self._root / (self.namespace or _DEFAULT_BUCKET)

    def _path_for(self, full_key: str) -> Path:
        digest = hashlib.sha256(full_key.encode("utf-8")).hexdigest()
        return self._bucket() / f"{digest}.json"

    def _read(self, full_key: str, default: Any) -> Any:
        path = self._path_for(full_key)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as e:
            logger.warning("缓存文件内容损坏，已忽略", key=full_key, path=str(path), error=str(e))
            return default

        expires_at = payload.get("expires_at")
        if expires_at is not None and expires_at <= time.time():
            path.unlink(missing_ok=True)
            return default
        return payload.get("value")

    def _write(self, full_key: str, value: Any, ttl: int | None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        payload = {
            "key": full_key,
            "expires_at": time.time() + ttl if ttl else None,
            "value": value,
        }
        try:
            serialized = json.dumps(payload, ensure_ascii=False)
        except TypeError as e:
            # 序列化失败，记录警告并跳过写入
            logger.warning(
                "缓存值序列化失败，跳过写入",
                key=full_key,
                value_type=type(value).__name__,
                error=str(e),
            )
            return

        path = self._path_for(full_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(serialized, encoding="utf-8")
        tmp_path.replace(path)

    def _remove(self, full_key: str) -> None:
        self._path_for(full_key).unlink(missing_ok=True)

    def clear(self) -> None:
        bucket = self._bucket()
        if not bucket.is_dir():
            return
        for path in bucket.glob("*.json"):
            path.unlink(missing_ok=True)
