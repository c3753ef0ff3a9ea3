# src/persist_hub/adapters/cache/redis.py
"""
基于 Redis 的网络键值缓存，对应配置中的 `redis` 适配器。
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import redis
import structlog

from .base import NamespacedCache

logger = structlog.get_logger(__name__)


class RedisCache(NamespacedCache):
    """
    Redis 缓存。客户端在创建时不会建立连接，首次命令时才连接。

    options:
        url: Redis 连接串，默认 redis://localhost:6379/0。
        key_prefix: 所有键的全局前缀（位于命名空间之前），默认空。
        default_ttl: 未显式传入 ttl 时使用的过期时间（秒）。
        ping: 为真时，`initialize()` 会立即 PING 一次以尽早暴露连接问题。
        client_options: 透传给 `redis.Redis.from_url` 的其他参数。
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        client: redis.Redis | None = None,
    ) -> None:
        super().__init__()
        options = options or {}
        self._url = options.get("url") or "redis://localhost:6379/0"
        self._prefix = options.get("key_prefix") or ""
        self._default_ttl = options.get("default_ttl")
        self._ping_on_start = bool(options.get("ping", False))
        self._client = client or redis.Redis.from_url(
            self._url, decode_responses=True, **dict(options.get("client_options") or {})
        )

    @property
    def client(self) -> redis.Redis:
        return self._client

    def initialize(self, record: Mapping[str, Any]) -> None:
        if not self._ping_on_start:
            return
        try:
            self._client.ping()
        except redis.RedisError as e:
            raise ValueError(f"无法连接到 Redis 服务器 {self._url}: {e}") from e

    def _make_key(self, key: str) -> str:
        return self._prefix + super()._make_key(key)

    def _read(self, full_key: str, default: Any) -> Any:
        try:
            raw_value = self._client.get(full_key)
        except redis.RedisError as e:
            # Redis 连接或操作错误，记录错误并按未命中处理
            logger.error("Redis 操作失败", operation="get", key=full_key, error=str(e))
            return default
        if raw_value is None:
            return default
        try:
            return json.loads(raw_value)
        except json.JSONDecodeError as e:
            logger.warning(
                "缓存值反序列化失败", key=full_key, raw_value=raw_value, error=str(e)
            )
            return default

    def _write(self, full_key: str, value: Any, ttl: int | None) -> None:
        try:
            serialized_value = json.dumps(value)
        except TypeError as e:
            logger.warning(
                "缓存值序列化失败，跳过写入",
                key=full_key,
                value_type=type(value).__name__,
                error=str(e),
            )
            return
        ttl = ttl if ttl is not None else self._default_ttl
        try:
            self._client.set(full_key, serialized_value, ex=ttl)
        except redis.RedisError as e:
            logger.error(
                "Redis 写入操作失败", operation="set", key=full_key, ttl=ttl, error=str(e)
            )
            raise

    def _remove(self, full_key: str) -> None:
        self._client.delete(full_key)

    def clear(self) -> None:
        pattern = f"{self._make_key('')}*"
        keys = list(self._client.scan_iter(match=pattern))
        if keys:
            self._client.delete(*keys)

    def close(self) -> None:
        self._client.close()
