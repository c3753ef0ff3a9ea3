# tests/unit/builders/test_cache_builder.py
"""缓存实例构建器的测试。"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from helpers.context import StubContext
from persist_hub.adapters.cache import FilesystemCache, MemoryCache
from persist_hub.builders import build_cache_instance
from persist_hub.core import AdapterNotFoundError
from persist_hub.core.merge import deep_merge
from persist_hub.core.normalizer import cache_instance_template


def _record(**overrides: Any) -> dict[str, Any]:
    return deep_merge(cache_instance_template(), overrides)


class _CountingCache(MemoryCache):
    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        super().__init__(options)
        self.initialized_with: list[Mapping[str, Any]] = []

    def initialize(self, record: Mapping[str, Any]) -> None:
        self.initialized_with.append(record)


class TestBuildCacheInstance:
    def test_default_adapter_is_memory(self) -> None:
        cache = build_cache_instance(_record(), StubContext())
        assert isinstance(cache, MemoryCache)
        assert cache.namespace == ""

    def test_options_and_namespace_are_applied(self) -> None:
        cache = build_cache_instance(
            _record(namespace="app", options={"limit": 7}), StubContext()
        )
        assert cache.namespace == "app"
        assert cache.maxsize == 7

    def test_flat_keys_are_adapter_options(self, tmp_path: Path) -> None:
        """顶层未知字段作为适配器选项的简写，`options` 中的值优先。"""
        cache = build_cache_instance(
            _record(adapter="filesystem", directory=str(tmp_path / "flat")), StubContext()
        )
        assert isinstance(cache, FilesystemCache)
        assert cache.directory == tmp_path / "flat"

        cache = build_cache_instance(
            _record(
                adapter="filesystem",
                directory=str(tmp_path / "flat"),
                options={"directory": str(tmp_path / "nested")},
            ),
            StubContext(),
        )
        assert cache.directory == tmp_path / "nested"

    def test_initializer_runs_once_with_full_record(self) -> None:
        context = StubContext()
        context.registries.cache_adapters.register("counting", _CountingCache)
        record = _record(adapter="counting", namespace="ns")
        cache = build_cache_instance(record, context)
        assert cache.initialized_with == [record]

    def test_initializer_skipped_when_registered_without_capability(self) -> None:
        context = StubContext()
        context.registries.cache_adapters.register("counting", _CountingCache, initializable=False)
        cache = build_cache_instance(_record(adapter="counting"), context)
        assert cache.initialized_with == []

    def test_filesystem_initializer_creates_bucket(self, tmp_path: Path) -> None:
        build_cache_instance(
            _record(adapter="filesystem", namespace="sessions", options={"directory": str(tmp_path)}),
            StubContext(),
        )
        assert (tmp_path / "sessions").is_dir()

    def test_unknown_adapter_raises(self) -> None:
        with pytest.raises(AdapterNotFoundError):
            build_cache_instance(_record(adapter="apc"), StubContext())
