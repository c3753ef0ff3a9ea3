# tests/unit/test_container.py
"""服务容器的行为测试：懒加载、默认名、重置、错误语义、关闭与并发。"""

import asyncio
import threading
import time
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine

from persist_hub import (
    ConfigurationError,
    ConstructionError,
    Container,
    NameNotFoundError,
    ServiceCategory,
    create_default_registries,
)
from persist_hub.adapters.cache import FilesystemCache, MemoryCache
from persist_hub.orm import EntityManager
from sample_models.entities import Article, User


@pytest.fixture
def cache_tree(tmp_path: Path) -> dict[str, Any]:
    return {
        "cache": {
            "instances": {
                "default": {"adapter": "memory"},
                "sessions": {"adapter": "filesystem", "directory": str(tmp_path / "sessions")},
            }
        }
    }


class TestLazyLookup:
    def test_repeated_get_returns_same_instance(self, container: Container) -> None:
        assert container.get_connection() is container.get_connection("default")
        assert container.get_entity_manager() is container.get_entity_manager()

    def test_names_cover_configured_and_loaded(self, cache_tree: dict[str, Any]) -> None:
        c = Container(cache_tree)
        assert c.cache_instance_names() == {"default", "sessions"}

        sessions = c.get_cache_instance("sessions")
        assert isinstance(sessions, FilesystemCache)
        assert isinstance(c.get_cache_instance(), MemoryCache)
        assert c.cache_instance_names() == {"default", "sessions"}
        assert c.connection_names() == set()

    def test_typo_raises_name_not_found_without_side_effects(
        self, cache_tree: dict[str, Any]
    ) -> None:
        c = Container(cache_tree)
        with pytest.raises(NameNotFoundError) as exc_info:
            c.get_cache_instance("session")
        assert exc_info.value.category is ServiceCategory.CACHE_INSTANCE
        assert exc_info.value.name == "session"
        assert c.cache_instance_names() == {"default", "sessions"}
        # 之后正常名称仍然可用
        assert c.get_cache_instance("sessions") is c.get_cache_instance("sessions")

    def test_explicit_default_names(self) -> None:
        c = Container(
            {
                "dbal": {
                    "default_connection": "main",
                    "connections": {"main": {"parameters": {"url": "sqlite://"}}},
                },
                "cache": {"default_cache_instance": "fast", "instances": {"fast": {}}},
            }
        )
        assert c.default_name(ServiceCategory.CONNECTION) == "main"
        assert c.get_cache_instance() is c.get_cache_instance("fast")
        with pytest.raises(NameNotFoundError):
            c.get(ServiceCategory.CONNECTION, "default")
        c.close()

    def test_container_default_name_parameter(self) -> None:
        c = Container({"cache": {"adapter": "memory"}}, default_name="primary")
        assert c.cache_instance_names() == {"primary"}
        assert c.default_name(ServiceCategory.ENTITY_MANAGER) == "primary"

    def test_config_is_copied(self, cache_tree: dict[str, Any]) -> None:
        c = Container(cache_tree)
        cache_tree["cache"]["instances"]["extra"] = {"adapter": "memory"}
        c.reset()
        assert "extra" not in c.cache_instance_names()

    def test_orm_without_dbal_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Container({"orm": {}})

    def test_entity_manager_resolves_each_cache_once(
        self, container: Container, mocker: MockerFixture
    ) -> None:
        spy = mocker.spy(container, "get")
        em = container.get_entity_manager()
        assert isinstance(em, EntityManager)

        requested = [call.args for call in spy.call_args_list]
        assert requested.count((ServiceCategory.CACHE_INSTANCE, "sessions")) == 1
        assert requested.count((ServiceCategory.CACHE_INSTANCE, "default")) == 1
        assert em.configuration.query_cache is container.get_cache_instance("sessions")
        assert em.engine is container.get_connection()


class TestFailures:
    def test_failed_build_keeps_record_for_retry(self, tmp_path: Path) -> None:
        calls = {"count": 0}

        class FlakyCache(MemoryCache):
            def __init__(self, options: Any = None) -> None:
                calls["count"] += 1
                if calls["count"] == 1:
                    raise OSError("temporarily unavailable")
                super().__init__(options)

        registries = create_default_registries()
        registries.cache_adapters.register("flaky", FlakyCache)
        c = Container({"cache": {"adapter": "flaky"}}, registries=registries)

        with pytest.raises(ConstructionError) as exc_info:
            c.get_cache_instance()
        assert exc_info.value.category is ServiceCategory.CACHE_INSTANCE
        assert isinstance(exc_info.value.__cause__, OSError)
        assert c.cache_instance_names() == {"default"}

        assert isinstance(c.get_cache_instance(), FlakyCache)

    def test_missing_referenced_cache_surfaces_as_name_not_found(self) -> None:
        c = Container(
            {
                "dbal": {"parameters": {"url": "sqlite://"}},
                "cache": {"adapter": "memory"},
                "orm": {"metadata_cache": "missing"},
            }
        )
        with pytest.raises(NameNotFoundError) as exc_info:
            c.get_entity_manager()
        assert exc_info.value.category is ServiceCategory.CACHE_INSTANCE
        assert exc_info.value.name == "missing"
        # 记录未被消费，连接已被构建并缓存
        assert c.entity_manager_names() == {"default"}
        c.close()

    def test_unknown_adapter_is_construction_error(self) -> None:
        c = Container({"cache": {"adapter": "memcached"}})
        with pytest.raises(ConstructionError):
            c.get_cache_instance()

    def test_failed_entity_manager_build_leaves_connection_untouched(self) -> None:
        c = Container(
            {
                "dbal": {"parameters": {"url": "sqlite://"}},
                "cache": {"adapter": "memory"},
                "orm": {
                    "entity_manager": "custom",
                    "sql_functions": {"string": {"reverse": "reverse"}},
                },
            }
        )
        engine = c.get_connection()
        listeners_before = len(engine.pool.dispatch.connect)

        for _ in range(3):
            with pytest.raises(ConstructionError):
                c.get_entity_manager()

        assert len(engine.pool.dispatch.connect) == listeners_before
        c.close()


class TestMetadataDiscovery:
    def test_entity_managers_sharing_a_reader_cache(self) -> None:
        def manager(namespace: str) -> dict[str, Any]:
            return {
                "metadata_drivers": {
                    "drivers": [
                        {"mapping_dirs": ["sample_models.entities"], "mapping_namespace": namespace}
                    ]
                }
            }

        c = Container(
            {
                "dbal": {"parameters": {"url": "sqlite://"}},
                "cache": {"adapter": "memory"},
                "orm": {
                    "entity_managers": {
                        "users": manager("sample_models.entities.User"),
                        "articles": manager("sample_models.entities.Article"),
                    }
                },
            }
        )
        users = c.get_entity_manager("users")
        articles = c.get_entity_manager("articles")

        assert users.get_mapped_classes() == [User]
        assert articles.get_mapped_classes() == [Article]
        c.close()


class TestReset:
    def test_reset_rebuilds_fresh_instances(self, cache_tree: dict[str, Any]) -> None:
        c = Container(cache_tree)
        before = c.get_cache_instance()
        c.reset()
        assert c.cache_instance_names() == {"default", "sessions"}
        after = c.get_cache_instance()
        assert after is not before

    def test_failed_reset_leaves_container_empty(
        self, cache_tree: dict[str, Any], mocker: MockerFixture
    ) -> None:
        c = Container(cache_tree)
        c.get_cache_instance()
        mocker.patch(
            "persist_hub.container.normalize_tree",
            side_effect=ConfigurationError("broken"),
        )
        with pytest.raises(ConfigurationError):
            c.reset()
        assert c.cache_instance_names() == set()
        with pytest.raises(NameNotFoundError):
            c.get_cache_instance()


class TestClose:
    def test_close_disposes_engines_and_resets(
        self, sqlite_tree: dict[str, Any], tmp_path: Path, mocker: MockerFixture
    ) -> None:
        dispose = mocker.spy(Engine, "dispose")
        with Container(sqlite_tree, application_path=tmp_path) as c:
            c.get_entity_manager()
            assert c.entity_manager_names() == {"default"}
        assert dispose.call_count == 1
        assert c.connection_names() == {"default"}
        assert "loaded={'dbal': []" in repr(c)

    def test_sync_close_skips_async_engine(self, mocker: MockerFixture) -> None:
        dispose = mocker.patch.object(AsyncEngine, "dispose", new_callable=AsyncMock)
        c = Container({"dbal": {"async_engine": True, "parameters": {"url": "sqlite+aiosqlite://"}}})
        assert isinstance(c.get_connection(), AsyncEngine)
        c.close()
        dispose.assert_not_awaited()

    def test_aclose_awaits_async_engine(self, mocker: MockerFixture) -> None:
        dispose = mocker.patch.object(AsyncEngine, "dispose", new_callable=AsyncMock)
        c = Container({"dbal": {"async_engine": True, "parameters": {"url": "sqlite+aiosqlite://"}}})
        c.get_connection()
        asyncio.run(c.aclose())
        dispose.assert_awaited_once()

    def test_close_continues_after_failure(self, mocker: MockerFixture) -> None:
        c = Container(
            {
                "dbal": {"parameters": {"url": "sqlite://"}},
                "cache": {"adapter": "memory"},
            }
        )
        c.get_connection()
        cache = c.get_cache_instance()
        mocker.patch.object(type(cache), "close", create=True, side_effect=RuntimeError("nope"))
        dispose = mocker.spy(Engine, "dispose")
        with pytest.raises(RuntimeError, match="nope"):
            c.close()
        assert dispose.call_count == 1


class TestConcurrency:
    def test_concurrent_get_builds_once(self) -> None:
        built: list[object] = []

        class SlowCache(MemoryCache):
            def __init__(self, options: Any = None) -> None:
                time.sleep(0.05)
                super().__init__(options)
                built.append(self)

        registries = create_default_registries()
        registries.cache_adapters.register("slow", SlowCache)
        c = Container({"cache": {"adapter": "slow"}}, registries=registries)

        results: list[Any] = []
        threads = [
            threading.Thread(target=lambda: results.append(c.get_cache_instance()))
            for _ in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(built) == 1
        assert len(results) == 8
        assert all(r is built[0] for r in results)
