# tests/unit/observability/test_logging_config.py
import json
import logging

import pytest
import structlog

from persist_hub.config import LoggingSettings, PersistHubSettings
from persist_hub.observability import PanelRenderer, setup_logging, setup_logging_from_config

pytestmark = pytest.mark.usefixtures("restore_logging")


def _events(stderr: str) -> list[dict]:
    events = []
    for line in stderr.splitlines():
        try:
            events.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return events


def test_json_format_emits_structured_lines(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(log_format="json", log_level="DEBUG", service="orders")

    events = _events(capsys.readouterr().err)
    setup_event = next(e for e in events if e.get("event") == "日志系统已配置完成。")
    assert setup_event["log_format"] == "json"
    assert setup_event["app_log_level"] == "DEBUG"
    assert setup_event["service"] == "orders"
    assert setup_event["logger"] == "persist_hub.logging_config"
    assert setup_event["timestamp"].endswith("Z")


def test_levels_and_noisy_libraries() -> None:
    setup_logging(log_level="debug", root_level="error")
    assert logging.getLogger("persist_hub").level == logging.DEBUG
    assert logging.getLogger().level == logging.ERROR
    assert logging.getLogger("pymongo").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.pool").level == logging.WARNING


def test_service_is_bound_to_context() -> None:
    setup_logging(service="billing")
    assert structlog.contextvars.get_contextvars() == {"service": "billing"}


def test_setup_from_settings(capsys: pytest.CaptureFixture[str]) -> None:
    settings = PersistHubSettings(
        service_name="svc", logging=LoggingSettings(level="WARNING", format="json")
    )
    setup_logging_from_config(settings)
    assert logging.getLogger("persist_hub").level == logging.WARNING
    # 配置完成的 info 日志低于 WARNING，不会输出
    assert _events(capsys.readouterr().err) == []


class TestPanelRenderer:
    def test_renders_event_and_fields(self) -> None:
        renderer = PanelRenderer()
        output = renderer(
            None,
            "info",
            {"event": "容器已重置", "level": "info", "logger": "persist_hub.container", "name": "default"},
        )
        assert "INFO" in output
        assert "容器已重置" in output
        assert "persist_hub.container" in output
        assert "name :" in output
        assert "default" in output

    def test_empty_event_renders_nothing(self) -> None:
        assert PanelRenderer()(None, "info", {"event": "  "}) == ""

    def test_long_values_are_truncated(self) -> None:
        renderer = PanelRenderer(kv_truncate_at=10, show_timestamp=False)
        output = renderer(None, "debug", {"event": "x", "payload": "a" * 50})
        assert "a" * 10 + "…" in output
        assert "a" * 11 not in output
