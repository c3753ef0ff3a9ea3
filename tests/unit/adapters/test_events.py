# tests/unit/adapters/test_events.py
"""引擎事件订阅者与 SQL 日志记录器的测试。"""

from pytest_mock import MockerFixture
from sqlalchemy import create_engine, text

from persist_hub.adapters.events import (
    SQLiteForeignKeysSubscriber,
    StructlogSQLLogger,
    attach_subscriber,
)


def test_sqlite_foreign_keys_subscriber_enables_pragma() -> None:
    engine = create_engine("sqlite://")
    attach_subscriber(engine, SQLiteForeignKeysSubscriber())
    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
    engine.dispose()


class TestStructlogSQLLogger:
    """每条 SQL 记录一条结构化日志。"""

    def test_logs_each_statement(self, mocker: MockerFixture) -> None:
        sql_logger = StructlogSQLLogger()
        sql_logger._logger = mocker.Mock()
        engine = create_engine("sqlite://")
        attach_subscriber(engine, sql_logger)

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        calls = [c for c in sql_logger._logger.debug.call_args_list if c.kwargs.get("statement") == "SELECT 1"]
        assert len(calls) == 1
        assert calls[0].args == ("SQL 已执行",)
        assert calls[0].kwargs["duration_ms"] >= 0
        assert "parameters" not in calls[0].kwargs
        engine.dispose()

    def test_params_select_level_and_parameters(self, mocker: MockerFixture) -> None:
        sql_logger = StructlogSQLLogger({"level": "info", "log_parameters": True})
        sql_logger._logger = mocker.Mock()
        engine = create_engine("sqlite://")
        attach_subscriber(engine, sql_logger)

        with engine.connect() as conn:
            conn.execute(text("SELECT :x"), {"x": 5})

        _, kwargs = sql_logger._logger.info.call_args
        assert list(kwargs["parameters"]) == [5]
        sql_logger._logger.debug.assert_not_called()
        engine.dispose()
