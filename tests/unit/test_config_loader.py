# tests/unit/test_config_loader.py
import json
from pathlib import Path

import pytest

from persist_hub.config import PersistHubSettings
from persist_hub.config_loader import load_container_config, load_settings_from_env
from persist_hub.core import ConfigurationError


class TestLoadContainerConfig:
    def test_reads_json(self, tmp_path: Path) -> None:
        path = tmp_path / "container.json"
        path.write_text(json.dumps({"cache": {"adapter": "memory"}}), encoding="utf-8")
        assert load_container_config(path) == {"cache": {"adapter": "memory"}}

    def test_reads_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "container.toml"
        path.write_text(
            '[dbal.connections.default.parameters]\nurl = "sqlite://"\n', encoding="utf-8"
        )
        tree = load_container_config(str(path))
        assert tree["dbal"]["connections"]["default"]["parameters"]["url"] == "sqlite://"

    @pytest.mark.parametrize(
        ("filename", "content"),
        [
            ("container.yaml", "cache: {}"),
            ("container.json", "{not json"),
            ("container.toml", "= broken"),
            ("container.json", "[1, 2]"),
        ],
    )
    def test_rejects_bad_files(self, tmp_path: Path, filename: str, content: str) -> None:
        path = tmp_path / filename
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_container_config(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="不存在"):
            load_container_config(tmp_path / "nope.json")


class TestLoadSettingsFromEnv:
    @pytest.fixture(autouse=True)
    def _isolated_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        for name in ("PERSISTHUB_SERVICE_NAME", "PERSISTHUB_LOGGING__LEVEL"):
            # 先 setenv 再 delenv，让 monkeypatch 在测试结束时删除 dotenv 写入的值
            monkeypatch.setenv(name, "placeholder")
            monkeypatch.delenv(name)

    def test_defaults_without_env_files(self) -> None:
        settings = load_settings_from_env()
        assert isinstance(settings, PersistHubSettings)
        assert settings.service_name == "persist-hub"
        assert settings.default_name == "default"
        assert settings.logging.level == "INFO"

    def test_prod_reads_only_dotenv(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("PERSISTHUB_SERVICE_NAME=from-env\n", encoding="utf-8")
        (tmp_path / ".env.test").write_text("PERSISTHUB_SERVICE_NAME=from-test\n", encoding="utf-8")
        assert load_settings_from_env("prod").service_name == "from-env"

    def test_test_mode_overrides_with_env_test(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text(
            "PERSISTHUB_SERVICE_NAME=from-env\nPERSISTHUB_LOGGING__LEVEL=DEBUG\n", encoding="utf-8"
        )
        (tmp_path / ".env.test").write_text("PERSISTHUB_SERVICE_NAME=from-test\n", encoding="utf-8")
        settings = load_settings_from_env("test")
        assert settings.service_name == "from-test"
        assert settings.logging.level == "DEBUG"

    def test_blank_default_name_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERSISTHUB_DEFAULT_NAME", "  ")
        with pytest.raises(ValueError):
            load_settings_from_env()
