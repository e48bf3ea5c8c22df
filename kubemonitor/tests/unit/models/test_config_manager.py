"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from kubemonitor.models.state import AppSettings, ConfigLoadError, ConfigManager


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("K8S_MONITOR_NAMESPACE", "K8S_MONITOR_REFRESH_INTERVAL", "K8S_MONITOR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestAppSettings:
    """Tests for AppSettings defaults and validation."""

    def test_defaults(self) -> None:
        settings = AppSettings()

        assert settings.refresh_interval == 2.0
        assert settings.timeout == 5.0
        assert settings.max_concurrent == 10
        assert settings.cache_ttl == 60.0
        assert settings.namespace == ""
        assert settings.log_level == "info"
        assert settings.insecure_kubelet is False

    def test_environment_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("K8S_MONITOR_NAMESPACE", "prod")

        assert AppSettings().namespace == "prod"

    def test_endpoint_trailing_slash_stripped(self) -> None:
        settings = AppSettings(npu_exporter_endpoint=" http://exporter:8082/ ")
        assert settings.npu_exporter_endpoint == "http://exporter:8082"


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "monitor.yaml"
        path.write_text("namespace: team-a\nrefresh-interval: 5\nlog_level: DEBUG\n")

        settings = ConfigManager.load(path)

        assert settings.namespace == "team-a"
        assert settings.refresh_interval == 5.0
        assert settings.log_level == "debug"

    def test_overrides_beat_file(self, tmp_path: Path) -> None:
        path = tmp_path / "monitor.yaml"
        path.write_text("namespace: team-a\nmax_concurrent: 4\n")

        settings = ConfigManager.load(path, namespace="team-b", max_concurrent=None)

        assert settings.namespace == "team-b"
        assert settings.max_concurrent == 4

    def test_file_beats_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("K8S_MONITOR_NAMESPACE", "from-env")
        path = tmp_path / "monitor.yaml"
        path.write_text("namespace: from-file\n")

        assert ConfigManager.load(path).namespace == "from-file"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ConfigManager.load(path).refresh_interval == 2.0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="cannot read config file"):
            ConfigManager.load(tmp_path / "absent.yaml")

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigLoadError, match="must contain a mapping"):
            ConfigManager.load(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("namespace: [unclosed\n")

        with pytest.raises(ConfigLoadError, match="invalid YAML"):
            ConfigManager.load(path)

    @pytest.mark.parametrize(
        "overrides",
        [{"log_level": "verbose"}, {"refresh_interval": 0}, {"max_concurrent": 0}],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ConfigLoadError, match="invalid settings"):
            ConfigManager.load(**overrides)
