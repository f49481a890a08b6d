import pytest

import nt_leaderboard.config as config
from nt_leaderboard import paths
from nt_leaderboard.errors import ConfigError


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for env_name in config.ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)


def test_defaults_match_documented_values():
    settings = config.Settings()
    assert settings.anomaly_threshold == 2600
    assert settings.speed_method == "weighted"
    assert settings.data_current == "AfterEventData.json"
    assert settings.api_before == "API_before.ndjson"
    assert settings.rotate_source_url is None


def test_load_settings_reads_yaml_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("anomaly_threshold: 3000\nspeed_method: Snapshot\nsource_root: /srv/nt\n", encoding="utf-8")

    settings = config.load_settings(config_path)

    assert settings.anomaly_threshold == 3000
    assert settings.speed_method == "snapshot"
    assert settings.source_root == "/srv/nt"


def test_load_settings_missing_file_returns_defaults(tmp_path):
    assert config.load_settings(tmp_path / "nope.yaml") == config.Settings()


def test_load_settings_rejects_non_mapping(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        config.load_settings(config_path)


def test_unknown_keys_are_ignored_with_warning(caplog):
    caplog.set_level("WARNING")
    settings = config.settings_from_mapping({"colour": "blue", "max_workers": 2})
    assert settings.max_workers == 2
    assert "ignoring unknown setting 'colour'" in caplog.text


@pytest.mark.parametrize(
    ("data", "match"),
    [
        ({"speed_method": "median"}, "speed_method"),
        ({"anomaly_threshold": "lots"}, "anomaly_threshold"),
        ({"anomaly_threshold": 0}, "anomaly_threshold"),
        ({"timeout_sec": True}, "timeout_sec"),
    ],
)
def test_invalid_values_raise_config_error(data, match):
    with pytest.raises(ConfigError, match=match):
        config.settings_from_mapping(data)


def test_environment_overrides_file_values(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("anomaly_threshold: 3000\n", encoding="utf-8")
    monkeypatch.setenv("NT_ANOMALY_THRESHOLD", "1500")
    monkeypatch.setenv("NT_ROTATE_SOURCE_URL", "https://example.test/top")

    settings = config.load_and_apply_settings(config_path)

    assert settings.anomaly_threshold == 1500
    assert settings.rotate_source_url == "https://example.test/top"


def test_configure_runtime_loads_dotenv(tmp_path, monkeypatch):
    calls = {"dotenv": 0}
    monkeypatch.setattr(config, "load_dotenv", lambda *_a, **_k: calls.__setitem__("dotenv", calls["dotenv"] + 1))

    settings = config.configure_runtime(tmp_path / "missing.yaml")

    assert calls["dotenv"] == 1
    assert settings == config.Settings()


def test_settings_defaults_work_outside_a_checkout(tmp_path, monkeypatch):
    monkeypatch.setattr(paths, "ROOT_MARKERS", ("no-such-marker.toml",))
    monkeypatch.chdir(tmp_path)

    assert config.Settings().source_root == str(tmp_path / "data")
    assert config.load_settings() == config.Settings()
