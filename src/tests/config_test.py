"""Tests for service configuration loading."""

import json

import pytest

from src.core.config import DEFAULT_PORT, ROOT, load_config
from src.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("PORT", "HOST", "LOG_LEVEL", "CCXT_RPC_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.setattr("src.core.config.load_dotenv", lambda *a, **k: False)


def write_config(tmp_path, data):
    path = tmp_path / "service_config.json"
    with open(path, "w") as f:
        json.dump(data, f)
    return path


class TestLoadConfig:
    """JSON file plus environment overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.json", registry={})
        assert config.host == "0.0.0.0"
        assert config.port == DEFAULT_PORT
        assert config.log_level == "INFO"
        assert config.log_path is None
        assert config.grace_period_sec == 5.0

    def test_values_from_file(self, tmp_path):
        path = write_config(tmp_path, {
            "host": "127.0.0.1",
            "port": 6000,
            "log_level": "debug",
            "log_path": str(tmp_path / "logs" / "svc.log"),
            "grace_period_sec": 1,
        })
        config = load_config(path, registry={})
        assert config.address == "127.0.0.1:6000"
        assert config.log_level == "DEBUG"
        assert config.log_path == tmp_path / "logs" / "svc.log"
        assert config.grace_period_sec == 1.0

    def test_relative_log_path_resolves_from_root(self, tmp_path):
        path = write_config(tmp_path, {"log_path": "logs/x.log"})
        assert load_config(path, registry={}).log_path == ROOT / "logs" / "x.log"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, {"port": 6000, "host": "127.0.0.1"})
        monkeypatch.setenv("PORT", "7000")
        monkeypatch.setenv("HOST", "localhost")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        config = load_config(path, registry={})
        assert config.port == 7000
        assert config.host == "localhost"
        assert config.log_level == "WARNING"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, {"port": 6100})
        monkeypatch.setenv("CCXT_RPC_CONFIG", str(path))
        assert load_config(registry={}).port == 6100

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(path, registry={})

    def test_non_object_json(self, tmp_path):
        path = write_config(tmp_path, [1, 2])
        with pytest.raises(ConfigError):
            load_config(path, registry={})

    def test_bad_port(self, tmp_path):
        path = write_config(tmp_path, {"port": "abc"})
        with pytest.raises(ConfigError):
            load_config(path, registry={})


class TestExchangeRegistry:
    """The allow-list resolves to ccxt async classes once, at load time."""

    def test_allow_list(self, tmp_path):
        path = write_config(tmp_path, {"exchanges": ["binance", "kraken"]})
        config = load_config(path)
        assert set(config.exchanges) == {"binance", "kraken"}

    def test_empty_allow_list_registers_everything(self, tmp_path):
        import ccxt.async_support as ccxt_async

        config = load_config(write_config(tmp_path, {"exchanges": []}))
        assert set(config.exchanges) == set(ccxt_async.exchanges)

    def test_unknown_id_in_allow_list(self, tmp_path):
        path = write_config(tmp_path, {"exchanges": ["binance", "not-an-exchange"]})
        with pytest.raises(ConfigError, match="not-an-exchange"):
            load_config(path)

    def test_registry_is_read_only(self, tmp_path):
        config = load_config(tmp_path / "absent.json", registry={"mockex": dict})
        with pytest.raises(TypeError):
            config.exchanges["other"] = dict
