"""Tests for settings loading."""

import pytest
from pathlib import Path

from config import load_config, SettingsError, DEFAULTS
from config.lib.load_settings_conf import ENV_OVERRIDES, validate_settings

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the host environment out of the loaded settings."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)

def write_settings(directory: Path, body: str) -> None:
    (directory / "settings.conf").write_text(body)

def test_missing_file_uses_defaults(tmp_path):
    """Test loading without a settings.conf."""
    settings = load_config(str(tmp_path))

    assert settings["default_max_supply"] == 100
    assert settings["gateway_timeout"] == 30
    assert settings["api_port"] == 3000
    assert settings["currency"] == "ETH"
    assert settings["default_price"] == "0.001"
    assert Path(settings["data_dir"]).is_absolute()

def test_settings_file_overrides_defaults(tmp_path):
    """Test values from settings.conf."""
    write_settings(tmp_path, (
        "[DEFAULT]\n"
        "data_dir =\n"
        "gateway_url = https://engine.example.com/\n"
        "default_price = 0.005\n"
        "default_max_supply = 50\n"
        "api_port = 8080\n"
    ))
    settings = load_config(str(tmp_path))

    assert settings["data_dir"] == ""
    assert settings["gateway_url"] == "https://engine.example.com"
    assert settings["default_price"] == "0.005"
    assert settings["default_max_supply"] == 50
    assert settings["api_port"] == 8080
    assert settings["chain"] == DEFAULTS["chain"]

def test_environment_overrides(tmp_path, monkeypatch):
    """Test secrets supplied through the environment."""
    write_settings(tmp_path, "[DEFAULT]\nsecret_key = from-file\n")
    monkeypatch.setenv("THIRDWEB_SECRET_KEY", "from-env")
    monkeypatch.setenv("CONTRACT_ADDRESS", "0x5FbDB2315678afecb367f032d93F642f64180aa3")
    monkeypatch.setenv("PORT", "4000")

    settings = load_config(str(tmp_path))
    assert settings["secret_key"] == "from-env"
    assert settings["contract_address"] == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    assert settings["api_port"] == 4000

def test_empty_default_section(tmp_path):
    """Test a settings.conf with no [DEFAULT] values."""
    write_settings(tmp_path, "[other]\nkey = value\n")

    with pytest.raises(SettingsError) as exc:
        load_config(str(tmp_path))
    assert "[DEFAULT]" in str(exc.value)

@pytest.mark.parametrize("key,value", [
    ("default_max_supply", "0"),
    ("default_max_supply", "lots"),
    ("gateway_timeout", "-1"),
    ("api_port", "http"),
    ("default_price", "free"),
    ("default_price", "0")
])
def test_invalid_values(key, value):
    """Test validation of numeric settings."""
    with pytest.raises(SettingsError) as exc:
        validate_settings(dict(DEFAULTS, data_dir="", **{key: value}))
    assert key in str(exc.value)
