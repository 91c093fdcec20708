"""Tests for configuration loading."""
import pytest
import yaml

from xo_sd.config import load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["XOA_URL", "XOA_TOKEN", "XOA_TOKEN_PATH", "LOG_LEVEL", "PORT"]:
        monkeypatch.delenv(name, raising=False)


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_environment_only(monkeypatch, tmp_path):
    token_file = tmp_path / "token"
    token_file.write_text("secret-token\n")
    monkeypatch.setenv("XOA_URL", "https://xoa.example.org/")
    monkeypatch.setenv("XOA_TOKEN_PATH", str(token_file))

    config = load_config()

    assert config.xo.url == "https://xoa.example.org"
    assert config.xo.token == "secret-token"
    assert config.global_.port == 8000
    assert config.discovery.tag_prefix == "prom"


def test_yaml_file(tmp_path):
    config_path = write_yaml(tmp_path / "config.yaml", {
        "global": {"log_level": "debug", "port": 9000},
        "xo": {"url": "http://xoa.local", "token": "abc", "verify_tls": False},
        "discovery": {"tag_prefix": "sd"},
    })

    config = load_config(config_path)

    assert config.global_.log_level == "DEBUG"
    assert config.global_.port == 9000
    assert config.xo.token == "abc"
    assert config.xo.verify_tls is False
    assert config.discovery.tag_prefix == "sd"


def test_environment_overrides_yaml(monkeypatch, tmp_path):
    config_path = write_yaml(tmp_path / "config.yaml", {
        "xo": {"url": "http://xoa.local", "token": "abc"},
    })
    monkeypatch.setenv("XOA_URL", "https://other.example.org")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("PORT", "8081")

    config = load_config(config_path)

    assert config.xo.url == "https://other.example.org"
    assert config.global_.log_level == "WARNING"
    assert config.global_.port == 8081


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_missing_url():
    with pytest.raises(ValueError, match="Configuration validation failed"):
        load_config()


def test_missing_credentials(monkeypatch):
    monkeypatch.setenv("XOA_URL", "https://xoa.example.org")
    with pytest.raises(ValueError, match="token"):
        load_config()


def test_missing_token_file(monkeypatch, tmp_path):
    monkeypatch.setenv("XOA_URL", "https://xoa.example.org")
    monkeypatch.setenv("XOA_TOKEN_PATH", str(tmp_path / "nope"))
    with pytest.raises(FileNotFoundError):
        load_config()


@pytest.mark.parametrize("prefix", ["", "prom:"])
def test_invalid_tag_prefix(tmp_path, prefix):
    config_path = write_yaml(tmp_path / "config.yaml", {
        "xo": {"url": "http://xoa.local", "token": "abc"},
        "discovery": {"tag_prefix": prefix},
    })
    with pytest.raises(ValueError, match="Tag prefix"):
        load_config(config_path)


def test_invalid_url(monkeypatch):
    monkeypatch.setenv("XOA_URL", "xoa.example.org")
    monkeypatch.setenv("XOA_TOKEN", "abc")
    with pytest.raises(ValueError, match="http"):
        load_config()


def test_non_mapping_yaml(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="Configuration validation failed"):
        load_config(str(config_path))


def test_non_mapping_section(tmp_path):
    config_path = write_yaml(tmp_path / "config.yaml", {"xo": "https://xoa.local"})

    with pytest.raises(ValueError, match="section 'xo' must be a mapping"):
        load_config(config_path)


def test_null_xo_section_uses_environment(monkeypatch, tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("xo:\nglobal:\n  port: 9000\n")
    monkeypatch.setenv("XOA_URL", "https://xoa.example.org")
    monkeypatch.setenv("XOA_TOKEN", "abc")

    config = load_config(str(config_path))

    assert config.xo.url == "https://xoa.example.org"
    assert config.global_.port == 9000


def test_null_xo_section_without_environment(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("xo: null\n")

    with pytest.raises(ValueError, match="Configuration validation failed"):
        load_config(str(config_path))
