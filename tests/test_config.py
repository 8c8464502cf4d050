import pytest
from pydantic import ValidationError

from imgproxy.shared.config import CORS_HEADERS, ProxyConfig, Settings, parse_host_list


def test_parse_host_list_trims_lowercases_and_drops_blanks():
    assert parse_host_list(" Images.Example.com,,cdn.example.org , ") == frozenset(
        {"images.example.com", "cdn.example.org"}
    )
    assert parse_host_list("") == frozenset()


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("WHITELISTED_HOSTS", "a.example.com,B.example.com")
    monkeypatch.setenv("INPUT_ENCODING", "raw")
    monkeypatch.setenv("ACCEPT_JSON", "false")
    monkeypatch.setenv("CORS_ENABLED", "true")
    monkeypatch.setenv("UPSTREAM_TIMEOUT", "2.5")

    config = ProxyConfig.from_settings(Settings())

    assert config.allowed_hosts == frozenset({"a.example.com", "b.example.com"})
    assert config.input_encoding == "raw"
    assert config.content_type_prefixes == ("image/",)
    assert config.static_headers == CORS_HEADERS
    assert config.upstream_timeout == 2.5


def test_defaults(monkeypatch):
    for name in ("WHITELISTED_HOSTS", "INPUT_ENCODING", "ACCEPT_JSON", "CORS_ENABLED", "UPSTREAM_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    config = ProxyConfig.from_settings(Settings())

    assert config.allowed_hosts == frozenset()
    assert config.input_encoding == "base64"
    assert config.content_type_prefixes == ("image/", "application/json")
    assert config.static_headers == {}
    assert config.upstream_timeout is None


def test_invalid_input_encoding_rejected():
    with pytest.raises(ValidationError):
        Settings(input_encoding="hex")


def test_static_headers_are_a_copy():
    config = ProxyConfig(cors_enabled=True)

    config.static_headers["X-Extra"] = "1"

    assert "X-Extra" not in config.static_headers
