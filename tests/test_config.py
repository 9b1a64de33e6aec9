from __future__ import annotations

import ssl

import pytest

from muhimbi_ocr.core.config import DEFAULT_BASE_URL, Settings, get_settings
from muhimbi_ocr.infrastructure.clients.muhimbi_http import MuhimbiHttpClient, build_ssl_context


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MUHIMBI_API_KEY", raising=False)
    settings = Settings(_env_file=None)

    assert settings.API_KEY.get_secret_value() == ""
    assert settings.BASE_URL == DEFAULT_BASE_URL
    assert settings.TIMEOUT_MINUTES == 15
    assert settings.SKIP_CERTIFICATE_VALIDATION is False
    assert settings.POLL_INTERVAL_SECONDS == 5
    assert settings.LANGUAGE == "English"
    assert settings.PERFORMANCE == "Slow but accurate"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MUHIMBI_API_KEY", "secret")
    monkeypatch.setenv("MUHIMBI_TIMEOUT_MINUTES", "2")
    monkeypatch.setenv("MUHIMBI_SKIP_CERTIFICATE_VALIDATION", "true")

    settings = get_settings()

    assert settings.API_KEY.get_secret_value() == "secret"
    assert "secret" not in repr(settings)
    assert settings.TIMEOUT_MINUTES == 2
    assert settings.SKIP_CERTIFICATE_VALIDATION is True


@pytest.mark.asyncio
async def test_client_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MUHIMBI_API_KEY", "secret")
    monkeypatch.setenv("MUHIMBI_TIMEOUT_MINUTES", "2")

    client = MuhimbiHttpClient.from_settings(get_settings())
    try:
        assert client.timeout == 120.0
        assert client.base_url == DEFAULT_BASE_URL
    finally:
        await client.aclose()


def test_ssl_context_pins_tls_versions() -> None:
    ctx = build_ssl_context()
    assert ctx.minimum_version == ssl.TLSVersion.TLSv1_2
    assert ctx.maximum_version == ssl.TLSVersion.TLSv1_3
    assert ctx.verify_mode == ssl.CERT_REQUIRED
    assert ctx.check_hostname is True


def test_ssl_context_can_skip_validation() -> None:
    ctx = build_ssl_context(skip_certificate_validation=True)
    assert ctx.verify_mode == ssl.CERT_NONE
    assert ctx.check_hostname is False
