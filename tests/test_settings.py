"""
Tests for environment settings and token helpers.
"""

import pytest

from auth import security
from core import settings


def test_env_int_falls_back_on_garbage(monkeypatch):
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "lots")
    assert settings.pool_max_size() == 5


def test_pool_max_never_below_min(monkeypatch):
    monkeypatch.setenv("DB_POOL_MIN_SIZE", "8")
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "2")
    assert settings.pool_max_size() == 8


@pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False), ("", False)])
def test_strict_missing(monkeypatch, raw, expected):
    monkeypatch.setenv("DASHBOARD_STRICT_MISSING", raw)
    assert settings.strict_missing() is expected


def test_cors_origins(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    assert settings.cors_origins() == ["https://a.example", "https://b.example"]


def test_access_token_roundtrip_claims():
    token = security.build_access_token(user_id=5, projects=[1, 3])
    claims = security.decode_access_token(token)

    assert claims["sub"] == "5"
    assert security.can_access_project(claims, 3)
    assert not security.can_access_project(claims, 2)


def test_unrestricted_token_reaches_any_project():
    claims = security.decode_access_token(security.build_access_token(user_id=5))
    assert security.can_access_project(claims, 99)


def test_wrong_secret_rejected(monkeypatch):
    token = security.build_access_token(user_id=5)
    monkeypatch.setenv("JWT_SECRET", "another-secret-that-is-long-enough-for-hs256")
    with pytest.raises(security.AuthSecurityError):
        security.decode_access_token(token)
