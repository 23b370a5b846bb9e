"""Tests for environment-driven settings."""

import pytest

from accounts.core.config import Settings


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("http://a.com,http://b.com", ["http://a.com", "http://b.com"]),
        (" http://a.com , ,http://b.com ", ["http://a.com", "http://b.com"]),
        ("http://a.com", ["http://a.com"]),
        ('["http://c.com", "http://d.com"]', ["http://c.com", "http://d.com"]),
        ('["*"]', ["*"]),
    ],
)
def test_cors_origins_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Settings(_env_file=None).CORS_ORIGINS == expected


def test_cors_origins_default_without_env(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    origins = Settings(_env_file=None).CORS_ORIGINS
    assert isinstance(origins, list)
    assert origins
