"""Tests for environment-based configuration.

WHY: A missing secret key would otherwise only surface as a signature
rejection from OneSky. load_credentials() must fail early and say which
variable is missing.

HOW: monkeypatch sets and clears the environment variables.
"""

from __future__ import annotations

import pytest

from onesky import config


class TestLoadCredentials:
    def test_reads_both_keys(self, monkeypatch):
        monkeypatch.setenv("ONESKY_API_KEY", " public ")
        monkeypatch.setenv("ONESKY_API_SECRET", "secret")
        assert config.load_credentials() == ("public", "secret")

    def test_missing_public_key(self, monkeypatch):
        monkeypatch.delenv("ONESKY_API_KEY", raising=False)
        monkeypatch.setenv("ONESKY_API_SECRET", "secret")
        with pytest.raises(ValueError, match="ONESKY_API_KEY"):
            config.load_credentials()

    def test_blank_secret_key(self, monkeypatch):
        monkeypatch.setenv("ONESKY_API_KEY", "public")
        monkeypatch.setenv("ONESKY_API_SECRET", "   ")
        with pytest.raises(ValueError, match="ONESKY_API_SECRET"):
            config.load_credentials()


class TestDefaults:
    def test_timeout_is_fifteen_minutes(self):
        assert config.REQUEST_TIMEOUT_S == 900

    def test_default_page_size(self):
        assert config.DEFAULT_PER_PAGE == 100

    def test_default_endpoint(self):
        assert config.DEFAULT_BASE_URL == "https://platform.api.onesky.io/1/"
