"""Tests for configuration loading and feature flags."""

from __future__ import annotations

import json

import pytest

from logseq_mcp.clients.config import DEFAULT_API_URL, FeatureFlags, LogseqConfig, load_config
from logseq_mcp.core.exceptions import ConfigError


def _write(tmp_path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return str(path)


class TestLoadConfig:
    def test_minimal(self, tmp_path):
        config = load_config(_write(tmp_path, {"authToken": "secret"}))

        assert config.auth_token == "secret"
        assert config.api_url == DEFAULT_API_URL
        assert config.features.use_datalog is False

    def test_full(self, tmp_path):
        config = load_config(
            _write(
                tmp_path,
                {
                    "authToken": "secret",
                    "apiUrl": "http://localhost:9999/",
                    "features": {"useDatalog": {"conceptNetwork": True}},
                },
            )
        )

        assert config.endpoint == "http://localhost:9999/api"
        assert config.features.datalog_enabled("conceptNetwork")
        assert not config.features.datalog_enabled("buildContext")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Configuration file not found"):
            load_config(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(_write(tmp_path, "{not json"))

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(_write(tmp_path, [1, 2]))

    @pytest.mark.parametrize("data", [{}, {"authToken": ""}, {"apiUrl": "http://x"}])
    def test_auth_token_required(self, tmp_path, data):
        with pytest.raises(ConfigError, match="authToken is required"):
            load_config(_write(tmp_path, data))

    def test_auth_token_type(self, tmp_path):
        with pytest.raises(ConfigError, match="authToken must be a string"):
            load_config(_write(tmp_path, {"authToken": 42}))

    def test_api_url_type(self, tmp_path):
        with pytest.raises(ConfigError, match="apiUrl must be a string"):
            load_config(_write(tmp_path, {"authToken": "t", "apiUrl": 12}))


class TestFeatureFlags:
    def test_default_is_sequential(self):
        flags = FeatureFlags()
        assert not flags.datalog_enabled("conceptNetwork")

    def test_global_switch(self):
        flags = FeatureFlags.from_dict({"useDatalog": True})
        assert all(
            flags.datalog_enabled(op)
            for op in ("conceptNetwork", "buildContext", "searchByRelationship")
        )

    def test_per_operation(self):
        flags = FeatureFlags.from_dict({"useDatalog": {"buildContext": 1}})
        assert flags.use_datalog == {"buildContext": True}
        assert flags.datalog_enabled("buildContext")
        assert not flags.datalog_enabled("searchByRelationship")

    def test_unknown_operation(self):
        with pytest.raises(ConfigError, match="unknown useDatalog operations: bogus"):
            FeatureFlags.from_dict({"useDatalog": {"bogus": True}})

    def test_bad_type(self):
        with pytest.raises(ConfigError, match="useDatalog must be"):
            FeatureFlags.from_dict({"useDatalog": "yes"})

    def test_features_must_be_object(self):
        with pytest.raises(ConfigError):
            FeatureFlags.from_dict(["useDatalog"])

    def test_empty(self):
        assert FeatureFlags.from_dict(None) == FeatureFlags()


class TestLogseqConfig:
    def test_endpoint_strips_trailing_slash(self):
        assert LogseqConfig(auth_token="t", api_url="http://h:1/").endpoint == "http://h:1/api"
