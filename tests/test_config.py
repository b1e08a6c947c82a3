"""Tests for the configuration system."""

import os
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from polyflow.config import (
    DEFAULT_DEPLOYMENT_ID,
    FlowConfig,
    PolyflowConfig,
    SubgraphConfig,
)


class TestSubgraphConfig:
    def test_defaults(self):
        cfg = SubgraphConfig()
        assert cfg.deployment_id == DEFAULT_DEPLOYMENT_ID
        assert cfg.entity == "orderFilleds"
        assert cfg.page_size == 1000

    def test_hosted_endpoint_without_key(self):
        cfg = SubgraphConfig(deployment_id="QmABC")
        assert cfg.endpoint == "https://api.thegraph.com/subgraphs/id/QmABC"

    def test_gateway_endpoint_with_key(self):
        cfg = SubgraphConfig(deployment_id="QmABC", api_key="k123")
        assert cfg.endpoint == "https://gateway.thegraph.com/api/k123/subgraphs/id/QmABC"

    def test_explicit_url_wins(self):
        cfg = SubgraphConfig(api_key="k123", url="http://localhost:8000/subgraphs/name/pm")
        assert cfg.endpoint == "http://localhost:8000/subgraphs/name/pm"

    def test_rejects_unknown_entity(self):
        with pytest.raises(ValidationError):
            SubgraphConfig(entity="accounts")

    def test_page_size_capped(self):
        with pytest.raises(ValidationError):
            SubgraphConfig(page_size=5000)


class TestFlowConfig:
    def test_defaults(self):
        cfg = FlowConfig()
        assert cfg.timeframe == "24h"
        assert cfg.large_order_threshold == Decimal("10000")
        assert cfg.whale_limit == 10

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            FlowConfig(large_order_threshold=-1)


class TestPolyflowConfig:
    def test_defaults(self):
        cfg = PolyflowConfig()
        assert cfg.subgraph.entity == "orderFilleds"
        assert cfg.flow.timeframe == "24h"

    def test_from_toml(self, tmp_path):
        toml_content = """\
[subgraph]
deployment_id = "QmTest"
api_key = "secret"
entity = "transactions"
page_size = 500

[flow]
timeframe = "7d"
large_order_threshold = 25000
whale_limit = 5
"""
        toml_file = tmp_path / "test.toml"
        toml_file.write_text(toml_content)

        cfg = PolyflowConfig.from_toml(toml_file)
        assert cfg.subgraph.deployment_id == "QmTest"
        assert cfg.subgraph.api_key == "secret"
        assert cfg.subgraph.entity == "transactions"
        assert cfg.subgraph.page_size == 500
        assert cfg.flow.timeframe == "7d"
        assert cfg.flow.large_order_threshold == Decimal("25000")
        assert cfg.flow.whale_limit == 5

    def test_from_toml_minimal(self, tmp_path):
        """Minimal TOML with only one table should work (everything else defaults)."""
        toml_file = tmp_path / "min.toml"
        toml_file.write_text('[flow]\ntimeframe = "1h"\n')
        cfg = PolyflowConfig.from_toml(toml_file)
        assert cfg.flow.timeframe == "1h"
        assert cfg.subgraph.deployment_id == DEFAULT_DEPLOYMENT_ID

    def test_find_and_load_explicit_path(self, tmp_path):
        toml_file = tmp_path / "explicit.toml"
        toml_file.write_text('[flow]\ntimeframe = "30d"\n')
        cfg = PolyflowConfig.find_and_load(str(toml_file))
        assert cfg is not None
        assert cfg.flow.timeframe == "30d"

    def test_find_and_load_env_var(self, tmp_path):
        toml_file = tmp_path / "env.toml"
        toml_file.write_text('[flow]\nwhale_limit = 3\n')
        with patch.dict(os.environ, {"POLYFLOW_CONFIG": str(toml_file)}):
            cfg = PolyflowConfig.find_and_load()
        assert cfg is not None
        assert cfg.flow.whale_limit == 3

    def test_find_and_load_returns_none_when_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("POLYFLOW_CONFIG", raising=False)
        assert PolyflowConfig.find_and_load() is None

    def test_find_and_load_cwd_polyflow_toml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("POLYFLOW_CONFIG", raising=False)
        (tmp_path / "polyflow.toml").write_text('[flow]\ntimeframe = "7d"\n')
        cfg = PolyflowConfig.find_and_load()
        assert cfg is not None
        assert cfg.flow.timeframe == "7d"
