"""Configuration for polyflow."""

from __future__ import annotations

import logging
import os
import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

HOSTED_SERVICE_URL = "https://api.thegraph.com/subgraphs/id/"
GATEWAY_URL = "https://gateway.thegraph.com/api/{api_key}/subgraphs/id/"

# Polymarket order-filled events subgraph
DEFAULT_DEPLOYMENT_ID = "Qma5ngHGmgW8qea4nEXmFjNtJb9aXDwV75hWekpTKD1fYf"


class SubgraphConfig(BaseModel):
    """GraphQL subgraph connection settings."""

    deployment_id: str = DEFAULT_DEPLOYMENT_ID
    api_key: str = ""
    url: str | None = None
    entity: Literal["orderFilleds", "transactions"] = "orderFilleds"
    page_size: int = Field(default=1000, ge=1, le=1000)
    timeout: float = 30.0

    @property
    def endpoint(self) -> str:
        """Full subgraph URL: explicit url > gateway (with key) > hosted service."""
        if self.url:
            return self.url
        if self.api_key:
            return GATEWAY_URL.format(api_key=self.api_key) + self.deployment_id
        return HOSTED_SERVICE_URL + self.deployment_id


class FlowConfig(BaseModel):
    """Aggregation defaults."""

    timeframe: str = "24h"
    large_order_threshold: Decimal = Field(default=Decimal("10000"), ge=0)
    whale_limit: int = Field(default=10, ge=1)


class PolyflowConfig(BaseModel):
    """Top-level configuration."""

    subgraph: SubgraphConfig = Field(default_factory=SubgraphConfig)
    flow: FlowConfig = Field(default_factory=FlowConfig)

    @classmethod
    def from_toml(cls, path: Path | str) -> PolyflowConfig:
        """Load configuration from a TOML file."""
        path = Path(path)
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, explicit_path: str | None = None) -> PolyflowConfig | None:
        """Find and load config: explicit path > POLYFLOW_CONFIG env > polyflow.toml in cwd.

        Returns None if no config file is found.
        """
        if explicit_path:
            logger.info("Loading config from %s", explicit_path)
            return cls.from_toml(explicit_path)
        env_path = os.environ.get("POLYFLOW_CONFIG")
        if env_path:
            logger.info("Loading config from POLYFLOW_CONFIG=%s", env_path)
            return cls.from_toml(env_path)
        default = Path("polyflow.toml")
        if default.exists():
            logger.info("Loading config from %s", default)
            return cls.from_toml(default)
        return None
