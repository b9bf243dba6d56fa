"""
Service configuration.

Settings are read from ``AUDITSTORE_*`` environment variables, after a
``.env`` file (if any) has been loaded with python-dotenv. Unset variables
fall back to the Walrus and Sui testnet defaults.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from auditstore.constants import MAX_DEPLOYMENT_SIZE_BYTES
from auditstore.ledger.types import DEFAULT_SUI_RPC_URL, SuiClientConfig
from auditstore.storage.endpoints import (
    TESTNET_AGGREGATORS,
    TESTNET_PUBLISHERS,
    EndpointRegistry,
)
from auditstore.storage.types import ProbeConfig, RetrieverConfig, UploaderConfig

__all__ = ["ServiceSettings", "load_settings", "ENV_PREFIX"]

ENV_PREFIX = "AUDITSTORE_"


class ServiceSettings(BaseModel):
    """Runtime settings for the HTTP service and its components."""

    model_config = ConfigDict(frozen=True)

    sui_rpc_url: str = DEFAULT_SUI_RPC_URL
    publishers: Tuple[str, ...] = TESTNET_PUBLISHERS
    aggregators: Tuple[str, ...] = TESTNET_AGGREGATORS
    deployment_endpoint: Optional[str] = None
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    max_deployment_bytes: int = Field(default=MAX_DEPLOYMENT_SIZE_BYTES, ge=1)

    uploader: UploaderConfig = Field(default_factory=UploaderConfig)
    retriever: RetrieverConfig = Field(default_factory=RetrieverConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    def registry(self) -> EndpointRegistry:
        return EndpointRegistry(self.publishers, self.aggregators)

    def uploader_config(self) -> UploaderConfig:
        if self.deployment_endpoint:
            return self.uploader.model_copy(
                update={"deployment_endpoint": self.deployment_endpoint}
            )
        return self.uploader

    def sui_config(self) -> SuiClientConfig:
        return SuiClientConfig(rpc_url=self.sui_rpc_url)


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    *,
    dotenv: bool = True,
) -> ServiceSettings:
    """
    Build settings from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``
        dotenv: Load a ``.env`` file into ``os.environ`` first

    Returns:
        ServiceSettings
    """
    if dotenv and environ is None:
        load_dotenv()
    env = os.environ if environ is None else environ

    values = {}
    if env.get(f"{ENV_PREFIX}SUI_RPC_URL"):
        values["sui_rpc_url"] = env[f"{ENV_PREFIX}SUI_RPC_URL"]
    if env.get(f"{ENV_PREFIX}PUBLISHERS"):
        values["publishers"] = _split_list(env[f"{ENV_PREFIX}PUBLISHERS"])
    if env.get(f"{ENV_PREFIX}AGGREGATORS"):
        values["aggregators"] = _split_list(env[f"{ENV_PREFIX}AGGREGATORS"])
    if env.get(f"{ENV_PREFIX}DEPLOYMENT_ENDPOINT"):
        values["deployment_endpoint"] = env[f"{ENV_PREFIX}DEPLOYMENT_ENDPOINT"]
    if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
        values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
    if env.get(f"{ENV_PREFIX}HOST"):
        values["host"] = env[f"{ENV_PREFIX}HOST"]
    if env.get(f"{ENV_PREFIX}PORT"):
        values["port"] = int(env[f"{ENV_PREFIX}PORT"])
    if env.get(f"{ENV_PREFIX}MAX_DEPLOYMENT_BYTES"):
        values["max_deployment_bytes"] = int(env[f"{ENV_PREFIX}MAX_DEPLOYMENT_BYTES"])

    return ServiceSettings(**values)
