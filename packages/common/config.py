from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import (
    BUY_SIDE,
    CHUNK_SIZE_DAYS,
    PAGE_DELAY_MS,
    PAGE_LIMIT,
    SETTLEMENT_CURRENCY,
    TRADE_SYSTEM_ID,
)
from .types import GroupBy

ENV_API_KEY = "BYBIT_API_KEY"
ENV_API_SECRET = "BYBIT_API_SECRET"


def normalize_currency(code: str) -> str:
    s = code.strip().upper()
    if not s:
        raise ValueError("currency code must be non-empty")
    return s


class BybitConfig(BaseModel):
    rest_url: str = "https://api.bybit.com"

    # Credentials (usually injected from the environment)
    api_key: str = ""
    api_secret: str = ""

    account_type: str = "UNIFIED"
    category: str = "spot"
    recv_window_ms: int = Field(5000, ge=1)
    request_timeout_s: int = Field(15, ge=1)

    @field_validator("rest_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


class FetchConfig(BaseModel):
    chunk_size_days: int = Field(CHUNK_SIZE_DAYS, ge=1)
    page_limit: int = Field(PAGE_LIMIT, ge=1, le=50)
    page_delay_ms: int = Field(PAGE_DELAY_MS, ge=0)


class LedgerConfig(BaseModel):
    group_by: GroupBy = "tradeId"
    settlement_currency: str = SETTLEMENT_CURRENCY
    trade_system_id: str = TRADE_SYSTEM_ID
    buy_side: str = BUY_SIDE
    timezone: str = "UTC"

    @field_validator("settlement_currency")
    @classmethod
    def _normalize_settlement(cls, v: str) -> str:
        return normalize_currency(v)

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone {v!r}") from e
        return v


class OutputConfig(BaseModel):
    out_dir: str = "out"
    logs_dir: str = "logs"


class ExporterConfig(BaseModel):
    bybit: BybitConfig = Field(default_factory=BybitConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def _maybe_load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML structure in {path}")
    return data


def load_exporter_config(
    path: Path = Path("config/exporter.yaml"),
    env: Mapping[str, str] | None = None,
) -> ExporterConfig:
    """
    YAML is optional - every field has a default. Credentials from the
    environment take precedence over the file.
    """
    raw = _maybe_load_yaml(path)
    cfg = ExporterConfig.model_validate(raw) if raw else ExporterConfig()

    env = os.environ if env is None else env
    api_key = env.get(ENV_API_KEY, "").strip()
    api_secret = env.get(ENV_API_SECRET, "").strip()
    if api_key or api_secret:
        cfg = cfg.model_copy(
            update={
                "bybit": cfg.bybit.model_copy(
                    update={
                        "api_key": api_key or cfg.bybit.api_key,
                        "api_secret": api_secret or cfg.bybit.api_secret,
                    }
                )
            }
        )

    return cfg
