# src/perp_orders/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from perp_orders.core.models.enums import MarketPriceMode

_ENV_MAP = {
    "ORDERS_API_URL": "api_url",
    "ORDERS_HTTP_TIMEOUT": "http_timeout",
    "ORDERS_SUBMIT_TIMEOUT": "submit_timeout",
    "ORDERS_MARKET_PRICE_MODE": "market_price_mode",
    "ORDERS_LOG_LEVEL": "log_level",
}


@dataclass(frozen=True, slots=True)
class Settings:
    api_url: str = "http://localhost:3001"
    http_timeout: float = 10.0
    submit_timeout: float = 30.0
    market_price_mode: MarketPriceMode = MarketPriceMode.REFERENCE
    log_level: str = "INFO"

    def validated(self) -> "Settings":
        if not self.api_url.startswith(("http://", "https://")):
            raise ValueError(f"api_url must be http(s): {self.api_url!r}")

        http_timeout = float(self.http_timeout)
        submit_timeout = float(self.submit_timeout)
        if http_timeout <= 0 or submit_timeout <= 0:
            raise ValueError("timeouts must be positive")

        level = str(self.log_level).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {self.log_level!r}")

        mode = getattr(self.market_price_mode, "value", self.market_price_mode)

        return replace(
            self,
            http_timeout=http_timeout,
            submit_timeout=submit_timeout,
            market_price_mode=MarketPriceMode(str(mode).lower()),
            log_level=level,
        )


# -----------------------------------------------------------------------------
# helpers
# -----------------------------------------------------------------------------
def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data.get("orders", data)


def load_settings(path: str | Path | None = None, *, dotenv: bool = True) -> Settings:
    """
    defaults <- YAML file (optional, `orders:` section or top level) <- env.

    .env is loaded first (existing env vars win).
    """
    if dotenv:
        load_dotenv()

    known = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}

    if path is not None:
        for k, v in _load_yaml(Path(path)).items():
            if k not in known:
                raise ValueError(f"unknown config key: {k!r}")
            values[k] = v

    for env_name, attr in _ENV_MAP.items():
        v = os.getenv(env_name)
        if v is not None and v.strip():
            values[attr] = v.strip()

    return Settings(**values).validated()
