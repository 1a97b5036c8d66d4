import logging

import pytest

from perp_orders.config import Settings, load_settings
from perp_orders.core.models.enums import MarketPriceMode
from perp_orders.logging_setup import setup_logging

ENV_KEYS = (
    "ORDERS_API_URL",
    "ORDERS_HTTP_TIMEOUT",
    "ORDERS_SUBMIT_TIMEOUT",
    "ORDERS_MARKET_PRICE_MODE",
    "ORDERS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults():
    s = load_settings(dotenv=False)
    assert s == Settings()
    assert s.submit_timeout == 30.0
    assert s.market_price_mode is MarketPriceMode.REFERENCE


def test_yaml_then_env_override(tmp_path, monkeypatch):
    cfg = tmp_path / "orders.yaml"
    cfg.write_text(
        "orders:\n"
        "  api_url: http://matching:3001\n"
        "  submit_timeout: 12\n"
        "  market_price_mode: omit\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ORDERS_SUBMIT_TIMEOUT", "45")

    s = load_settings(cfg, dotenv=False)

    assert s.api_url == "http://matching:3001"
    assert s.submit_timeout == 45.0
    assert s.market_price_mode is MarketPriceMode.OMIT


def test_unknown_yaml_key(tmp_path):
    cfg = tmp_path / "orders.yaml"
    cfg.write_text("api_urll: http://x\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(cfg, dotenv=False)


@pytest.mark.parametrize(
    "env, value",
    [
        ("ORDERS_API_URL", "ftp://x"),
        ("ORDERS_SUBMIT_TIMEOUT", "0"),
        ("ORDERS_HTTP_TIMEOUT", "soon"),
        ("ORDERS_MARKET_PRICE_MODE", "mid"),
        ("ORDERS_LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values(monkeypatch, env, value):
    monkeypatch.setenv(env, value)
    with pytest.raises(ValueError):
        load_settings(dotenv=False)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml", dotenv=False)


def test_setup_logging_returns_package_logger():
    logger = setup_logging("debug")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "perp_orders"
