# src/perp_orders/run_smoke.py
from __future__ import annotations

import asyncio
import os

from perp_orders.config import load_settings
from perp_orders.core.utils.fixed_point import lots_to_decimal
from perp_orders.exchanges.wallet.local_signer import LocalAccountSigner
from perp_orders.logging_setup import setup_logging
from perp_orders.pipeline import OrderPipeline


async def _run() -> None:
    settings = load_settings(os.getenv("ORDERS_CONFIG") or None)
    logger = setup_logging(settings.log_level)

    logger.info("=== ORDERS SMOKE START ===")

    key = os.getenv("ORDERS_PRIVATE_KEY")
    if not key:
        raise SystemExit("ORDERS_PRIVATE_KEY env var is required")

    pipeline = OrderPipeline.from_settings(settings, signer=LocalAccountSigner(key))
    try:
        orders = await pipeline.load_orders()
        logger.info("owner=%s orders=%d", pipeline.registry.owner, len(orders))
        for o in orders:
            logger.info(
                "%s %s %s size=%s price=%s filled=%.0f%% %s",
                o.id, o.pair_id, "BUY" if o.side else "SELL",
                lots_to_decimal(o.amount), lots_to_decimal(o.price),
                o.fill_ratio * 100, o.status.value,
            )
    finally:
        pipeline.close()


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
