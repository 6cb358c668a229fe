"""Worker process for scheduled balance rebuilds.

Runs an asyncio loop that rebuilds every employee's balances once per
interval, so EARNED accrual advances with service and CASUAL resets on
January 1.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leave_tracker.config import get_settings
from leave_tracker.db import dispose_engine, session_scope
from leave_tracker.services.balance import RebuildRunResult, rebuild_all_balances

logger = logging.getLogger(__name__)


async def run_rebuild_once(today: date | None = None) -> RebuildRunResult:
    """Rebuild all balances as of ``today`` in a fresh session."""
    today = today or date.today()
    async with session_scope() as session:
        result = await rebuild_all_balances(session, today)
    logger.info(
        "Balance rebuild complete for %s: processed=%d rebuilt=%d errors=%d",
        today,
        result.processed,
        result.rebuilt,
        result.errors,
    )
    return result


async def run_rebuild_loop() -> None:
    """Main worker loop."""
    interval = get_settings().rebuild_interval_seconds
    logger.info("Balance worker started, interval=%ds", interval)

    try:
        while True:
            today = date.today()
            try:
                await run_rebuild_once(today)
            except Exception:
                logger.exception("Balance rebuild failed for %s", today)
            await asyncio.sleep(interval)
    finally:
        await dispose_engine()


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(run_rebuild_loop())


if __name__ == "__main__":
    main()
