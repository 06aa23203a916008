"""Worker process for the pending-change sweep.

Future-dated change ledger entries are applied here once their effective
date arrives. Year-end renewal is checked on the same loop so a marker
dated in advance still rolls entitlement over after its date has passed.
"""

from __future__ import annotations

import asyncio
import logging

from rota.config import get_settings
from rota.db import get_session_factory
from rota.models.base import local_now

logger = logging.getLogger(__name__)


async def run_sweep_once() -> None:
    """Run one pending-change sweep and one renewal check, each in its own session."""
    from rota.db import unit_of_work
    from rota.services.change_ledger import apply_pending_changes
    from rota.services.rollover import check_and_renew

    session_factory = get_session_factory()
    now = local_now()

    try:
        async with session_factory() as session:
            await apply_pending_changes(session, now)
    except Exception:
        logger.exception("Pending change sweep failed at %s", now)

    try:
        async with session_factory() as session, unit_of_work(session):
            renewal = await check_and_renew(session, now.date(), now=now)
        if renewal.rollover is not None:
            logger.info(
                "Renewed holiday year from marker %s: created=%d",
                renewal.marker_date,
                renewal.rollover.created,
            )
    except Exception:
        logger.exception("Renewal check failed at %s", now)


async def run_sweep_loop() -> None:
    """Main worker loop."""
    interval = get_settings().pending_change_interval_seconds
    logger.info("Pending change worker started (interval=%ss)", interval)

    while True:
        await run_sweep_once()
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(level=get_settings().log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(run_sweep_loop())


if __name__ == "__main__":
    main()
