"""
Backend settlement of instant transfers.

A transfer to a healthy bank leaves its transfer log PENDING with a
``settlement_due_at`` timestamp. ``SettlementWorker`` polls for logs whose
due time has passed and moves them to SETTLED with a fresh settlement
reference. Because the due time lives in the database, settlements that were
pending when the process stopped are picked up on the next start.
"""

import asyncio
from datetime import datetime
from typing import Optional

from instant_transfer.db import crud
from instant_transfer.db.models import BACKEND_SETTLED
from instant_transfer.logging_config import get_logger
from instant_transfer.utils import new_settlement_ref, utcnow

logger = get_logger("instant_transfer.settlement")


async def settle_due_transfers(db, now: Optional[datetime] = None) -> int:
    """
    Settle every PENDING transfer log due at or before ``now``.
    Returns the number of logs settled.
    """
    now = now or utcnow()
    async with db.begin():
        due = await crud.get_due_settlements(db, now)
        for log in due:
            settlement_ref = new_settlement_ref()
            await crud.update_transfer_log_backend_status(
                db, log.transfer_log_id, BACKEND_SETTLED, settlement_ref
            )
            logger.info(
                "Backend settlement: transfer %s settled with reference %s",
                log.transaction_id,
                settlement_ref,
            )
    return len(due)


class SettlementWorker:
    """
    Background loop that settles due transfers every ``poll_seconds``.
    """

    def __init__(self, session_factory, poll_seconds: float = 1.0):
        self.session_factory = session_factory
        self.poll_seconds = poll_seconds
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="settlement-worker")
        logger.info("Settlement worker started (poll=%ss)", self.poll_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        logger.info("Settlement worker stopped")

    async def run_once(self) -> int:
        async with self.session_factory() as db:
            return await settle_due_transfers(db)

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                settled = await self.run_once()
                if settled:
                    logger.info("Settlement pass settled %d transfer(s)", settled)
            except Exception as e:
                logger.exception("Settlement pass failed: %s", e)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                pass
