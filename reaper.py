"""
Activity reaper: evicts participants that stopped sending heartbeats.

A heartbeat racing a sweep may or may not save the participant in that pass.
No locking is done; a wrongly evicted participant simply registers again.
"""
import asyncio
import logging
from typing import List, Optional

from pymongo.database import Database
from starlette.concurrency import run_in_threadpool

from database import MESSAGES, PARTICIPANTS, clock_time, create_document, get_documents, now_ms
from schemas import EVERYONE, LEAVE_TEXT, STATUS, message_document

logger = logging.getLogger("chatroom")


def sweep(db: Database, stale_after_ms: int, now: Optional[int] = None) -> List[str]:
    """Run one pass and return the names that were evicted."""
    cutoff = (now if now is not None else now_ms()) - stale_after_ms
    stale = [p["name"] for p in get_documents(db, PARTICIPANTS, {"lastStatus": {"$lt": cutoff}})]
    for name in stale:
        create_document(db, MESSAGES, message_document(name, EVERYONE, LEAVE_TEXT, STATUS, clock_time()))
    if stale:
        db[PARTICIPANTS].delete_many({"name": {"$in": stale}})
        logger.info("Reaper evicted %s participant(s): %s", len(stale), ", ".join(stale))
    return stale


async def run_reaper(db: Database, interval_ms: int, stale_after_ms: int) -> None:
    """Sweep every `interval_ms` until cancelled."""
    logger.info("Reaper started: interval=%sms stale_after=%sms", interval_ms, stale_after_ms)
    try:
        while True:
            await asyncio.sleep(interval_ms / 1000)
            try:
                await run_in_threadpool(sweep, db, stale_after_ms)
            except Exception as e:
                logger.exception("Reaper sweep failed: %s", e)
    except asyncio.CancelledError:
        logger.info("Reaper stopped")
        raise
