import asyncio

import chat
import reaper
from database import MESSAGES, PARTICIPANTS, now_ms


def leave_messages(db):
    return list(db[MESSAGES].find({"text": "sai da sala..."}))


def test_sweep_evicts_only_stale(db):
    now = now_ms()
    db[PARTICIPANTS].insert_many([
        {"name": "old1", "lastStatus": now - 20000},
        {"name": "old2", "lastStatus": now - 10001},
        {"name": "edge", "lastStatus": now - 10000},
        {"name": "fresh", "lastStatus": now},
    ])

    evicted = reaper.sweep(db, 10000, now=now)

    assert sorted(evicted) == ["old1", "old2"]
    assert sorted(p["name"] for p in db[PARTICIPANTS].find()) == ["edge", "fresh"]
    left = leave_messages(db)
    assert sorted(m["from"] for m in left) == ["old1", "old2"]
    assert all(m["to"] == "Todos" and m["type"] == "status" for m in left)


def test_sweep_with_nobody_stale(db):
    chat.register(db, "ana")
    assert reaper.sweep(db, 10000) == []
    assert leave_messages(db) == []
    assert db[PARTICIPANTS].count_documents({}) == 1


def test_evicted_participant_can_register_again(db):
    chat.register(db, "ana")
    reaper.sweep(db, 10000, now=now_ms() + 60000)
    assert db[PARTICIPANTS].count_documents({}) == 0
    chat.register(db, "ana")
    assert db[PARTICIPANTS].count_documents({"name": "ana"}) == 1


def test_run_reaper_sweeps_until_cancelled(db):
    db[PARTICIPANTS].insert_one({"name": "old", "lastStatus": now_ms() - 60000})

    async def scenario():
        task = asyncio.create_task(reaper.run_reaper(db, interval_ms=10, stale_after_ms=1000))
        deadline = asyncio.get_running_loop().time() + 5
        while db[PARTICIPANTS].count_documents({}) and asyncio.get_running_loop().time() < deadline:
            await asyncio.sleep(0.01)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    asyncio.run(scenario())

    assert db[PARTICIPANTS].count_documents({}) == 0
    assert len(leave_messages(db)) == 1
