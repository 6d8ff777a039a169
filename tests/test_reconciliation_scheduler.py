import asyncio
from unittest.mock import Mock

import pytest

from vibe_planner.actions import SetChatResults
from vibe_planner.store import TripStore
from vibe_planner.sync.buffer import StreamingResultBuffer
from vibe_planner.sync.scheduler import ReconciliationScheduler


def _hit(object_id: str, name: str) -> dict:
    return {"objectID": object_id, "city": name, "country": "Italy"}


def test_tick_dispatches_only_when_version_advanced():
    buffer = StreamingResultBuffer()
    dispatch = Mock()
    scheduler = ReconciliationScheduler(buffer, dispatch, interval=0.5)

    assert scheduler.tick() is False
    buffer.write_hits([_hit("rome", "Rome"), _hit("milan", "Milan")])
    assert scheduler.tick() is True
    assert scheduler.tick() is False

    dispatch.assert_called_once()
    action = dispatch.call_args.args[0]
    assert isinstance(action, SetChatResults)
    assert [c.name for c in action.cities] == ["Rome", "Milan"]
    assert scheduler.last_version == buffer.version


def test_many_renders_between_ticks_cause_one_store_update():
    buffer = StreamingResultBuffer()
    store = TripStore()
    updates = []
    store.subscribe(lambda prev, cur: updates.append(cur.chat_results))
    scheduler = ReconciliationScheduler(buffer, store.dispatch)

    for n in range(100):
        buffer.write_hits([_hit("rome", "Rome"), _hit(f"c{n % 2}", f"City {n % 2}")])
    scheduler.tick()

    assert len(updates) == 1
    assert [c.name for c in store.state.chat_results] == ["Rome", "City 1"]


def test_running_loop_reconciles_and_stop_discards_pending():
    async def run() -> None:
        buffer = StreamingResultBuffer()
        dispatch = Mock()
        scheduler = ReconciliationScheduler(buffer, dispatch, interval=0.01)

        scheduler.start()
        assert scheduler.running
        buffer.add(_hit("rome", "Rome"))
        await asyncio.sleep(0.05)
        assert dispatch.call_count == 1

        scheduler.stop()
        buffer.add(_hit("milan", "Milan"))
        await asyncio.sleep(0.05)
        assert scheduler.tick() is False
        assert dispatch.call_count == 1
        assert not scheduler.running

    asyncio.run(run())


def test_restart_skips_results_buffered_while_stopped():
    async def run() -> None:
        buffer = StreamingResultBuffer()
        dispatch = Mock()
        scheduler = ReconciliationScheduler(buffer, dispatch, interval=0.01)

        buffer.add(_hit("rome", "Rome"))
        scheduler.start()
        await asyncio.sleep(0.03)
        scheduler.stop()

        assert dispatch.call_count == 0

    asyncio.run(run())


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        ReconciliationScheduler(StreamingResultBuffer(), Mock(), interval=0)


def test_failing_tick_does_not_stop_the_loop():
    async def run() -> None:
        buffer = StreamingResultBuffer()
        dispatch = Mock(side_effect=[RuntimeError("listener blew up"), None])
        scheduler = ReconciliationScheduler(buffer, dispatch, interval=0.01)
        scheduler.start()

        buffer.write_hits([_hit("rome", "Rome")])
        await asyncio.sleep(0.05)
        assert scheduler.running

        buffer.write_hits([_hit("milan", "Milan")])
        await asyncio.sleep(0.05)
        assert dispatch.call_count == 2
        scheduler.stop()

    asyncio.run(run())
