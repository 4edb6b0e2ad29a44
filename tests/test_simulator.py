import asyncio

import pytest

from veilsync.errors import InputError, RunAlreadyActiveError
from veilsync.models import TextPayload
from veilsync.sync.log_store import LogStore
from veilsync.sync.simulator import StageSimulator
from veilsync.sync.stages import (
    PERSISTENCE_DISABLED_MESSAGE,
    PERSISTENCE_ENABLED_MESSAGE,
    Stage,
    build_stage_script,
)

EXPECTED_MESSAGES = [
    "INITIALIZING PHANTOM_V RUNTIME",
    "PROCESSING DATA: Pasted Content",
    "ESTABLISHING SECURE CONNECTION",
    "ANALYZING DATA STRUCTURE",
    "ATTEMPTING KERNEL-LEVEL SYNC",
    "SYNC FAILED: ACCESS RESTRICTED.",
    "FALLBACK TO PAYLOAD INJECTION",
    "SUCCESS: 11 chars SYNCED.",
    "SYNC COMPLETE. STANDBY.",
]


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)
        await asyncio.sleep(0)


def _simulator(store=None, **kwargs):
    return StageSimulator(store if store is not None else LogStore(), sleep=RecordingSleep(), **kwargs)


def test_hello_world_run_produces_script_in_order(text_payload):
    async def scenario():
        sim = _simulator()
        handle = sim.run(text_payload)
        result = await handle.wait()
        return sim, result

    sim, result = asyncio.run(scenario())
    entries = sim.log_store.snapshot()

    assert result.completed
    assert [e.message for e in result.entries] == EXPECTED_MESSAGES
    assert [e.message for e in entries[:9]] == EXPECTED_MESSAGES
    assert entries[8].status == "success"
    assert entries[5].status == "error"
    assert entries[9].message == PERSISTENCE_DISABLED_MESSAGE
    assert entries[9].status == "info"
    assert len(entries) == 10
    assert all(e.status != "pending" for e in entries)


def test_persistent_run_reports_persistence_enabled(text_payload):
    async def scenario():
        sim = _simulator()
        await sim.run(text_payload, persistent=True).wait()
        return sim.log_store.snapshot()

    entries = asyncio.run(scenario())
    assert entries[-1].message == PERSISTENCE_ENABLED_MESSAGE


def test_image_payload_uses_display_name_and_image_size_label(image_payload):
    script = build_stage_script(image_payload)
    assert script[1].message == "PROCESSING DATA: skyline.png"
    assert script[7].message == "SUCCESS: Image Data SYNCED."


def test_each_stage_goes_pending_then_terminal(text_payload):
    snapshots = []

    async def scenario():
        store = LogStore()
        store.subscribe(snapshots.append)
        await _simulator(store).run(text_payload).wait()

    asyncio.run(scenario())

    # first snapshot is the clear, then pending/terminal pairs for each stage
    assert snapshots[0] == []
    script = build_stage_script(text_payload)
    for index, stage in enumerate(script):
        pending_snap = snapshots[1 + 2 * index]
        final_snap = snapshots[2 + 2 * index]
        assert len(pending_snap) == index + 1
        assert pending_snap[-1].status == "pending"
        assert final_snap[-1].id == pending_snap[-1].id
        assert final_snap[-1].status == stage.terminal_status


def test_delays_follow_script_and_time_scale(text_payload):
    async def scenario():
        sim = _simulator(time_scale=0.5)
        await sim.run(text_payload).wait()
        return sim._sleep.delays

    delays = asyncio.run(scenario())
    expected = []
    for stage in build_stage_script(text_payload):
        expected += [0.2 * 0.5, stage.delay_ms * 0.5 / 1000]
    assert delays == pytest.approx(expected)


def test_scripted_error_does_not_abort(text_payload):
    def script(payload):
        return [Stage("boom", 10, "error"), Stage("after", 10, "success")]

    async def scenario():
        sim = _simulator(script_builder=script)
        return await sim.run(text_payload).wait()

    result = asyncio.run(scenario())
    assert [e.status for e in result.entries] == ["error", "success"]
    assert result.completed


def test_second_run_while_active_is_rejected_without_mutation(text_payload):
    async def scenario():
        sim = _simulator()
        handle = sim.run(text_payload)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        before = sim.log_store.snapshot()
        with pytest.raises(RunAlreadyActiveError):
            sim.run(TextPayload(text="other"))
        after = sim.log_store.snapshot()
        result = await handle.wait()
        return before, after, result

    before, after, result = asyncio.run(scenario())
    assert before == after
    assert len(result.entries) == 9


@pytest.mark.parametrize("payload", [None, TextPayload(text="")])
def test_empty_payload_is_rejected(payload):
    async def scenario():
        store = LogStore()
        store.add("keep me", "info")
        sim = _simulator(store)
        with pytest.raises(InputError):
            sim.run(payload)
        return store.snapshot(), sim.is_running

    entries, running = asyncio.run(scenario())
    assert [e.message for e in entries] == ["keep me"]
    assert not running


def test_new_run_allowed_after_completion(text_payload):
    async def scenario():
        sim = _simulator()
        await sim.run(text_payload).wait()
        assert not sim.is_running
        await sim.run(text_payload).wait()
        return sim.log_store.snapshot()

    entries = asyncio.run(scenario())
    # the second run clears the first one's log
    assert len(entries) == 10


def test_cancel_stops_run_and_releases_simulator(text_payload):
    async def scenario():
        sim = StageSimulator(LogStore(), time_scale=1.0)
        handle = sim.run(text_payload)
        await asyncio.sleep(0.05)
        handle.cancel()
        with pytest.raises(asyncio.CancelledError):
            await handle.wait()
        return sim

    sim = asyncio.run(scenario())
    assert not sim.is_running
    assert len(sim.log_store) == 1


def test_on_complete_receives_result(text_payload):
    seen = []

    async def scenario():
        sim = _simulator()
        await sim.run(text_payload, on_complete=seen.append).wait()

    asyncio.run(scenario())
    assert len(seen) == 1
    assert seen[0].completed
