import asyncio

from veilsync.session.inactivity import ACTIVITY_SIGNALS, InactivityTimer


def test_fires_once_after_timeout():
    fired = []

    async def scenario():
        timer = InactivityTimer(0.02, lambda: fired.append(True))
        timer.start()
        await asyncio.sleep(0.1)
        return timer

    timer = asyncio.run(scenario())
    assert fired == [True]
    assert not timer.armed


def test_activity_pushes_deadline_back():
    fired = []

    async def scenario():
        timer = InactivityTimer(0.15, lambda: fired.append(True))
        timer.start()
        for _ in range(4):
            await asyncio.sleep(0.04)
            assert timer.record_activity("mousemove")
        assert fired == []
        await asyncio.sleep(0.3)

    asyncio.run(scenario())
    assert fired == [True]


def test_unrecognized_signal_does_not_reset():
    fired = []

    async def scenario():
        timer = InactivityTimer(0.05, lambda: fired.append(True))
        timer.start()
        await asyncio.sleep(0.03)
        assert not timer.record_activity("resize")
        await asyncio.sleep(0.04)

    asyncio.run(scenario())
    assert fired == [True]


def test_activity_while_disarmed_is_ignored():
    async def scenario():
        timer = InactivityTimer(0.05, lambda: None)
        return timer.record_activity("keypress"), timer.armed

    assert asyncio.run(scenario()) == (False, False)


def test_cancel_prevents_firing():
    fired = []

    async def scenario():
        timer = InactivityTimer(0.02, lambda: fired.append(True))
        timer.start()
        timer.cancel()
        await asyncio.sleep(0.06)

    asyncio.run(scenario())
    assert fired == []


def test_recognized_signals():
    assert ACTIVITY_SIGNALS == {"mousemove", "mousedown", "keypress", "scroll", "touchstart"}
