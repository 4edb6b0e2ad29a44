import asyncio

import httpx

from conftest import commit_transport
from veilsync.session.updates import REVISION_STORAGE_KEY, USER_AGENT, UpdateChecker

URL = "https://api.github.com/repos/example/veilsync/commits/main"


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _checker(transport, notified, clock=None, storage=None, **kwargs):
    return UpdateChecker(
        URL,
        on_update_available=notified.append,
        storage=storage,
        client=httpx.AsyncClient(transport=transport),
        clock=clock or FakeClock(),
        **kwargs,
    )


def test_first_check_records_revision_without_notifying():
    notified = []
    transport = commit_transport("aaa")

    async def scenario():
        checker = _checker(transport, notified)
        raised = await checker.check()
        return checker, raised

    checker, raised = asyncio.run(scenario())
    assert raised is False
    assert notified == []
    assert checker.storage[REVISION_STORAGE_KEY] == "aaa"
    assert transport.calls[0].headers["User-Agent"] == USER_AGENT


def test_changed_revision_notifies():
    notified = []
    transport = commit_transport("aaa", "aaa", "bbb")

    async def scenario():
        checker = _checker(transport, notified)
        return [await checker.check() for _ in range(3)]

    assert asyncio.run(scenario()) == [False, False, True]
    assert notified == ["bbb"]


def test_snooze_suppresses_checks_until_it_expires():
    notified = []
    clock = FakeClock()
    transport = commit_transport("bbb")

    async def scenario():
        checker = _checker(transport, notified, clock=clock, storage={REVISION_STORAGE_KEY: "aaa"})
        checker.snooze(10)
        clock.now += 9 * 60
        during = await checker.check()
        clock.now += 2 * 60
        after = await checker.check()
        return during, after

    during, after = asyncio.run(scenario())
    assert during is False
    assert after is True
    # the snoozed check never reached the network
    assert len(transport.calls) == 1
    assert notified == ["bbb"]


def test_error_statuses_are_tolerated():
    for status_code in (403, 404, 500):
        notified = []
        storage = {REVISION_STORAGE_KEY: "aaa"}

        async def scenario():
            checker = _checker(commit_transport("bbb", status_code=status_code), notified, storage=storage)
            return await checker.check()

        assert asyncio.run(scenario()) is False
        assert notified == []
        assert storage[REVISION_STORAGE_KEY] == "aaa"


def test_network_error_is_tolerated():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    async def scenario():
        checker = _checker(httpx.MockTransport(handler), [])
        return await checker.check()

    assert asyncio.run(scenario()) is False


def test_reply_without_sha_is_tolerated():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"commit": {}}))

    async def scenario():
        checker = _checker(transport, [])
        return await checker.check(), checker.storage

    raised, storage = asyncio.run(scenario())
    assert raised is False
    assert storage == {}


def test_poll_loop_survives_failures():
    notified = []
    responses = [httpx.Response(500), httpx.Response(200, json={"sha": "aaa"}), httpx.Response(200, json={"sha": "bbb"})]

    def handler(request):
        return responses.pop(0) if len(responses) > 1 else responses[0]

    async def scenario():
        checker = _checker(httpx.MockTransport(handler), notified, interval_seconds=0.01)
        checker.start()
        await asyncio.sleep(0.1)
        await checker.aclose()
        return checker

    checker = asyncio.run(scenario())
    assert checker.storage[REVISION_STORAGE_KEY] == "aaa"
    assert notified and set(notified) == {"bbb"}
