from __future__ import annotations

import asyncio

import pytest

from aternos_starter.models.session import Subscriber
from aternos_starter.models.status import ServerStatus
from aternos_starter.status.notifier import StatusChangeNotifier


class SequenceProbe:
    def __init__(self, statuses: list[ServerStatus]):
        self.statuses = list(statuses)

    async def probe(self, host, port, timeout, max_retries=1) -> ServerStatus:
        return self.statuses.pop(0)


class StaticRegistry:
    def __init__(self, chat_ids: list[int]):
        self.subscribers = [Subscriber(chat_id=c, notifications_enabled=True) for c in chat_ids]

    async def list_enabled(self) -> list[Subscriber]:
        return self.subscribers


def _online(players: int = 2) -> ServerStatus:
    return ServerStatus(reachable=True, players_online=players, players_max=10, version="1.20", motd="hi")


def _offline() -> ServerStatus:
    return ServerStatus(reachable=False, error="Connection refused")


def _notifier(statuses, chat_ids, sent, failing=()):
    async def send(chat_id: int, text: str) -> None:
        if chat_id in failing:
            raise RuntimeError("Forbidden: bot was blocked by the user")
        sent.append((chat_id, text))

    return StatusChangeNotifier(
        SequenceProbe(statuses),
        StaticRegistry(chat_ids),
        send,
        host="mc.example",
        port=25565,
        interval=300,
        timeout=1.0,
    )


@pytest.mark.asyncio
async def test_notifications_fire_only_on_reachability_edges() -> None:
    sent: list = []
    sequence = [_online(), _online(3), _offline(), _offline(), _online()]
    notifier = _notifier(sequence, [1, 2], sent)

    counts = [await notifier.poll_once() for _ in sequence]

    assert counts == [2, 0, 2, 0, 2]
    assert notifier.previous is True


@pytest.mark.asyncio
async def test_first_poll_notifies_then_identical_poll_is_silent() -> None:
    sent: list = []
    notifier = _notifier([_online(), _online()], [7, 8], sent)

    assert notifier.previous is None
    assert await notifier.poll_once() == 2
    assert [chat for chat, _ in sent] == [7, 8]
    text = sent[0][1]
    assert "Online" in text
    assert "2/10" in text
    assert "1.20" in text
    assert "hi" in text

    assert await notifier.poll_once() == 0
    assert len(sent) == 2


@pytest.mark.asyncio
async def test_offline_notification_carries_probe_error() -> None:
    sent: list = []
    notifier = _notifier([_offline()], [1], sent)

    await notifier.poll_once()

    assert "Offline" in sent[0][1]
    assert "Connection refused" in sent[0][1]


@pytest.mark.asyncio
async def test_failed_delivery_does_not_stop_fan_out() -> None:
    sent: list = []
    notifier = _notifier([_online()], [1, 2, 3], sent, failing={2})

    delivered = await notifier.poll_once()

    assert delivered == 2
    assert [chat for chat, _ in sent] == [1, 3]
    assert notifier.previous is True


@pytest.mark.asyncio
async def test_no_subscribers_still_records_the_change() -> None:
    sent: list = []
    notifier = _notifier([_offline(), _offline()], [], sent)

    assert await notifier.poll_once() == 0
    assert notifier.previous is False
    assert notifier.last_status.error == "Connection refused"


class FlakyProbe:
    def __init__(self):
        self.calls = 0

    async def probe(self, host, port, timeout, max_retries=1) -> ServerStatus:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("unexpected")
        return _online()


@pytest.mark.asyncio
async def test_run_forever_keeps_polling_after_a_failed_poll() -> None:
    sent: list = []

    async def send(chat_id: int, text: str) -> None:
        sent.append((chat_id, text))

    probe = FlakyProbe()
    notifier = StatusChangeNotifier(
        probe, StaticRegistry([1]), send, host="mc.example", port=25565, interval=0.01, timeout=1.0
    )

    task = asyncio.create_task(notifier.run_forever())
    await asyncio.sleep(0.1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert probe.calls >= 3
    assert len(sent) == 1
