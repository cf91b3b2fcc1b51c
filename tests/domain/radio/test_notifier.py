"""Tests for the station change notifier."""

import asyncio
from datetime import timedelta

import pytest

from chill_radio.domain.radio.models import Station, StationChange
from chill_radio.domain.radio.notifier import StationChangeNotifier

from conftest import T0, make_track, scheduled


def make_change(track_id: int, station_id: int = 1) -> StationChange:
    entry = scheduled(make_track(track_id), station_id, T0, T0 + timedelta(minutes=1))
    return StationChange(
        station=Station(id=station_id, name="Chill", tracks=[entry]),
        previous=None,
        current=entry,
        changed_at=T0,
    )


@pytest.mark.anyio
async def test_subscriber_receives_changes_in_order() -> None:
    notifier = StationChangeNotifier()
    subscription = notifier.subscribe()

    notifier.publish(make_change(1))
    notifier.publish(make_change(2))

    assert (await subscription.get()).current.track.id == 1
    assert (await subscription.get()).current.track.id == 2


@pytest.mark.anyio
async def test_every_subscriber_gets_every_change() -> None:
    notifier = StationChangeNotifier()
    first = notifier.subscribe()
    second = notifier.subscribe()

    notifier.publish(make_change(7))

    assert (await first.get()).current.track.id == 7
    assert (await second.get()).current.track.id == 7
    assert notifier.subscriber_count == 2


@pytest.mark.anyio
async def test_publish_without_subscribers_is_a_no_op() -> None:
    notifier = StationChangeNotifier()
    notifier.publish(make_change(1))
    assert notifier.subscriber_count == 0


@pytest.mark.anyio
async def test_bounded_subscriber_drops_oldest() -> None:
    notifier = StationChangeNotifier(max_queue_size=2)
    subscription = notifier.subscribe()

    for track_id in (1, 2, 3):
        notifier.publish(make_change(track_id))

    assert subscription.dropped == 1
    assert (await subscription.get()).current.track.id == 2
    assert (await subscription.get()).current.track.id == 3


@pytest.mark.anyio
async def test_unsubscribe_stops_delivery() -> None:
    notifier = StationChangeNotifier()
    subscription = notifier.subscribe()

    notifier.unsubscribe(subscription)
    notifier.publish(make_change(1))

    assert notifier.subscriber_count == 0
    assert await subscription.get() is None


@pytest.mark.anyio
async def test_close_ends_iteration() -> None:
    notifier = StationChangeNotifier()
    subscription = notifier.subscribe()
    notifier.publish(make_change(1))

    await notifier.close()

    received = [change.current.track.id async for change in subscription]
    assert received == [1]


@pytest.mark.anyio
async def test_sync_listener_is_called() -> None:
    notifier = StationChangeNotifier()
    seen = []
    notifier.add_listener(lambda change: seen.append(change.current.track.id))

    notifier.publish(make_change(1))
    notifier.publish(make_change(2))
    await notifier.close()

    assert seen == [1, 2]


@pytest.mark.anyio
async def test_async_listener_is_awaited() -> None:
    notifier = StationChangeNotifier()
    seen = []

    async def listener(change: StationChange) -> None:
        await asyncio.sleep(0)
        seen.append(change.current.track.id)

    notifier.add_listener(listener)
    notifier.publish(make_change(3))
    await notifier.close()

    assert seen == [3]


@pytest.mark.anyio
async def test_failing_listener_keeps_receiving() -> None:
    notifier = StationChangeNotifier()
    seen = []

    def listener(change: StationChange) -> None:
        seen.append(change.current.track.id)
        if change.current.track.id == 1:
            raise ValueError("boom")

    notifier.add_listener(listener)
    notifier.publish(make_change(1))
    notifier.publish(make_change(2))
    await notifier.close()

    assert seen == [1, 2]
