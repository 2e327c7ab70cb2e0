"""
Tests for post-admission event dispatch.
"""

import asyncio
from datetime import date

import pytest

from tour_booking.services.events import BookingAdmitted, EventDispatcher

EVENT = BookingAdmitted(
    booking_id=1,
    activity_id=2,
    activity_title="Agafay Combo",
    name="Fatima Zahra",
    phone="+212612345678",
    date=date(2025, 6, 10),
    people=2,
)


@pytest.mark.asyncio
async def test_emit_does_not_wait_for_handlers():
    dispatcher = EventDispatcher()
    release = asyncio.Event()
    seen = []

    async def slow_handler(event):
        await release.wait()
        seen.append(event.booking_id)

    dispatcher.subscribe(BookingAdmitted, slow_handler)
    dispatcher.emit(EVENT)

    assert dispatcher.pending == 1
    assert seen == []

    release.set()
    await dispatcher.drain()
    assert seen == [1]
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_failing_handler_is_isolated():
    dispatcher = EventDispatcher()
    seen = []

    async def broken(event):
        raise RuntimeError("CRM unreachable")

    async def working(event):
        seen.append(event.activity_title)

    dispatcher.subscribe(BookingAdmitted, broken)
    dispatcher.subscribe(BookingAdmitted, working)

    dispatcher.emit(EVENT)
    await dispatcher.drain()

    assert seen == ["Agafay Combo"]


@pytest.mark.asyncio
async def test_unsubscribed_event_type_is_ignored():
    dispatcher = EventDispatcher()
    dispatcher.emit(object())
    assert dispatcher.pending == 0
    await dispatcher.drain()
