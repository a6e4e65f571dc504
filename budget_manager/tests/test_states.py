import asyncio

import pytest
import pytest_asyncio

from budget_manager.pubsub import PubSub
from budget_manager.states.base_state import ConnectionWatch, follow_topic, this_month_key
from budget_manager.states.budget_state import STATUS_COLORS, _with_display
from budget_manager.utils.periods import parse_month


@pytest_asyncio.fixture
async def bus():
    pubsub = PubSub("Test.PubSub")
    await pubsub.start()
    yield pubsub
    await pubsub.stop()


def test_summary_rows_get_display_fields():
    row = {
        "category_id": 2,
        "name": "Rent",
        "color": "primary",
        "budgeted": 1000.0,
        "spent": 1200.0,
        "remaining": -200.0,
        "percent": 120.0,
        "status": "over",
    }

    display = _with_display(row, "USD")

    assert display["spent_text"] == "$1,200.00"
    assert display["remaining_text"] == "-$200.00"
    assert display["progress"] == 100
    assert display["status_color"] == STATUS_COLORS["over"]
    assert display["name"] == "Rent"


def test_this_month_key_is_a_valid_month():
    assert parse_month(this_month_key()).day == 1


# =============================================================================
# LIVE RELOAD
# =============================================================================


def test_connection_watch_waits_for_the_grace_period():
    connected = {"tab": True}
    watch = ConnectionWatch("tab", grace_seconds=60, is_connected=lambda t: connected[t])

    assert watch.gone() is False
    connected["tab"] = False
    assert watch.gone() is False

    # Reconnecting resets the timer
    connected["tab"] = True
    assert watch.gone() is False


def test_connection_watch_reports_a_closed_tab():
    watch = ConnectionWatch("tab", grace_seconds=0, is_connected=lambda t: False)
    assert watch.gone() is True


@pytest.mark.asyncio
async def test_follow_topic_reloads_on_broadcast(bus, wait_until):
    reloads = []

    async def poll():
        return "budget:2026-10"

    async def on_message():
        reloads.append(1)

    task = asyncio.create_task(follow_topic(bus, poll, on_message, check_seconds=0.01))
    await wait_until(lambda: bus.subscribers("budget:2026-10") == 1)

    bus.broadcast("budget:2026-10", ("transaction_created", {"id": 1}))
    await wait_until(lambda: len(reloads) == 1)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert bus.subscribers("budget:2026-10") == 0


@pytest.mark.asyncio
async def test_follow_topic_ends_when_the_client_is_gone(bus, wait_until):
    connected = {"tab": True}
    watch = ConnectionWatch("tab", grace_seconds=0, is_connected=lambda t: connected[t])

    async def poll():
        return None if watch.gone() else "budget:2026-10"

    async def on_message():
        pass

    task = asyncio.create_task(follow_topic(bus, poll, on_message, check_seconds=0.01))
    await wait_until(lambda: bus.subscribers("budget:2026-10") == 1)

    connected["tab"] = False
    await asyncio.wait_for(task, timeout=1.0)

    assert bus.subscribers("budget:2026-10") == 0


@pytest.mark.asyncio
async def test_follow_topic_switches_topic_and_reloads_once(bus, wait_until):
    topic = {"current": "budget:2026-10"}
    reloads = []

    async def poll():
        return topic["current"]

    async def on_message():
        reloads.append(topic["current"])

    task = asyncio.create_task(follow_topic(bus, poll, on_message, check_seconds=0.01))
    await wait_until(lambda: bus.subscribers("budget:2026-10") == 1)

    topic["current"] = "budget:2026-11"
    await wait_until(lambda: bus.subscribers("budget:2026-11") == 1)

    assert bus.subscribers("budget:2026-10") == 0
    assert reloads == ["budget:2026-11"]

    topic["current"] = None
    await asyncio.wait_for(task, timeout=1.0)
    assert bus.subscribers("budget:2026-11") == 0
