import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from qr_order.dashboard.alerts import Notifier
from qr_order.dashboard.client import ApiError, OrdersApiClient
from qr_order.dashboard.commands import StatusUpdateCommand
from qr_order.dashboard.feed import ChangeFeedSubscriber
from qr_order.dashboard.sync import DashboardState, DashboardSync
from qr_order.dashboard.tracking import CriticalAlertTracker, NewOrderDetector
from qr_order.dashboard.urgency import UrgencyTier, urgency_tier
from qr_order.schemas.order import OrderListResponse, OrderResponse

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


def make_order(order_id, status="pending", age=0):
    created = NOW - timedelta(seconds=age)
    return OrderResponse(
        id=order_id,
        order_no=f"ORD-20261016-{order_id:0>6}"[:19],
        items=[{"id": "1", "name": "Coffee", "qty": 1}],
        note=None,
        status=status,
        source="web",
        idempotency_key=None,
        created_at=created,
        updated_at=created,
    )


def page(*orders):
    return OrderListResponse(
        items=list(orders),
        total_count=len(orders),
        pending_count=sum(1 for o in orders if o.status == "pending"),
    )


class RecordingNotifier(Notifier):
    def __init__(self, sound_enabled=False):
        super().__init__(sound_enabled=sound_enabled)
        self.calls = []

    def play_new_order_sound(self):
        self.calls.append(("sound",))

    def vibrate(self, pattern):
        self.calls.append(("vibrate", tuple(pattern)))

    def highlight(self, order_ids):
        self.calls.append(("highlight", list(order_ids)))

    def start_critical_alert(self, order_id):
        self.calls.append(("critical", order_id))

    def stop_critical_alert(self, order_id):
        self.calls.append(("critical_stop", order_id))

    def show_error(self, message):
        self.calls.append(("error", message))


class FakeClient:
    def __init__(self, *pages):
        self.pages = list(pages)
        self.list_calls = []
        self.updates = []
        self.fail_update = None
        self.stopped = False
        self.stop_reads = 0
        self.fail_admin = None
        self.deleted = 0

    async def list_orders(self, status=None, limit=None, offset=0):
        self.list_calls.append(status)
        result = self.pages.pop(0) if len(self.pages) > 1 else self.pages[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def update_status(self, key, status):
        self.updates.append((key, status))
        if self.fail_update:
            raise self.fail_update
        return make_order(key, status=status)

    async def get_stop(self):
        self.stop_reads += 1
        return self.stopped

    async def set_stop(self, stopped):
        if self.fail_admin:
            raise self.fail_admin
        self.stopped = stopped
        return stopped

    async def reset_orders(self):
        if self.fail_admin:
            raise self.fail_admin
        return self.deleted


class FakeClock:
    def __init__(self):
        self.value = 100.0

    def __call__(self):
        return self.value


def make_sync(client, notifier=None, clock=None):
    return DashboardSync(
        client,
        notifier=notifier or RecordingNotifier(),
        clock=clock or FakeClock(),
        now=lambda: NOW,
    )


@pytest.mark.parametrize("age, expected", [
    (0, UrgencyTier.NORMAL),
    (119, UrgencyTier.NORMAL),
    (120, UrgencyTier.WARNING),
    (179, UrgencyTier.WARNING),
    (180, UrgencyTier.CRITICAL),
    (3600, UrgencyTier.CRITICAL),
])
def test_urgency_tiers(age, expected):
    assert urgency_tier(NOW - timedelta(seconds=age), NOW) is expected


def test_urgency_ignores_finished_orders_and_naive_timestamps():
    old = NOW - timedelta(minutes=10)
    assert urgency_tier(old, NOW, status="completed") is UrgencyTier.NORMAL
    assert urgency_tier(old.replace(tzinfo=None), NOW) is UrgencyTier.CRITICAL


def test_new_order_detector_baseline_then_diff():
    detector = NewOrderDetector()

    assert detector.observe([make_order("a"), make_order("b")]) == []
    assert detector.observe([make_order("a"), make_order("b"), make_order("c")]) == ["c"]
    assert detector.observe([make_order("a"), make_order("c", status="completed")]) == []
    assert detector.observe([make_order("a"), make_order("c")]) == ["c"]


def test_critical_tracker_one_episode_per_order():
    tracker = CriticalAlertTracker()

    assert tracker.update([make_order("a", age=200)], NOW) == (["a"], [])
    assert tracker.update([make_order("a", age=260)], NOW) == ([], [])
    assert tracker.update([make_order("a", status="completed", age=300)], NOW) == ([], ["a"])
    assert tracker.update([make_order("a", age=300)], NOW) == (["a"], [])
    assert tracker.update([], NOW) == ([], ["a"])


def test_notifier_respects_sound_preference():
    quiet = RecordingNotifier(sound_enabled=False)
    loud = RecordingNotifier(sound_enabled=True)

    quiet.notify_new_orders(["a"])
    loud.notify_new_orders(["a"])
    loud.notify_new_orders([])

    assert ("sound",) not in quiet.calls
    assert ("highlight", ["a"]) in quiet.calls
    assert loud.calls[0] == ("sound",)
    assert len(loud.calls) == 3


def test_refresh_notifies_only_after_baseline():
    client = FakeClient(page(make_order("a")), page(make_order("b"), make_order("a")))
    notifier = RecordingNotifier()
    sync = make_sync(client, notifier)

    assert asyncio.run(sync.refresh()) is True
    assert notifier.calls == []
    assert sync.state.loading is False

    asyncio.run(sync.refresh())
    assert ("highlight", ["b"]) in notifier.calls
    assert "b" in sync.state.highlighted
    assert sync.state.pending_count == 2


def test_highlight_expires():
    clock = FakeClock()
    client = FakeClient(page(), page(make_order("a")))
    sync = make_sync(client, clock=clock)
    asyncio.run(sync.refresh())
    asyncio.run(sync.refresh())

    clock.value += 5
    sync.tick()
    assert "a" in sync.state.highlighted
    clock.value += 2
    sync.tick()
    assert sync.state.highlighted == {}


def test_refresh_failure_sets_error_and_keeps_orders():
    client = FakeClient(page(make_order("a")), ApiError(500, "db down"), page(make_order("a")))
    sync = make_sync(client)

    asyncio.run(sync.refresh())
    assert asyncio.run(sync.refresh()) is False
    assert sync.state.error == "db down"
    assert [o.id for o in sync.state.orders] == ["a"]

    asyncio.run(sync.refresh())
    assert sync.state.error is None


def test_refresh_starts_critical_alert_for_old_pending_order():
    notifier = RecordingNotifier()
    sync = make_sync(FakeClient(page(make_order("a", age=200), make_order("b", age=30))), notifier)

    asyncio.run(sync.refresh())

    assert notifier.calls == [("critical", "a")]
    assert sync.tier_of(sync.state.orders[0]) is UrgencyTier.CRITICAL


def test_change_events_are_rate_limited():
    clock = FakeClock()
    sync = make_sync(FakeClient(page()), clock=clock)

    assert sync.on_change_event({"event_type": "OrderCreated"}) is True
    assert sync.on_change_event({"event_type": "OrderCreated"}) is False
    clock.value += 0.5
    assert sync.on_change_event() is False
    clock.value += 0.6
    assert sync.on_change_event() is True


def test_visibility_changes_poll_interval_and_refreshes_on_return():
    sync = make_sync(FakeClient(page()))
    assert sync.poll_interval == 5.0

    sync.set_visible(False)
    assert sync.poll_interval == 60.0
    assert not sync._refresh_requested.is_set()

    sync.set_visible(True)
    assert sync.poll_interval == 5.0
    assert sync._refresh_requested.is_set()


def test_filter_change_resets_baseline():
    client = FakeClient(page(make_order("a")), page(make_order("a"), make_order("b")))
    notifier = RecordingNotifier()
    sync = make_sync(client, notifier)
    asyncio.run(sync.refresh())

    sync.set_filter("pending")
    asyncio.run(sync.refresh())

    assert client.list_calls == [None, "pending"]
    assert notifier.calls == []


def test_status_command_apply_and_undo():
    state = DashboardState(orders=[make_order("a"), make_order("b")])
    command = StatusUpdateCommand(state, "a", "completed")

    command.apply()
    assert [o.status for o in state.orders] == ["completed", "pending"]
    command.undo()
    assert [o.status for o in state.orders] == ["pending", "pending"]


def test_optimistic_update_success_requests_refresh():
    client = FakeClient(page(make_order("a", age=200)))
    notifier = RecordingNotifier()
    sync = make_sync(client, notifier)
    asyncio.run(sync.refresh())
    sync._refresh_requested.clear()

    assert asyncio.run(sync.update_status("a", "completed")) is True

    assert sync.state.orders[0].status == "completed"
    assert client.updates == [("a", "completed")]
    assert ("critical_stop", "a") in notifier.calls
    assert sync._refresh_requested.is_set()


def test_optimistic_update_rolls_back_on_failure():
    client = FakeClient(page(make_order("a")))
    client.fail_update = ApiError(404, "not found")
    notifier = RecordingNotifier()
    sync = make_sync(client, notifier)
    asyncio.run(sync.refresh())

    assert asyncio.run(sync.update_status("a", "cancelled")) is False

    assert sync.state.orders[0].status == "pending"
    assert notifier.calls[-1] == ("error", "not found")


def test_first_refresh_loads_stop_flag_once():
    client = FakeClient(page(make_order("a")))
    client.stopped = True
    sync = make_sync(client)
    assert sync.state.stopped is None

    asyncio.run(sync.refresh())
    asyncio.run(sync.refresh())

    assert sync.state.stopped is True
    assert client.stop_reads == 1


def test_set_stopped_stores_flag_and_requests_refresh():
    client = FakeClient(page())
    sync = make_sync(client)

    assert asyncio.run(sync.set_stopped(True)) is True

    assert client.stopped is True
    assert sync.state.stopped is True
    assert sync._refresh_requested.is_set()


def test_set_stopped_failure_shows_error():
    client = FakeClient(page())
    client.fail_admin = ApiError(401, "Unauthorized")
    notifier = RecordingNotifier()
    sync = make_sync(client, notifier)

    assert asyncio.run(sync.set_stopped(True)) is False

    assert sync.state.stopped is None
    assert notifier.calls == [("error", "Unauthorized")]
    assert not sync._refresh_requested.is_set()


def test_reset_finished_returns_deleted_count():
    client = FakeClient(page())
    client.deleted = 4
    sync = make_sync(client)

    assert asyncio.run(sync.reset_finished()) == 4
    assert sync._refresh_requested.is_set()


def test_reset_finished_failure_shows_error():
    client = FakeClient(page())
    client.fail_admin = httpx.ConnectError("connection refused")
    notifier = RecordingNotifier()
    sync = make_sync(client, notifier)

    assert asyncio.run(sync.reset_finished()) is None
    assert notifier.calls == [("error", "connection refused")]


def test_run_refreshes_once_then_stops():
    sync = None

    class StoppingClient(FakeClient):
        async def list_orders(self, status=None, limit=None, offset=0):
            sync.stop()
            return await super().list_orders(status, limit, offset)

    client = StoppingClient(page(make_order("a")))
    sync = make_sync(client)

    asyncio.run(asyncio.wait_for(sync.run(), timeout=5))

    assert client.list_calls == [None]
    assert [o.id for o in sync.state.orders] == ["a"]


def test_feed_forwards_events_to_loop():
    class FakeLoop:
        def __init__(self):
            self.scheduled = []

        def call_soon_threadsafe(self, callback, *args):
            self.scheduled.append((callback, args))

    received = []
    loop = FakeLoop()
    feed = ChangeFeedSubscriber(received.append, loop)

    assert feed.handle_message(json.dumps({"event_type": "OrderCreated", "event_id": "1"}).encode()) is True
    assert feed.handle_message(b"{broken") is False
    assert feed.handle_message(b"[1, 2]") is False

    callback, args = loop.scheduled[0]
    callback(*args)
    assert received == [{"event_type": "OrderCreated", "event_id": "1"}]
    assert len(loop.scheduled) == 1


def api_order(order_id="a", status="pending"):
    return json.loads(make_order(order_id, status=status).model_dump_json())


def test_api_client_lists_orders_with_filter():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={
            "ok": True, "items": [api_order()], "total_count": 1, "pending_count": 1,
        })

    async def scenario():
        async with OrdersApiClient("http://api", transport=httpx.MockTransport(handler)) as client:
            return await client.list_orders(status="pending", limit=10)

    result = asyncio.run(scenario())

    assert result.pending_count == 1
    assert result.items[0].id == "a"
    assert seen[0].url.path == "/api/orders"
    assert seen[0].url.params["status"] == "pending"
    assert seen[0].url.params["limit"] == "10"


def test_api_client_raises_api_error():
    def handler(request):
        if request.url.path == "/api/admin/login":
            return httpx.Response(401, json={"ok": False, "error": "invalid password"})
        return httpx.Response(502, text="bad gateway")

    async def scenario():
        async with OrdersApiClient("http://api", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as login_error:
                await client.login("wrong")
            with pytest.raises(ApiError) as update_error:
                await client.update_status("a", "completed")
            return login_error.value, update_error.value

    login_error, update_error = asyncio.run(scenario())

    assert login_error.status_code == 401
    assert login_error.message == "invalid password"
    assert update_error.status_code == 502


def test_api_client_update_and_stop():
    def handler(request):
        body = json.loads(request.content or b"{}")
        if request.url.path == "/api/admin/stop":
            return httpx.Response(200, json={"ok": True, "stopped": body["stopped"]})
        if request.url.path == "/api/orders/reset":
            return httpx.Response(200, json={"ok": True, "deleted": 3})
        return httpx.Response(200, json={"ok": True, "order": api_order(status=body["status"])})

    async def scenario():
        async with OrdersApiClient("http://api", transport=httpx.MockTransport(handler)) as client:
            order = await client.update_status("a", "completed")
            stopped = await client.set_stop(True)
            deleted = await client.reset_orders()
            return order, stopped, deleted

    order, stopped, deleted = asyncio.run(scenario())

    assert order.status == "completed"
    assert stopped is True
    assert deleted == 3


def test_api_client_rejects_malformed_success_bodies():
    def handler(request):
        if request.url.path == "/api/orders":
            return httpx.Response(200, json=[1, 2])
        return httpx.Response(200, json={"ok": True, "order": {"id": "a"}})

    async def scenario():
        async with OrdersApiClient("http://api", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as list_error:
                await client.list_orders()
            with pytest.raises(ApiError) as update_error:
                await client.update_status("a", "completed")
            return list_error.value, update_error.value

    list_error, update_error = asyncio.run(scenario())

    assert list_error.status_code == 200
    assert "Unexpected response" in update_error.message


def test_refresh_survives_schema_mismatch():
    def handler(request):
        return httpx.Response(200, json={"ok": True, "items": "nope"})

    async def scenario():
        async with OrdersApiClient("http://api", transport=httpx.MockTransport(handler)) as client:
            sync = make_sync(client)
            return sync, await sync.refresh()

    sync, refreshed = asyncio.run(scenario())

    assert refreshed is False
    assert sync.state.error.startswith("Unexpected response")


def test_runner_logs_out_on_shutdown(monkeypatch):
    from qr_order.config import settings
    from qr_order.dashboard import runner

    calls = []

    class FakeApiClient:
        base_url = "http://api"

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            calls.append("close")

        async def login(self, password):
            calls.append(("login", password))

        async def logout(self):
            calls.append("logout")

    class FinishedSync:
        def __init__(self, client, notifier=None):
            calls.append(("sound", notifier.sound_enabled))

        def stop(self):
            pass

        def on_change_event(self, event=None):
            pass

        async def run(self):
            calls.append("run")

    monkeypatch.setattr(settings, "EVENTS_ENABLED", False)
    monkeypatch.setattr(settings, "DASHBOARD_ADMIN_PASSWORD", "dashboard-secret")
    monkeypatch.setattr(settings, "DASHBOARD_SOUND", True)
    monkeypatch.setattr(runner, "OrdersApiClient", FakeApiClient)
    monkeypatch.setattr(runner, "DashboardSync", FinishedSync)

    asyncio.run(runner.run_dashboard())

    assert calls == [("login", "dashboard-secret"), ("sound", True), "run", "logout", "close"]
