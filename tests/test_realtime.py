"""Tests for the change broker and the event streams built on it."""

import asyncio
import json

import pytest

from taskflow.realtime import CLIENTS, TASKS, ChangeBroker, broker
from taskflow.routes.stream import event_stream, format_event, load_clients_snapshot, load_tasks_snapshot


class FakeRequest:
    """Reports a disconnect after `connected_checks` polls"""

    def __init__(self, connected_checks=100):
        self.connected_checks = connected_checks

    async def is_disconnected(self):
        self.connected_checks -= 1
        return self.connected_checks < 0


def parse(event: str):
    lines = event.strip().splitlines()
    name = lines[0].removeprefix("event: ")
    return name, json.loads(lines[1].removeprefix("data: "))


class TestChangeBroker:

    def test_subscribe_and_publish(self):
        async def scenario():
            local = ChangeBroker()
            mine = local.subscribe(1, TASKS)
            other_user = local.subscribe(2, TASKS)
            other_collection = local.subscribe(1, CLIENTS)

            local.publish(1, TASKS)
            event = await asyncio.wait_for(mine.queue.get(), timeout=1)
            await asyncio.sleep(0)
            return event, other_user.queue.qsize(), other_collection.queue.qsize()

        event, other_user_pending, other_collection_pending = asyncio.run(scenario())
        assert event == {"collection": TASKS, "user_id": 1}
        assert other_user_pending == 0
        assert other_collection_pending == 0

    def test_unsubscribe(self):
        async def scenario():
            local = ChangeBroker()
            subscription = local.subscribe(1, TASKS)
            assert local.subscriber_count(1, TASKS) == 1
            local.unsubscribe(subscription)
            local.unsubscribe(subscription)
            return local.subscriber_count(1, TASKS)

        assert asyncio.run(scenario()) == 0

    def test_unknown_collection(self):
        async def scenario():
            ChangeBroker().subscribe(1, "invoices")

        with pytest.raises(ValueError):
            asyncio.run(scenario())

    def test_full_queue_drops_notifications(self):
        async def scenario():
            local = ChangeBroker()
            subscription = local.subscribe(1, TASKS)
            for _ in range(50):
                local.publish(1, TASKS)
            await asyncio.sleep(0)
            return subscription.queue.qsize(), subscription.queue.maxsize

        pending, maxsize = asyncio.run(scenario())
        assert pending == maxsize

    def test_publish_from_worker_thread(self):
        async def scenario():
            local = ChangeBroker()
            subscription = local.subscribe(1, CLIENTS)
            await asyncio.to_thread(local.publish, 1, CLIENTS)
            return await asyncio.wait_for(subscription.queue.get(), timeout=1)

        assert asyncio.run(scenario())["collection"] == CLIENTS


class TestEventStream:

    def test_snapshot_then_change_then_keepalive(self):
        calls = []

        def loader(user_id):
            calls.append(user_id)
            return [{"version": len(calls)}]

        async def scenario():
            stream = event_stream(FakeRequest(), 7, TASKS, loader, keepalive=0.05)
            first = await stream.__anext__()
            broker.publish(7, TASKS)
            broker.publish(7, TASKS)
            second = await stream.__anext__()
            third = await stream.__anext__()
            subscribed = broker.subscriber_count(7, TASKS)
            await stream.aclose()
            return first, second, third, subscribed

        first, second, third, subscribed = asyncio.run(scenario())
        assert parse(first) == ("snapshot", [{"version": 1}])
        # Two changes in a row collapse into one snapshot
        assert parse(second) == ("snapshot", [{"version": 2}])
        assert third == ": keep-alive\n\n"
        assert subscribed == 1
        assert broker.subscriber_count(7, TASKS) == 0

    def test_loader_failure_sends_error_event(self):
        def loader(user_id):
            raise RuntimeError("database down")

        async def scenario():
            stream = event_stream(FakeRequest(connected_checks=0), 7, CLIENTS, loader)
            events = [event async for event in stream]
            return events

        events = asyncio.run(scenario())
        assert parse(events[0]) == ("error", {"message": "Failed to load clients"})
        assert len(events) == 1
        assert broker.subscriber_count(7, CLIENTS) == 0

    def test_format_event(self):
        assert format_event("snapshot", [1]) == "event: snapshot\ndata: [1]\n\n"


class TestSnapshots:

    def test_snapshots_use_wire_format(self, api, user_id, make_client, make_task):
        acme = make_client(hourlyRate=100)
        make_task(acme["id"], title="Streamed", status="done", trackedHours=1)

        tasks = load_tasks_snapshot(user_id)
        assert tasks[0]["title"] == "Streamed"
        assert tasks[0]["clientId"] == acme["id"]

        clients = load_clients_snapshot(user_id)
        assert clients[0]["completedTasks"] == 1
        assert clients[0]["monthlyRevenue"] == 100

    def test_services_run_off_the_event_loop(self, api, monkeypatch):
        seen = []

        def record(user_id, *collections):
            try:
                asyncio.get_running_loop()
                seen.append("event-loop")
            except RuntimeError:
                seen.append("threadpool")

        monkeypatch.setattr("taskflow.domain.clients.service.publish_change", record)
        assert api.post("/clients", json={"name": "Acme Corp", "email": "billing@acme.com"}).status_code == 201
        assert seen == ["threadpool"]

    def test_stream_requires_authentication(self, client):
        assert client.get("/stream/tasks").status_code == 401
