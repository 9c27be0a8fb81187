"""Tests for the daily planner."""

import pytest
from fastapi import HTTPException

from taskflow.database import SessionLocal
from taskflow.domain.planner import slots
from taskflow.domain.planner.schemas import ScheduleItemCreate
from taskflow.domain.planner.service import PlannerService
from taskflow.models import ScheduleItem, User

DAY = "2026-03-09"


@pytest.fixture
def task(make_client, make_task):
    acme = make_client()
    return make_task(acme["id"], title="Deep work")


def _place(api, task_id, time_slot, duration=30, day=DAY):
    return api.post(
        "/planner/items",
        json={"date": day, "timeSlot": time_slot, "taskId": task_id, "duration": duration},
    )


class TestSlots:

    def test_day_layout(self):
        assert slots.SLOTS[0] == "08:00"
        assert slots.SLOTS[-1] == "17:30"
        assert len(slots.SLOTS) == 20

    def test_span_helpers(self):
        assert slots.span("09:30", 45) == (570, 615)
        assert slots.end_time("09:30", 45) == "10:15"
        assert slots.overlaps((540, 600), (570, 630))
        assert not slots.overlaps((540, 570), (570, 600))
        assert slots.fits_in_day("17:30", 30)
        assert not slots.fits_in_day("17:30", 45)

    def test_slots_endpoint(self, client):
        assert client.get("/planner/slots").json() == slots.SLOTS


class TestPlaceItem:

    def test_place(self, api, task):
        resp = _place(api, task["id"], "9:00", duration=60)
        assert resp.status_code == 201
        item = resp.json()
        assert item["timeSlot"] == "09:00"
        assert item["endTime"] == "10:00"
        assert item["taskTitle"] == "Deep work"
        assert item["locked"] is False

    def test_overlap_rejected(self, api, task):
        _place(api, task["id"], "09:00", duration=60)
        assert _place(api, task["id"], "09:30").status_code == 409
        assert _place(api, task["id"], "09:00").status_code == 409
        assert _place(api, task["id"], "10:00").status_code == 201

    def test_same_slot_on_another_day(self, api, task):
        _place(api, task["id"], "09:00")
        assert _place(api, task["id"], "09:00", day="2026-03-10").status_code == 201

    def test_must_end_by_close(self, api, task):
        assert _place(api, task["id"], "17:30", duration=60).status_code == 422

    def test_invalid_slot_or_duration(self, api, task):
        assert _place(api, task["id"], "09:15").status_code == 422
        assert _place(api, task["id"], "18:00").status_code == 422
        assert _place(api, task["id"], "09:00", duration=20).status_code == 422
        assert _place(api, task["id"], "09:00", duration=0).status_code == 422

    def test_unknown_task(self, api):
        assert _place(api, 999, "09:00").status_code == 404


class TestPlannerDay:

    def test_day_view(self, api, task):
        _place(api, task["id"], "09:00", duration=60)
        day = api.get(f"/planner/{DAY}").json()

        assert day["date"] == DAY
        by_time = {s["time"]: s for s in day["slots"]}
        assert len(by_time) == 20
        assert by_time["09:00"]["item"]["taskId"] == task["id"]
        assert by_time["09:00"]["continued"] is False
        assert by_time["09:30"]["item"]["taskId"] == task["id"]
        assert by_time["09:30"]["continued"] is True
        assert by_time["10:00"]["item"] is None

    def test_deleting_task_clears_planner(self, api, task):
        _place(api, task["id"], "09:00")
        api.delete(f"/tasks/{task['id']}")
        day = api.get(f"/planner/{DAY}").json()
        assert all(s["item"] is None for s in day["slots"])


class TestLockedItems:

    def test_toggle_lock(self, api, task):
        item = _place(api, task["id"], "09:00").json()
        assert api.post(f"/planner/items/{item['id']}/toggle-lock").json()["locked"] is True
        assert api.post(f"/planner/items/{item['id']}/toggle-lock").json()["locked"] is False

    def test_locked_item_cannot_move(self, api, task):
        item = _place(api, task["id"], "09:00").json()
        api.post(f"/planner/items/{item['id']}/toggle-lock")

        assert api.patch(f"/planner/items/{item['id']}", json={"timeSlot": "11:00"}).status_code == 409
        assert api.patch(f"/planner/items/{item['id']}", json={"duration": 60}).status_code == 409

    def test_unlock_and_move_together(self, api, task):
        item = _place(api, task["id"], "09:00").json()
        api.post(f"/planner/items/{item['id']}/toggle-lock")

        resp = api.patch(f"/planner/items/{item['id']}", json={"timeSlot": "11:00", "locked": False})
        assert resp.status_code == 200
        assert resp.json()["timeSlot"] == "11:00"
        assert resp.json()["locked"] is False

    def test_move_into_other_item(self, api, task):
        _place(api, task["id"], "10:00")
        item = _place(api, task["id"], "09:00").json()
        assert api.patch(f"/planner/items/{item['id']}", json={"duration": 90}).status_code == 409

    def test_locked_item_cannot_be_removed(self, api, task):
        item = _place(api, task["id"], "09:00").json()
        api.post(f"/planner/items/{item['id']}/toggle-lock")
        assert api.delete(f"/planner/items/{item['id']}").status_code == 409

        api.post(f"/planner/items/{item['id']}/toggle-lock")
        assert api.delete(f"/planner/items/{item['id']}").status_code == 200
        assert api.delete(f"/planner/items/{item['id']}").status_code == 404


@pytest.fixture
def unchecked_placement(monkeypatch):
    """Leave slot collisions to the database unique constraint"""
    monkeypatch.setattr(PlannerService, "_check_placement", lambda *args, **kwargs: None)


class TestSlotUniqueness:

    def test_same_slot_rejected_by_database(self, api, task, unchecked_placement):
        assert _place(api, task["id"], "09:00").status_code == 201
        resp = _place(api, task["id"], "09:00")
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Time slot is already taken"
        assert _place(api, task["id"], "09:30").status_code == 201

    def test_move_onto_taken_slot(self, api, task, unchecked_placement):
        _place(api, task["id"], "09:00")
        item = _place(api, task["id"], "10:00").json()
        resp = api.patch(f"/planner/items/{item['id']}", json={"timeSlot": "09:00"})
        assert resp.status_code == 409

        day = api.get(f"/planner/{DAY}").json()
        assert [s["time"] for s in day["slots"] if s["item"] and not s["continued"]] == ["09:00", "10:00"]

    def test_session_usable_after_conflict(self, user_id, task, unchecked_placement):
        db = SessionLocal()
        try:
            user = db.get(User, user_id)
            service = PlannerService(db)
            data = ScheduleItemCreate(date=DAY, timeSlot="09:00", taskId=task["id"])
            service.add_item(data, user)

            with pytest.raises(HTTPException) as exc:
                service.add_item(data, user)
            assert exc.value.status_code == 409

            service.add_item(ScheduleItemCreate(date=DAY, timeSlot="11:00", taskId=task["id"]), user)
            slots_taken = [i.time_slot for i in db.query(ScheduleItem).order_by(ScheduleItem.time_slot)]
            assert slots_taken == ["09:00", "11:00"]
        finally:
            db.close()
