#!/usr/bin/env python3
"""
Seed a user account with sample clients, tasks and availability
Usage: python seed_data.py <email> [firebase_uid]

Goes through the services so client counters and revenue stay consistent.
"""
import sys
from datetime import date, timedelta

from taskflow import models  # noqa: F401 - registers tables on Base.metadata
from taskflow.database import Base, SessionLocal, engine
from taskflow.domain.clients.schemas import ClientCreate
from taskflow.domain.clients.service import ClientService
from taskflow.domain.settings.schemas import AvailabilityWindowCreate
from taskflow.domain.settings.service import SettingsService
from taskflow.domain.tasks.schemas import TaskCreate
from taskflow.domain.tasks.service import TaskService
from taskflow.models import User

CLIENTS = [
    {"name": "Nordlys Design", "email": "hello@nordlys.dk", "hourlyRate": 650, "vatNumber": "DK12345678"},
    {"name": "Fjord Logistics", "email": "ops@fjordlogistics.no", "currency": "NOK", "monthlyWage": 42000},
    {"name": "Hygge Bakery", "email": "orders@hyggebakery.dk", "hourlyRate": 400},
]

# (client index, title, minutes, due in days, status)
TASKS = [
    (0, "Homepage redesign", 480, 5, "in-progress"),
    (0, "Logo variations", 120, -2, "todo"),
    (0, "Brand guidelines PDF", 240, -10, "done"),
    (1, "Route planning dashboard", 600, 14, "todo"),
    (1, "Driver app bugfixes", 180, 1, "in-progress"),
    (2, "Seasonal menu cards", 90, 0, "todo"),
    (2, "Instagram campaign", 60, -5, "done"),
]


def get_or_create_user(db, email: str, firebase_uid: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"👤 Using existing user {user.email} (id {user.id})")
        return user

    user = User(firebase_uid=firebase_uid, email=email, name=email.split("@")[0], role="user")
    db.add(user)
    db.commit()
    db.refresh(user)
    print(f"🆕 Created user {user.email} (id {user.id})")
    return user


def seed(email: str, firebase_uid: str):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        user = get_or_create_user(db, email.lower(), firebase_uid)

        settings = SettingsService(db)
        weekdays = settings.add_window(
            AvailabilityWindowCreate(days=["Mon", "Tue", "Wed", "Thu", "Fri"], **{"from": "09:00", "to": "16:00"}),
            user,
        )
        print(f"🗓️ Added availability Mon-Fri 09:00-16:00 (id {weekdays.id})")

        client_service = ClientService(db)
        clients = [client_service.create_client(ClientCreate(**data), user) for data in CLIENTS]
        print(f"🏢 Added {len(clients)} clients")

        task_service = TaskService(db)
        today = date.today()
        for client_index, title, minutes, due_in, status in TASKS:
            task_service.create_task(
                TaskCreate(
                    clientId=clients[client_index].id,
                    title=title,
                    estimatedDuration=minutes,
                    dueDate=today + timedelta(days=due_in),
                    status=status,
                    trackedHours=minutes / 60 if status == "done" else 0.0,
                    schedules=[weekdays.id],
                ),
                user,
            )
        print(f"✅ Added {len(TASKS)} tasks")
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python seed_data.py <email> [firebase_uid]")
        sys.exit(1)

    seed_email = sys.argv[1]
    seed_uid = sys.argv[2] if len(sys.argv) > 2 else f"seed-{seed_email}"
    seed(seed_email, seed_uid)
