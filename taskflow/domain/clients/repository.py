"""Client repository - Database operations for clients"""

from datetime import date
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Client, Task


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(db: Session, user_id: int) -> list[Client]:
        """Get all clients for a user, newest first"""
        return (
            db.query(Client)
            .filter(Client.user_id == user_id)
            .order_by(Client.created_at.desc(), Client.id.desc())
            .all()
        )

    @staticmethod
    def search_clients(
        db: Session, user_id: int, status: str = "all", search: Optional[str] = None
    ) -> list[Client]:
        """Filter clients by activity status and a name/email search term"""
        query = db.query(Client).filter(Client.user_id == user_id)

        if status == "active":
            query = query.filter(Client.active_tasks > 0)
        elif status == "inactive":
            query = query.filter(Client.active_tasks <= 0)

        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(Client.name.ilike(term), Client.email.ilike(term)))

        return query.order_by(Client.created_at.desc(), Client.id.desc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: int, user_id: int) -> Optional[Client]:
        """Get a specific client by ID"""
        return db.query(Client).filter(Client.id == client_id, Client.user_id == user_id).first()

    @staticmethod
    def create_client(db: Session, user_id: int, **client_data) -> Client:
        client = Client(user_id=user_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            setattr(client, key, value)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> int:
        """Delete a client together with its tasks; returns the number of tasks removed"""
        task_count = len(client.tasks)
        db.delete(client)
        db.commit()
        return task_count

    @staticmethod
    def get_client_tasks(db: Session, client_id: int, user_id: int) -> list[Task]:
        return (
            db.query(Task)
            .filter(Task.client_id == client_id, Task.user_id == user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .all()
        )

    @staticmethod
    def monthly_revenue_by_client(
        db: Session, user_id: int, month_start: date, next_month_start: date
    ) -> dict[int, float]:
        """Revenue of tasks completed in [month_start, next_month_start), per client"""
        rows = (
            db.query(Task.client_id, func.coalesce(func.sum(Task.revenue), 0.0))
            .filter(
                Task.user_id == user_id,
                Task.status == "done",
                Task.completed_at >= month_start,
                Task.completed_at < next_month_start,
            )
            .group_by(Task.client_id)
            .all()
        )
        return {client_id: float(total) for client_id, total in rows}
