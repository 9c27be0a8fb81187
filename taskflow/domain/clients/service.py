"""Client service - Business logic for client operations"""

import csv
import logging
from datetime import date, datetime
from io import StringIO
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...models import Client, Task, User
from ...realtime import CLIENTS, TASKS, publish_change
from ...shared.dates import month_bounds
from ..settings.service import SettingsService
from .repository import ClientRepository
from .schemas import CLIENT_FIELDS, ClientCreate, ClientResponse, ClientUpdate

logger = logging.getLogger(__name__)

CLIENT_STATUSES = ("all", "active", "inactive")

CSV_HEADER = [
    "ID",
    "Name",
    "Email",
    "Phone",
    "Address",
    "VAT Number",
    "Currency",
    "Hourly Rate",
    "Monthly Wage",
    "Active Tasks",
    "Completed Tasks",
    "Total Revenue",
    "Created At",
]


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def _monthly_revenue(self, user: User) -> dict[int, float]:
        start, end = month_bounds(date.today())
        return self.repo.monthly_revenue_by_client(self.db, user.id, start, end)

    def to_responses(self, clients: list[Client], user: User) -> list[ClientResponse]:
        """Attach the derived monthly revenue to each client"""
        monthly = self._monthly_revenue(user)
        return [ClientResponse.from_client(c, monthly.get(c.id, 0.0)) for c in clients]

    def to_response(self, client: Client, user: User) -> ClientResponse:
        return self.to_responses([client], user)[0]

    def get_clients(
        self, user: User, status: str = "all", search: Optional[str] = None
    ) -> list[Client]:
        """Get clients for a user, newest first"""
        if status not in CLIENT_STATUSES:
            raise HTTPException(
                status_code=422, detail=f"Status must be one of: {', '.join(CLIENT_STATUSES)}"
            )
        return self.repo.search_clients(self.db, user.id, status, search)

    def get_client(self, client_id: int, user: User) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id, user.id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_client(self, data: ClientCreate, user: User) -> Client:
        """Create a new client; counters start at zero"""
        logger.info(f"📥 Creating client for user_id: {user.id}")

        client_data = {column: getattr(data, field) for field, column in CLIENT_FIELDS.items()}
        if not client_data["currency"]:
            client_data["currency"] = SettingsService(self.db).get_currency_code(user)

        client = self.repo.create_client(
            self.db,
            user.id,
            active_tasks=0,
            completed_tasks=0,
            total_revenue=0.0,
            **client_data,
        )
        logger.info(f"✅ Client {client.id} created: {client.name}")
        publish_change(user.id, CLIENTS)
        return client

    def update_client(self, client_id: int, data: ClientUpdate, user: User) -> Client:
        """Update only the fields present in the request"""
        client = self.get_client(client_id, user)

        provided = data.model_dump(exclude_unset=True)
        updates = {CLIENT_FIELDS[field]: value for field, value in provided.items()}
        if not updates:
            return client

        client = self.repo.update_client(self.db, client, **updates)
        logger.info(f"✅ Client {client.id} updated: {', '.join(provided)}")
        publish_change(user.id, CLIENTS)
        return client

    def delete_client(self, client_id: int, user: User) -> dict:
        """Delete a client, its tasks, their dependency edges and planner items"""
        client = self.get_client(client_id, user)

        try:
            task_count = self.repo.delete_client(self.db, client)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete client {client_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to delete client") from e

        logger.info(f"🗑️ Client {client_id} deleted with {task_count} task(s)")
        publish_change(user.id, CLIENTS, TASKS)
        return {"message": "Client deleted", "deletedTasks": task_count}

    def get_client_tasks(self, client_id: int, user: User) -> list[Task]:
        """Get the client's tasks, newest first"""
        self.get_client(client_id, user)
        return self.repo.get_client_tasks(self.db, client_id, user.id)

    def export_clients_csv(
        self, user: User, status: str = "all", search: Optional[str] = None
    ) -> StreamingResponse:
        """Export the filtered client list as CSV"""
        logger.info(f"📊 CSV Export requested by user {user.id} ({user.email})")
        clients = self.get_clients(user, status, search)

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_HEADER)
        for client in clients:
            writer.writerow(
                [
                    client.id,
                    client.name,
                    client.email,
                    client.phone or "",
                    client.address or "",
                    client.vat_number or "",
                    client.currency or "",
                    "" if client.hourly_rate is None else client.hourly_rate,
                    "" if client.monthly_wage is None else client.monthly_wage,
                    client.active_tasks,
                    client.completed_tasks,
                    f"{client.total_revenue or 0.0:.2f}",
                    client.created_at.strftime("%Y-%m-%d %H:%M:%S") if client.created_at else "",
                ]
            )

        filename = f"clients_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        logger.info(f"✅ CSV export successful: {filename} ({len(clients)} clients)")

        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )
