"""Client router - FastAPI endpoints for client operations"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..tasks.schemas import TaskResponse
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("", response_model=list[ClientResponse])
def get_clients(
    status: str = Query("all"),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Get clients for the current user, newest first"""
    clients = service.get_clients(current_user, status, search)
    return service.to_responses(clients, current_user)


@router.get("/export")
def export_clients_csv(
    status: str = Query("all"),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Export clients as CSV with optional filters"""
    return service.export_clients_csv(current_user, status, search)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    return service.to_response(service.get_client(client_id, current_user), current_user)


@router.get("/{client_id}/tasks", response_model=list[TaskResponse])
def get_client_tasks(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Get the client's tasks, newest first"""
    return [TaskResponse.from_task(t) for t in service.get_client_tasks(client_id, current_user)]


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    data: ClientCreate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Create a new client"""
    return service.to_response(service.create_client(data, current_user), current_user)


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    data: ClientUpdate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Update a client"""
    return service.to_response(service.update_client(client_id, data, current_user), current_user)


@router.delete("/{client_id}")
def delete_client(
    client_id: int,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """Delete a client and all of its tasks"""
    return service.delete_client(client_id, current_user)
