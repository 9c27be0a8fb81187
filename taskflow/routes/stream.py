"""
Server-Sent Events for live task and client lists

Each stream sends a full snapshot on connect and again after every change to
the collection, so clients never have to merge partial updates.
"""

import asyncio
import json
import logging
from datetime import date
from typing import AsyncIterator, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from ..auth import get_current_user
from ..database import SessionLocal
from ..domain.clients.repository import ClientRepository
from ..domain.clients.schemas import ClientResponse
from ..domain.tasks.repository import TaskRepository
from ..domain.tasks.schemas import TaskResponse
from ..models import User
from ..realtime import CLIENTS, TASKS, broker
from ..shared.dates import month_bounds

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stream", tags=["Realtime"])

KEEPALIVE_SECONDS = 15.0


def format_event(event: str, data) -> str:
    return f"event: {event}\ndata: {json.dumps(data, default=str)}\n\n"


def load_tasks_snapshot(user_id: int) -> list[dict]:
    db = SessionLocal()
    try:
        tasks = TaskRepository.get_tasks(db, user_id)
        return [TaskResponse.from_task(t).model_dump(mode="json") for t in tasks]
    finally:
        db.close()


def load_clients_snapshot(user_id: int) -> list[dict]:
    db = SessionLocal()
    try:
        start, end = month_bounds(date.today())
        monthly = ClientRepository.monthly_revenue_by_client(db, user_id, start, end)
        return [
            ClientResponse.from_client(c, monthly.get(c.id, 0.0)).model_dump(mode="json")
            for c in ClientRepository.get_clients(db, user_id)
        ]
    finally:
        db.close()


async def event_stream(
    request: Request,
    user_id: int,
    collection: str,
    load_snapshot: Callable[[int], list[dict]],
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """Snapshot, then a fresh snapshot per change; keep-alive comments while idle"""
    subscription = broker.subscribe(user_id, collection)
    logger.info(f"📡 {collection} stream opened for user {user_id}")

    async def snapshot() -> str:
        try:
            data = await run_in_threadpool(load_snapshot, user_id)
        except Exception as e:
            logger.error(f"❌ Failed to load {collection} snapshot for user {user_id}: {str(e)}")
            return format_event("error", {"message": f"Failed to load {collection}"})
        return format_event("snapshot", data)

    try:
        yield await snapshot()
        while not await request.is_disconnected():
            try:
                await asyncio.wait_for(subscription.queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue

            # Collapse a burst of changes into one snapshot
            while not subscription.queue.empty():
                subscription.queue.get_nowait()
            yield await snapshot()
    finally:
        broker.unsubscribe(subscription)
        logger.info(f"📴 {collection} stream closed for user {user_id}")


def _streaming_response(generator: AsyncIterator[str]) -> StreamingResponse:
    return StreamingResponse(
        generator,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/tasks")
async def stream_tasks(request: Request, current_user: User = Depends(get_current_user)):
    """Live task list: a snapshot on connect and after every change"""
    return _streaming_response(
        event_stream(request, current_user.id, TASKS, load_tasks_snapshot)
    )


@router.get("/clients")
async def stream_clients(request: Request, current_user: User = Depends(get_current_user)):
    """Live client list: a snapshot on connect and after every change"""
    return _streaming_response(
        event_stream(request, current_user.id, CLIENTS, load_clients_snapshot)
    )
