"""FastAPI router for notification cache endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from echoremote.account.push import PushEvent
from echoremote.remote import EchoRemote

router = APIRouter()


def _remote(request: Request) -> EchoRemote:
    remote = getattr(request.app.state, "remote", None)
    if remote is None:
        raise HTTPException(status_code=503, detail="Account not available")
    return remote


@router.post("/api/notifications/events")
async def receive_push_event(event: PushEvent, request: Request) -> dict[str, Any]:
    """Accept a notification-change push and queue it for reconciliation."""
    remote = _remote(request)
    if not remote.push.handler_count:
        raise HTTPException(status_code=503, detail="Push handling not started")
    remote.push.publish(event)
    reconciler = remote.notifications.reconciler
    return {
        "accepted": True,
        "state": reconciler.state,
        "pending": reconciler.pending_count,
    }


@router.get("/api/notifications/{ref}")
async def get_notification(ref: str, request: Request) -> dict[str, Any]:
    """Look up a cached notification by id or label."""
    found = _remote(request).notifications.find(ref)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Notification {ref!r} not found")
    return found.to_payload()


@router.get("/api/notifications")
async def list_notifications(request: Request, kind: str | None = None) -> list[dict[str, Any]]:
    """List cached notifications, optionally of one kind."""
    records = _remote(request).notifications.store.list_all()
    if kind:
        records = [r for r in records if r.kind.lower() == kind.lower()]
    return [r.to_payload() for r in records]
