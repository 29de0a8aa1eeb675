from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from eventhub.domain.errors import ConflictError, NotFoundError
from eventhub.domain.models import Event
from eventhub.domain.schedule import event_start
from eventhub.repositories.event_store import EventStore
from eventhub.repositories.user_store import UserStore
from eventhub.schemas import EventIn, EventUpdateIn
from eventhub.services.registration_service import RegistrationService
from eventhub.services.session_service import Identity, current_identity, optional_identity

router = APIRouter(prefix="/api/events", tags=["events"])


def _state(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} not configured")
    return value


def _events(request: Request) -> EventStore:
    return _state(request, "events")


def _users(request: Request) -> UserStore:
    return _state(request, "users")


def _registrations(request: Request) -> RegistrationService:
    return _state(request, "registration_service")


def _listing(events: list[Event], **extra) -> dict:
    return {"success": True, "events": [e.to_dict() for e in events], "total": len(events), **extra}


async def _owned_event(request: Request, event_id: int, identity: Identity, action: str) -> Event:
    event = await _events(request).find_by_id(event_id)
    if event is None:
        raise HTTPException(404, "Event not found")
    if event.organizer_id != identity.id:
        raise HTTPException(403, f"Only the event organizer can {action} this event")
    return event


def _validate_schedule(
    capacity: Optional[int], price: Optional[float], date: Optional[str] = None, time: Optional[str] = None
) -> None:
    if capacity is not None and capacity <= 0:
        raise HTTPException(400, "Capacity must be greater than 0")
    if price is not None and price < 0:
        raise HTTPException(400, "Price cannot be negative")
    if date is None and time is None:
        return
    start = event_start(date or "", time or "")
    if start is None:
        raise HTTPException(400, "Invalid event date or time")
    if start <= datetime.now():
        raise HTTPException(400, "Event date must be in the future")


# -------------------------------------- listings --------------------------------------
@router.get("")
async def list_events(request: Request, identity: Optional[Identity] = Depends(optional_identity)):
    listed = await _events(request).find_all()
    payload = [item.to_dict() for item in listed]
    if identity is not None:
        user = await _users(request).find_by_id(identity.id)
        if user is not None:
            for item in payload:
                item["isRegistered"] = item["id"] in user.registered_events
    return {"success": True, "events": payload, "total": len(payload)}


@router.get("/search")
async def search_events(request: Request, q: str = ""):
    query = q.strip()
    if not query:
        raise HTTPException(400, "Search query is required")
    return _listing(await _events(request).search(query), query=query)


@router.get("/category/{category}")
async def events_by_category(category: str, request: Request):
    return _listing(await _events(request).find_by_category(category), category=category)


@router.get("/upcoming")
async def upcoming_events(request: Request, limit: int = Query(10, ge=1, le=100)):
    return _listing(await _events(request).get_upcoming_events(limit))


@router.get("/popular")
async def popular_events(request: Request, limit: int = Query(5, ge=1, le=100)):
    return _listing(await _events(request).get_popular_events(limit))


@router.get("/stats")
async def event_stats(request: Request):
    return {"success": True, "stats": await _events(request).get_event_stats()}


@router.get("/mine")
async def my_events(request: Request, identity: Identity = Depends(current_identity)):
    return _listing(await _events(request).get_events_by_organizer(identity.id))


@router.get("/{event_id}")
async def get_event(event_id: int, request: Request):
    event = await _events(request).find_by_id(event_id)
    if event is None:
        raise HTTPException(404, "Event not found")
    return {"success": True, "event": event.to_dict()}


# -------------------------------------- organizer --------------------------------------
@router.post("", status_code=201)
async def create_event(body: EventIn, request: Request, identity: Identity = Depends(current_identity)):
    _validate_schedule(body.capacity, body.price, body.date, body.time)
    event = await _events(request).create(
        **body.model_dump(),
        organizer_id=identity.id,
        organizer_name=identity.name,
    )
    return {"success": True, "message": "Event created successfully", "event": event.to_dict()}


@router.put("/{event_id}")
async def update_event(
    event_id: int, body: EventUpdateIn, request: Request, identity: Identity = Depends(current_identity)
):
    event = await _owned_event(request, event_id, identity, "update")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    rescheduled = "date" in changes or "time" in changes
    _validate_schedule(
        changes.get("capacity"),
        changes.get("price"),
        changes.get("date", event.date) if rescheduled else None,
        changes.get("time", event.time) if rescheduled else None,
    )
    if changes.get("capacity") is not None and changes["capacity"] < event.registrations:
        raise HTTPException(409, "Capacity cannot be lower than current registrations")
    try:
        updated = await _events(request).update(event.id, **changes)
    except NotFoundError:
        raise HTTPException(404, "Event not found")
    return {"success": True, "message": "Event updated successfully", "event": updated.to_dict()}


@router.delete("/{event_id}")
async def delete_event(event_id: int, request: Request, identity: Identity = Depends(current_identity)):
    event = await _owned_event(request, event_id, identity, "delete")
    try:
        await _registrations(request).cancel_event(event.id)
    except NotFoundError:
        raise HTTPException(404, "Event not found")
    return {"success": True, "message": "Event deleted successfully"}


# -------------------------------------- attendees --------------------------------------
@router.post("/{event_id}/register")
async def register_for_event(event_id: int, request: Request, identity: Identity = Depends(current_identity)):
    try:
        await _registrations(request).register(event_id, identity.id)
    except NotFoundError as exc:
        raise HTTPException(404, exc.message)
    except ConflictError as exc:
        raise HTTPException(409, exc.message)
    return {"success": True, "message": "Successfully registered for event", "eventId": event_id}


@router.delete("/{event_id}/register")
async def unregister_from_event(event_id: int, request: Request, identity: Identity = Depends(current_identity)):
    try:
        await _registrations(request).unregister(event_id, identity.id)
    except NotFoundError as exc:
        raise HTTPException(404, exc.message)
    except ConflictError as exc:
        raise HTTPException(409, exc.message)
    return {"success": True, "message": "Registration cancelled", "eventId": event_id}
