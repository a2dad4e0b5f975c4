from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from pydantic import ConfigDict, Field
from sqlalchemy.orm import Session
from event_manager.api.dependencies import get_current_user
from event_manager.api.schemas import (
    CamelModel, DeleteResponse, EventRestoreResponse, EventResponse, EventSummary, UserSummary,
)
from event_manager.core.database import get_db
from event_manager.models.user import User
from event_manager.services.event_service import event_service
from event_manager.services.subscription_service import subscription_service

router = APIRouter(prefix="/events", tags=["events"])


class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    # A bare YYYY-MM-DD is accepted as midnight
    date: datetime

    model_config = ConfigDict(str_strip_whitespace=True)


class EventUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    date: Optional[datetime] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class SubscriptionRequest(CamelModel):
    # Defaults to the authenticated user when omitted
    user_id: Optional[int] = None


class SubscriptionResponse(CamelModel):
    message: str
    subscribers_count: int
    subscribers: List[int]


class ParticipantsResponse(CamelModel):
    event_id: int
    event_title: str
    participants: List[UserSummary]
    participants_count: int


# REST api
# -----------------------------
# POST, PUT, DELETE, GET

@router.get("", response_model=List[EventResponse])
async def list_events(db: Session = Depends(get_db)):
    """List active events - public, no token required"""
    return event_service.list_events(db)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an event owned by the current user"""
    return event_service.create_event(
        db,
        owner=current_user,
        title=event.title,
        description=event.description,
        date=event.date,
    )


@router.get("/all", response_model=List[EventResponse])
async def list_all_events(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all events, including soft-deleted ones"""
    return event_service.list_events(db, include_deleted=True)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a specific event, deleted or not"""
    return event_service.get_any(db, event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    event_update: EventUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an event - creator only"""
    return event_service.update_event(
        db,
        event_id,
        actor=current_user,
        title=event_update.title,
        description=event_update.description,
        date=event_update.date,
    )


@router.delete("/{event_id}", response_model=DeleteResponse)
async def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark an event as deleted"""
    deleted_at = event_service.delete_event(db, event_id)
    return DeleteResponse(message="Event marked as deleted", deleted_at=deleted_at)


@router.post("/{event_id}/restore", response_model=EventRestoreResponse)
async def restore_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Restore a deleted event; reports already_active for an event that was never deleted"""
    event, restored = event_service.restore_event(db, event_id)
    return EventRestoreResponse(
        message="Event restored" if restored else "Event is already active",
        already_active=not restored,
        event=EventSummary.model_validate(event),
    )


@router.post("/{event_id}/subscribe", response_model=SubscriptionResponse)
async def subscribe_to_event(
    event_id: int,
    body: Optional[SubscriptionRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Subscribe a user (the current user by default) to an event"""
    user_id = body.user_id if body and body.user_id is not None else current_user.id
    return subscription_service.subscribe(db, event_id, user_id)


@router.post("/{event_id}/unsubscribe", response_model=SubscriptionResponse)
async def unsubscribe_from_event(
    event_id: int,
    body: Optional[SubscriptionRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a user (the current user by default) from an event's subscribers"""
    user_id = body.user_id if body and body.user_id is not None else current_user.id
    return subscription_service.unsubscribe(db, event_id, user_id)


@router.get("/{event_id}/participants", response_model=ParticipantsResponse)
async def get_event_participants(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the users subscribed to an event"""
    return subscription_service.list_participants(db, event_id)
