import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from event_manager.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from event_manager.models.event import Event
from event_manager.models.user import User
from event_manager.services import soft_delete

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND_MESSAGE = "Event not found"


class EventService:
    """Create, read, update and soft-delete lifecycle for events"""

    @staticmethod
    def find_active(db: Session, event_id: int) -> Optional[Event]:
        return soft_delete.active_only(db.query(Event), Event).filter(
            Event.id == event_id
        ).first()

    @staticmethod
    def find_any(db: Session, event_id: int) -> Optional[Event]:
        """Includes soft-deleted events"""
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def get_active(db: Session, event_id: int) -> Event:
        event = EventService.find_active(db, event_id)
        if event is None:
            raise NotFoundError(EVENT_NOT_FOUND_MESSAGE)
        return event

    @staticmethod
    def get_any(db: Session, event_id: int) -> Event:
        event = EventService.find_any(db, event_id)
        if event is None:
            raise NotFoundError(EVENT_NOT_FOUND_MESSAGE)
        return event

    @staticmethod
    def list_events(db: Session, include_deleted: bool = False) -> List[Event]:
        query = db.query(Event)
        if not include_deleted:
            query = soft_delete.active_only(query, Event)
        return query.order_by(Event.date, Event.id).all()

    @staticmethod
    def create_event(
        db: Session,
        owner: User,
        title: str,
        date: datetime,
        description: Optional[str] = None
    ) -> Event:
        event = Event(
            title=title,
            description=description or None,
            date=date,
            created_by=owner.id,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        logger.info(f"Event {event.id} created by user {owner.id}")
        return event

    @staticmethod
    def update_event(
        db: Session,
        event_id: int,
        actor: User,
        title: Optional[str] = None,
        description: Optional[str] = None,
        date: Optional[datetime] = None
    ) -> Event:
        """Apply the supplied fields; only the creator may edit an event"""
        event = EventService.get_active(db, event_id)

        if event.created_by != actor.id:
            logger.warning(f"User {actor.id} tried to edit event {event_id} owned by {event.created_by}")
            raise ForbiddenError("Only the event creator can update it")

        # Blank strings count as not supplied
        if not title and not description and date is None:
            raise ValidationError("No data provided for update")

        if title:
            event.title = title
        if description:
            event.description = description
        if date is not None:
            event.date = date

        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event_id: int) -> datetime:
        event = EventService.get_any(db, event_id)
        deleted_at = soft_delete.mark_deleted(db, event)
        logger.info(f"Event {event_id} marked as deleted")
        return deleted_at

    @staticmethod
    def restore_event(db: Session, event_id: int) -> soft_delete.RestoreResult:
        event = EventService.get_any(db, event_id)
        result = soft_delete.restore(db, event)
        if result.restored:
            logger.info(f"Event {event_id} restored")
        return result


event_service = EventService()
