import logging
from typing import Any, Dict
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from event_manager.core.exceptions import SubscriptionError
from event_manager.models.event import Event
from event_manager.models.event_participant import EventParticipant
from event_manager.services.event_service import event_service
from event_manager.services.user_service import public_summary, user_service

logger = logging.getLogger(__name__)


def _subscription_state(event: Event, message: str) -> Dict[str, Any]:
    return {
        "message": message,
        "subscribers_count": event.participants_count,
        "subscribers": event.subscribers,
    }


class SubscriptionService:
    """Event membership: subscribe, unsubscribe and participant listing"""

    @staticmethod
    def _find_participation(db: Session, event_id: int, user_id: int):
        return db.query(EventParticipant).filter(
            EventParticipant.event_id == event_id,
            EventParticipant.user_id == user_id
        ).first()

    @staticmethod
    def subscribe(db: Session, event_id: int, user_id: int) -> Dict[str, Any]:
        event = event_service.get_active(db, event_id)
        user_service.get_active(db, user_id)

        if event.created_by == user_id:
            raise SubscriptionError("Event creator cannot subscribe to their own event")

        if SubscriptionService._find_participation(db, event_id, user_id) is not None:
            raise SubscriptionError("User is already subscribed to this event")

        db.add(EventParticipant(event_id=event_id, user_id=user_id))
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request inserted the same membership first
            db.rollback()
            raise SubscriptionError("User is already subscribed to this event")

        db.refresh(event)
        logger.info(f"User {user_id} subscribed to event {event_id}")
        return _subscription_state(event, "Subscribed to event")

    @staticmethod
    def unsubscribe(db: Session, event_id: int, user_id: int) -> Dict[str, Any]:
        event = event_service.get_active(db, event_id)

        participation = SubscriptionService._find_participation(db, event_id, user_id)
        if participation is None:
            raise SubscriptionError("User is not subscribed to this event")

        db.delete(participation)
        db.commit()
        db.refresh(event)
        logger.info(f"User {user_id} unsubscribed from event {event_id}")
        return _subscription_state(event, "Unsubscribed from event")

    @staticmethod
    def list_participants(db: Session, event_id: int) -> Dict[str, Any]:
        event = event_service.get_any(db, event_id)
        participants = [public_summary(participant.user) for participant in event.participants]
        return {
            "event_id": event.id,
            "event_title": event.title,
            "participants": participants,
            "participants_count": len(participants),
        }


subscription_service = SubscriptionService()
