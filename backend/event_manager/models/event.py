from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from event_manager.core.database import Base
from event_manager.models.event_participant import EventParticipant


class Event(Base):
    """
    Event created by a user.

    Subscribers live in the event_participants join table; the creator is
    never one of them.
    """
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, default=None)

    creator = relationship("User", back_populates="created_events")
    # Ordered by row id so the subscriber list follows storage order
    participants = relationship(
        EventParticipant,
        back_populates="event",
        order_by=EventParticipant.id,
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def subscribers(self) -> list[int]:
        return [participant.user_id for participant in self.participants]

    @property
    def participants_count(self) -> int:
        return len(self.participants)
