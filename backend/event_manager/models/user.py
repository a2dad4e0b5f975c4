from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from event_manager.core.database import Base


class User(Base):
    """
    User model representing application users.

    Passwords are stored as bcrypt hashes (never plaintext).
    A non-null deleted_at marks the account as soft-deleted; the row is kept
    so its email stays reserved and the account can be restored.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # Unique across active and deleted accounts
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    # Most recent first: [{"ip": ..., "userAgent": ..., "date": ...}]
    login_history = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, default=None)

    created_events = relationship("Event", back_populates="creator")

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None
