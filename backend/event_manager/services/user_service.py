import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from event_manager.core.exceptions import NotFoundError
from event_manager.models.user import User
from event_manager.models.event import Event
from event_manager.services import soft_delete
from event_manager.services.user_info_cache import UserInfoCache

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"


def public_summary(user: User) -> Dict[str, Any]:
    """The {id, name, email} projection shown to other users"""
    return {"id": user.id, "name": user.name, "email": user.email}


class UserService:
    """Lookups and soft-delete lifecycle for user accounts"""

    @staticmethod
    def find_active(db: Session, user_id: int) -> Optional[User]:
        return soft_delete.active_only(db.query(User), User).filter(
            User.id == user_id
        ).first()

    @staticmethod
    def find_any(db: Session, user_id: int) -> Optional[User]:
        """Includes soft-deleted accounts"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def find_by_email(db: Session, email: str) -> Optional[User]:
        """Includes soft-deleted accounts - emails stay reserved after deletion"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_active(db: Session, user_id: int) -> User:
        user = UserService.find_active(db, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    @staticmethod
    def list_users(db: Session, include_deleted: bool = False) -> List[User]:
        query = db.query(User)
        if not include_deleted:
            query = soft_delete.active_only(query, User)
        return query.order_by(User.id).all()

    @staticmethod
    def get_user_info(db: Session, user_id: int, cache: UserInfoCache) -> Dict[str, Any]:
        cached = cache.get(user_id)
        if cached is not None:
            return cached
        user = UserService.get_active(db, user_id)
        info = public_summary(user)
        cache.set(user_id, info)
        return info

    @staticmethod
    def list_created_events(db: Session, user_id: int) -> List[Event]:
        """Active events created by an active user"""
        UserService.get_active(db, user_id)
        return soft_delete.active_only(db.query(Event), Event).filter(
            Event.created_by == user_id
        ).order_by(Event.date, Event.id).all()

    @staticmethod
    def delete_user(db: Session, user_id: int, cache: UserInfoCache) -> datetime:
        user = UserService.find_any(db, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        deleted_at = soft_delete.mark_deleted(db, user)
        cache.invalidate(user_id)
        logger.info(f"User {user_id} marked as deleted")
        return deleted_at

    @staticmethod
    def restore_user(db: Session, user_id: int, cache: UserInfoCache) -> soft_delete.RestoreResult:
        user = UserService.find_any(db, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        result = soft_delete.restore(db, user)
        if result.restored:
            cache.invalidate(user_id)
            logger.info(f"User {user_id} restored")
        return result


user_service = UserService()
