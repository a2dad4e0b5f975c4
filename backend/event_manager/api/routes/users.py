from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from event_manager.api.dependencies import get_current_user, get_user_cache
from event_manager.api.schemas import (
    DeleteResponse, EventResponse, UserPublic, UserRestoreResponse, UserSummary,
)
from event_manager.core.database import get_db
from event_manager.models.user import User
from event_manager.services.user_info_cache import UserInfoCache
from event_manager.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserPublic])
async def list_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List active users"""
    return user_service.list_users(db)


@router.get("/all", response_model=List[UserPublic])
async def list_all_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all users, including soft-deleted ones"""
    return user_service.list_users(db, include_deleted=True)


@router.get("/info/{user_id}", response_model=UserSummary)
async def get_user_info(
    user_id: int,
    current_user: User = Depends(get_current_user),
    cache: UserInfoCache = Depends(get_user_cache),
    db: Session = Depends(get_db)
):
    """Public {id, name, email} of an active user, served from cache when possible"""
    return user_service.get_user_info(db, user_id, cache)


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return user_service.get_active(db, user_id)


@router.get("/{user_id}/created-events", response_model=List[EventResponse])
async def get_created_events(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active events created by the given user"""
    return user_service.list_created_events(db, user_id)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    cache: UserInfoCache = Depends(get_user_cache),
    db: Session = Depends(get_db)
):
    """Mark a user as deleted"""
    deleted_at = user_service.delete_user(db, user_id, cache)
    return DeleteResponse(message="User marked as deleted", deleted_at=deleted_at)


@router.post("/{user_id}/restore", response_model=UserRestoreResponse)
async def restore_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    cache: UserInfoCache = Depends(get_user_cache),
    db: Session = Depends(get_db)
):
    """Restore a deleted user; reports already_active for a user that was never deleted"""
    user, restored = user_service.restore_user(db, user_id, cache)
    return UserRestoreResponse(
        message="User restored" if restored else "User is already active",
        already_active=not restored,
        user=UserSummary.model_validate(user),
    )
