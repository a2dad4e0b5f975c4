from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from event_manager.core.config import Settings
from event_manager.core.database import get_db
from event_manager.core.exceptions import AuthenticationError, ForbiddenError
from event_manager.core.security import decode_access_token
from event_manager.models.user import User
from event_manager.services.notification_service import EmailProvider
from event_manager.services.user_info_cache import UserInfoCache
from event_manager.services.user_service import user_service

# Extracts the token from "Authorization: Bearer <token>"
# auto_error=False so a missing header goes through our own 401 response
bearer_scheme = HTTPBearer(auto_error=False)

CREDENTIALS_ERROR_MESSAGE = "Could not validate credentials"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_cache(request: Request) -> UserInfoCache:
    return request.app.state.user_cache


def get_email_provider(request: Request) -> EmailProvider:
    return request.app.state.email_provider


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises 401 if the token is missing, invalid, expired or names an unknown
    user, and 403 if the account has been soft-deleted since the token was issued.
    """
    if credentials is None:
        raise AuthenticationError(CREDENTIALS_ERROR_MESSAGE)

    payload = decode_access_token(credentials.credentials, settings)
    if payload is None:
        raise AuthenticationError(CREDENTIALS_ERROR_MESSAGE)

    # JWT standard uses 'sub' (subject) claim for user identifier
    try:
        user_id = int(payload.get("sub"))
    except (ValueError, TypeError):
        raise AuthenticationError(CREDENTIALS_ERROR_MESSAGE)

    user = user_service.find_any(db, user_id)
    if user is None:
        raise AuthenticationError(CREDENTIALS_ERROR_MESSAGE)

    if not user.is_active:
        raise ForbiddenError("User account is deactivated")

    return user
