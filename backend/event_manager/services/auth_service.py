import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from event_manager.core.config import Settings
from event_manager.core.exceptions import AuthenticationError, ConflictError, ForbiddenError
from event_manager.core.security import create_access_token, get_password_hash, verify_password
from event_manager.models.user import User
from event_manager.services.user_service import user_service

logger = logging.getLogger(__name__)

EMAIL_IN_USE_MESSAGE = "Email already registered"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass
class LoginResult:
    token: str
    user: User
    # True when this (ip, user-agent) pair was not in the login history
    new_device: bool


def record_login(
    user: User,
    ip: Optional[str],
    user_agent: Optional[str],
    limit: int
) -> bool:
    """
    Prepend (ip, user_agent) to the user's login history when it is unseen.

    Returns True for an unseen pair. Logins without an ip or user agent are
    not recorded. The history keeps at most `limit` entries, newest first.
    """
    if not ip or not user_agent:
        return False

    history = list(user.login_history or [])
    if any(entry.get("ip") == ip and entry.get("userAgent") == user_agent for entry in history):
        return False

    entry = {
        "ip": ip,
        "userAgent": user_agent,
        "date": datetime.now(timezone.utc).isoformat(),
    }
    # Assign a new list so SQLAlchemy sees the JSON column change
    user.login_history = [entry] + history[:max(limit - 1, 0)]
    return True


class AuthService:

    @staticmethod
    def register(db: Session, email: str, name: str, password: str) -> User:
        email = normalize_email(email)

        # Deleted accounts still own their email
        if user_service.find_by_email(db, email) is not None:
            logger.warning(f"Registration rejected, email in use: {email}")
            raise ConflictError(EMAIL_IN_USE_MESSAGE)

        user = User(
            email=email,
            name=name,
            hashed_password=get_password_hash(password),
            login_history=[],
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Two registrations for the same email raced past the check above
            db.rollback()
            raise ConflictError(EMAIL_IN_USE_MESSAGE)
        db.refresh(user)
        logger.info(f"User {user.id} registered")
        return user

    @staticmethod
    def login(
        db: Session,
        settings: Settings,
        email: str,
        password: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> LoginResult:
        user = user_service.find_by_email(db, normalize_email(email))

        # Same message for unknown email and wrong password
        if user is None or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Incorrect email or password")

        if not user.is_active:
            raise ForbiddenError("User account is deactivated")

        new_device = record_login(user, ip, user_agent, settings.LOGIN_HISTORY_LIMIT)
        if new_device:
            db.commit()
            db.refresh(user)
            logger.info(f"New device login for user {user.id} from {ip}")

        token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            settings=settings,
        )
        return LoginResult(token=token, user=user, new_device=new_device)


auth_service = AuthService()
