from typing import Annotated, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from pydantic import EmailStr, Field, StringConstraints
from sqlalchemy.orm import Session
from event_manager.api.dependencies import (
    get_current_user, get_email_provider, get_settings,
)
from event_manager.api.schemas import CamelModel, UserPublic, UserSummary
from event_manager.core.config import Settings
from event_manager.core.database import get_db
from event_manager.models.user import User
from event_manager.services.auth_service import auth_service
from event_manager.services.notification_service import EmailProvider, send_security_alert

router = APIRouter(prefix="/auth", tags=["auth"])


class UserCreate(CamelModel):
    email: EmailStr
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    password: str = Field(min_length=1)


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterResponse(UserPublic):
    message: str = "Registration successful"


class Token(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserSummary


def get_client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop when behind a proxy, otherwise the peer address"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else None


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    user = auth_service.register(
        db,
        email=user_data.email,
        name=user_data.name,
        password=user_data.password,
    )
    return RegisterResponse.model_validate(user)


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    email_provider: EmailProvider = Depends(get_email_provider)
):
    """Login and get a bearer token valid for 24 hours"""
    ip = get_client_ip(request)
    user_agent = request.headers.get("user-agent")

    result = auth_service.login(
        db,
        settings,
        email=credentials.email,
        password=credentials.password,
        ip=ip,
        user_agent=user_agent,
    )

    if result.new_device:
        # Sent after the response so a slow mail server never delays login
        background_tasks.add_task(
            send_security_alert, email_provider, result.user.email, user_agent, ip)

    return Token(token=result.token, user=UserSummary.model_validate(result.user))


@router.get("/me", response_model=UserPublic)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user
