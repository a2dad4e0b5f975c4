"""Response models shared by several routers. Wire names are camelCase."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserSummary(CamelModel):
    id: int
    name: str
    email: str


class UserPublic(UserSummary):
    """Never carries the password hash or login history"""
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class EventResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    date: datetime
    created_by: int
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    creator: Optional[UserSummary] = None
    subscribers: List[int] = []
    participants_count: int = 0


class DeleteResponse(CamelModel):
    message: str
    deleted_at: datetime


class EventSummary(CamelModel):
    id: int
    title: str
    date: datetime


class EventRestoreResponse(CamelModel):
    message: str
    already_active: bool
    event: EventSummary


class UserRestoreResponse(CamelModel):
    message: str
    already_active: bool
    user: UserSummary
