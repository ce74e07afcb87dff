from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.enums import MessagePriority


class MessageCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    message_type: str = Field("general", max_length=50)
    priority: MessagePriority = MessagePriority.NORMAL


class MessageResponse(BaseModel):
    id: str
    recipient_id: str
    sender_id: str
    sender_name: Optional[str] = None
    sender_role: Optional[str] = None
    subject: str
    content: str
    message_type: str
    priority: MessagePriority
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationCreate(BaseModel):
    type: str = Field("general", max_length=50)
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=2000)
    action_url: Optional[str] = Field(None, max_length=500)


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    body: str
    action_url: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
