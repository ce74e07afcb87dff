from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, Index, JSON, Enum as SQLEnum
from app.database.base import Base
from app.enums import MessagePriority
from app.utils.dates import utc_now
import cuid


class ClientMessage(Base):
    """Message from staff to a client."""

    __tablename__ = "client_messages"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    recipient_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    sender_id = Column(String(25), ForeignKey("users.id"), nullable=False)
    sender_name = Column(String(200), nullable=True)
    sender_role = Column(String(20), nullable=True)
    subject = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(String(50), nullable=False, default="general")
    priority = Column(SQLEnum(MessagePriority, native_enum=False, length=10), nullable=False, default=MessagePriority.NORMAL)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_client_messages_recipient_read", "recipient_id", "is_read"),
    )


class UserNotification(Base):
    __tablename__ = "user_notifications"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    action_url = Column(String(500), nullable=True)
    data = Column(JSON, nullable=True)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
