from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.models import User
from app.services.messaging_service import MessagingService
from app.schemas.messaging_schemas import MessageCreate, MessageResponse, NotificationCreate, NotificationResponse


class MessagingController:
    """Controller for client messages and notifications."""

    @staticmethod
    async def list_messages(db: AsyncSession, user_id: str, unread_only: bool = False) -> List[MessageResponse]:
        messages = await MessagingService.list_messages(db, user_id, unread_only)
        return [MessageResponse.model_validate(message) for message in messages]

    @staticmethod
    async def send_message(db: AsyncSession, sender: User, recipient_id: str, data: MessageCreate) -> MessageResponse:
        message = await MessagingService.send_message(
            db, sender, recipient_id, data.subject, data.content,
            message_type=data.message_type, priority=data.priority
        )
        return MessageResponse.model_validate(message)

    @staticmethod
    async def mark_message_read(db: AsyncSession, user: User, message_id: str) -> MessageResponse:
        return MessageResponse.model_validate(await MessagingService.mark_message_read(db, user, message_id))

    @staticmethod
    async def list_notifications(db: AsyncSession, user: User, unread_only: bool) -> List[NotificationResponse]:
        notifications = await MessagingService.list_notifications(db, user.id, unread_only)
        return [NotificationResponse.model_validate(item) for item in notifications]

    @staticmethod
    async def mark_notification_read(db: AsyncSession, user: User, notification_id: str) -> NotificationResponse:
        notification = await MessagingService.mark_notification_read(db, user, notification_id)
        return NotificationResponse.model_validate(notification)

    @staticmethod
    async def notify(db: AsyncSession, actor: User, user_id: str, data: NotificationCreate) -> NotificationResponse:
        notification = await MessagingService.notify(
            db, actor, user_id, data.type, data.title, data.body, action_url=data.action_url
        )
        return NotificationResponse.model_validate(notification)
