from typing import List, Optional

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ClientMessage, UserNotification, User
from app.enums import MessagePriority
from app.exceptions.errors import NotFoundError, PermissionDeniedError
from app.utils.dates import utc_now
from app.core.logger import get_logger

logger = get_logger("messaging_service")


class MessagingService:
    """Staff-to-client messages and in-app notifications."""

    @staticmethod
    async def create_notification(
        db: AsyncSession, user_id: str, type: str, title: str, body: str,
        action_url: Optional[str] = None, data: Optional[dict] = None
    ) -> UserNotification:
        # Flushed only; callers commit with the change that triggered it
        notification = UserNotification(
            user_id=user_id,
            type=type,
            title=title,
            body=body,
            action_url=action_url,
            data=data,
        )
        db.add(notification)
        await db.flush()
        return notification

    @staticmethod
    async def notify(
        db: AsyncSession, actor: User, user_id: str, type: str, title: str, body: str,
        action_url: Optional[str] = None
    ) -> UserNotification:
        if not actor.is_staff:
            raise PermissionDeniedError()
        if not await db.get(User, user_id):
            raise NotFoundError("User not found")
        notification = await MessagingService.create_notification(
            db, user_id, type, title, body, action_url=action_url, data={"sent_by": actor.id}
        )
        await db.commit()
        logger.info(f"{actor.id} sent {type} notification to {user_id}")
        return notification

    @staticmethod
    async def send_message(
        db: AsyncSession, sender: User, recipient_id: str, subject: str, content: str,
        message_type: str = "general", priority: MessagePriority = MessagePriority.NORMAL
    ) -> ClientMessage:
        if not sender.is_staff:
            raise PermissionDeniedError("Only staff can message clients")
        recipient = await db.get(User, recipient_id)
        if not recipient or not recipient.is_active:
            raise NotFoundError("Client not found")

        message = ClientMessage(
            recipient_id=recipient_id,
            sender_id=sender.id,
            sender_name=sender.full_name,
            sender_role=sender.role.value,
            subject=subject,
            content=content,
            message_type=message_type,
            priority=priority,
        )
        db.add(message)
        await MessagingService.create_notification(
            db, recipient_id,
            type="message",
            title=f"New message: {subject}",
            body=content[:200],
            action_url="/client/messages",
        )
        await db.commit()
        logger.info(f"{sender.id} messaged {recipient_id} ({message_type})")
        return message

    @staticmethod
    async def list_messages(db: AsyncSession, user_id: str, unread_only: bool = False) -> List[ClientMessage]:
        stmt = select(ClientMessage).where(ClientMessage.recipient_id == user_id)
        if unread_only:
            stmt = stmt.where(ClientMessage.is_read.is_(False))
        result = await db.execute(stmt.order_by(desc(ClientMessage.created_at)))
        return result.scalars().all()

    @staticmethod
    async def count_unread(db: AsyncSession, user_id: str) -> int:
        result = await db.execute(
            select(func.count(ClientMessage.id)).where(
                ClientMessage.recipient_id == user_id,
                ClientMessage.is_read.is_(False),
            )
        )
        return int(result.scalar_one())

    @staticmethod
    async def mark_message_read(db: AsyncSession, user: User, message_id: str) -> ClientMessage:
        message = await db.get(ClientMessage, message_id)
        # Someone else's message is reported as missing
        if not message or message.recipient_id != user.id:
            raise NotFoundError("Message not found")
        if not message.is_read:
            message.is_read = True
            message.read_at = utc_now()
            await db.commit()
        return message

    @staticmethod
    async def list_notifications(db: AsyncSession, user_id: str, unread_only: bool = False) -> List[UserNotification]:
        stmt = select(UserNotification).where(UserNotification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(UserNotification.read_at.is_(None))
        result = await db.execute(stmt.order_by(desc(UserNotification.created_at)).limit(100))
        return result.scalars().all()

    @staticmethod
    async def mark_notification_read(db: AsyncSession, user: User, notification_id: str) -> UserNotification:
        notification = await db.get(UserNotification, notification_id)
        if not notification or notification.user_id != user.id:
            raise NotFoundError("Notification not found")
        if notification.read_at is None:
            notification.read_at = utc_now()
            await db.commit()
        return notification
