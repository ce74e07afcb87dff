"""Staff messages and in-app notifications."""
import pytest

from app.enums import MessagePriority
from app.exceptions.errors import NotFoundError, PermissionDeniedError
from app.services.messaging_service import MessagingService


async def test_send_message_creates_notification(db, trainer, client_user):
    message = await MessagingService.send_message(
        db, trainer, client_user.id, "Welcome", "See you on Monday!", priority=MessagePriority.HIGH
    )

    assert message.sender_name == "Tom"
    assert message.sender_role == "TRAINER"
    assert message.is_read is False
    assert await MessagingService.count_unread(db, client_user.id) == 1

    notifications = await MessagingService.list_notifications(db, client_user.id)
    assert [n.title for n in notifications] == ["New message: Welcome"]


async def test_clients_cannot_send_messages(db, make_user, client_user):
    other = await make_user()
    with pytest.raises(PermissionDeniedError):
        await MessagingService.send_message(db, other, client_user.id, "Hi", "Hello")


async def test_mark_message_read(db, trainer, client_user):
    message = await MessagingService.send_message(db, trainer, client_user.id, "Plan", "New plan attached")

    read = await MessagingService.mark_message_read(db, client_user, message.id)

    assert read.is_read is True
    assert read.read_at is not None
    assert await MessagingService.count_unread(db, client_user.id) == 0
    assert await MessagingService.list_messages(db, client_user.id, unread_only=True) == []


async def test_other_users_message_is_not_found(db, make_user, trainer, client_user):
    message = await MessagingService.send_message(db, trainer, client_user.id, "Private", "Just for you")
    stranger = await make_user()

    with pytest.raises(NotFoundError):
        await MessagingService.mark_message_read(db, stranger, message.id)


async def test_notify_and_mark_notification_read(db, admin, client_user):
    notification = await MessagingService.notify(
        db, admin, client_user.id, "announcement", "Studio closed", "Closed on Friday"
    )
    assert notification.data == {"sent_by": admin.id}

    unread = await MessagingService.list_notifications(db, client_user.id, unread_only=True)
    assert [n.id for n in unread] == [notification.id]

    await MessagingService.mark_notification_read(db, client_user, notification.id)
    assert await MessagingService.list_notifications(db, client_user.id, unread_only=True) == []


async def test_notify_unknown_user_is_not_found(db, admin):
    with pytest.raises(NotFoundError):
        await MessagingService.notify(db, admin, "nobody", "announcement", "Hi", "Hello")
