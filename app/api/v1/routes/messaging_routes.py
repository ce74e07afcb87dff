from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff
from app.api.v1.controllers.messaging_controller import MessagingController
from app.models.user import User
from app.schemas.messaging_schemas import MessageCreate, MessageResponse, NotificationCreate, NotificationResponse

router = APIRouter(tags=["Messages"])


@router.get("/client/messages", response_model=List[MessageResponse])
async def list_my_messages(
    unread_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MessagingController.list_messages(db, user.id, unread_only)


@router.post("/client/messages/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MessagingController.mark_message_read(db, user, message_id)


@router.get("/admin/clients/{client_id}/messages", response_model=List[MessageResponse])
async def list_client_messages(
    client_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await MessagingController.list_messages(db, client_id)


@router.post(
    "/admin/clients/{client_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED
)
async def send_client_message(
    client_id: str,
    data: MessageCreate,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await MessagingController.send_message(db, staff, client_id, data)


@router.post(
    "/admin/clients/{client_id}/notify",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Notifications"]
)
async def notify_client(
    client_id: str,
    data: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await MessagingController.notify(db, staff, client_id, data)


@router.get("/notifications", response_model=List[NotificationResponse], tags=["Notifications"])
async def list_notifications(
    unread_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MessagingController.list_notifications(db, user, unread_only)


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse, tags=["Notifications"])
async def mark_notification_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MessagingController.mark_notification_read(db, user, notification_id)
