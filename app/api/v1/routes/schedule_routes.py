from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff, require_admin
from app.api.v1.controllers.schedule_controller import ScheduleController
from app.api.v1.controllers.booking_controller import BookingController
from app.models.user import User
from app.schemas.schedule_schemas import (
    ServiceTypeCreate, ServiceTypeResponse, ClassCreate, ClassResponse, ClassCancelRequest,
    ClassCancelResponse, ClassAvailabilityResponse, PrivateSessionCreate, PrivateSessionResponse,
    PrivateSessionCancelResponse, ScheduleEventsResponse
)

router = APIRouter(tags=["Schedule"])


@router.get("/service-types", response_model=List[ServiceTypeResponse])
async def list_service_types(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await ScheduleController.list_service_types(db)


@router.post("/admin/service-types", response_model=ServiceTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_service_type(
    data: ServiceTypeCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await ScheduleController.create_service_type(db, admin, data)


@router.get(
    "/schedule/events",
    response_model=ScheduleEventsResponse,
    summary="Upcoming Schedule",
    description="Scheduled classes and open private sessions starting within the next `days` days."
)
async def list_events(
    days: int = Query(14, ge=1, le=90),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await ScheduleController.list_events(db, days)


@router.get("/classes/{class_id}/availability", response_model=ClassAvailabilityResponse)
async def class_availability(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await BookingController.get_class_availability(db, class_id)


@router.post("/admin/classes", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ScheduleController.create_class(db, staff, data)


@router.post(
    "/admin/classes/{class_id}/cancel",
    response_model=ClassCancelResponse,
    description="Cancel a class. Every booking on it is cancelled and its credits refunded."
)
async def cancel_class(
    class_id: str,
    request: ClassCancelRequest = ClassCancelRequest(),
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ScheduleController.cancel_class(db, staff, class_id, request.reason)


@router.post("/admin/classes/{class_id}/complete", response_model=ClassResponse)
async def complete_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ScheduleController.complete_class(db, staff, class_id)


@router.post("/admin/private-sessions", response_model=PrivateSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_private_session(
    data: PrivateSessionCreate,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ScheduleController.create_private_session(db, staff, data)


@router.post(
    "/admin/private-sessions/{session_id}/cancel",
    response_model=PrivateSessionCancelResponse,
    description="Cancel a private session. A client booked on it is refunded in full."
)
async def cancel_private_session(
    session_id: str,
    request: ClassCancelRequest = ClassCancelRequest(),
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ScheduleController.cancel_private_session(db, staff, session_id, request.reason)


@router.post("/admin/private-sessions/{session_id}/complete", response_model=PrivateSessionResponse)
async def complete_private_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await ScheduleController.complete_private_session(db, staff, session_id)
