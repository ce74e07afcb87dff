from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models import User
from app.services.schedule_service import ScheduleService
from app.schemas.schedule_schemas import (
    ServiceTypeCreate, ServiceTypeResponse, ClassCreate, ClassResponse,
    ClassCancelResponse, PrivateSessionCreate, PrivateSessionResponse, PrivateSessionCancelResponse,
    ScheduleEventsResponse
)
from app.core.logger import get_logger

logger = get_logger("schedule_controller")


class ScheduleController:
    """Controller for service types, classes and private session slots."""

    @staticmethod
    async def list_service_types(db: AsyncSession) -> List[ServiceTypeResponse]:
        service_types = await ScheduleService.list_service_types(db)
        return [ServiceTypeResponse.model_validate(item) for item in service_types]

    @staticmethod
    async def create_service_type(db: AsyncSession, actor: User, data: ServiceTypeCreate) -> ServiceTypeResponse:
        service_type = await ScheduleService.create_service_type(db, actor, data.model_dump())
        return ServiceTypeResponse.model_validate(service_type)

    @staticmethod
    async def create_class(db: AsyncSession, actor: User, data: ClassCreate) -> ClassResponse:
        scheduled_class = await ScheduleService.create_class(db, actor, data.model_dump())
        return ClassResponse.model_validate(scheduled_class)

    @staticmethod
    async def cancel_class(db: AsyncSession, actor: User, class_id: str, reason: Optional[str]) -> ClassCancelResponse:
        return ClassCancelResponse(**await ScheduleService.cancel_class(db, actor, class_id, reason))

    @staticmethod
    async def complete_class(db: AsyncSession, actor: User, class_id: str) -> ClassResponse:
        scheduled_class = await ScheduleService.complete_class(db, actor, class_id)
        return ClassResponse.model_validate(scheduled_class)

    @staticmethod
    async def create_private_session(
        db: AsyncSession, actor: User, data: PrivateSessionCreate
    ) -> PrivateSessionResponse:
        session = await ScheduleService.create_private_session(db, actor, data.model_dump())
        return PrivateSessionResponse.model_validate(session)

    @staticmethod
    async def cancel_private_session(
        db: AsyncSession, actor: User, session_id: str, reason: Optional[str]
    ) -> PrivateSessionCancelResponse:
        return PrivateSessionCancelResponse(
            **await ScheduleService.cancel_private_session(db, actor, session_id, reason)
        )

    @staticmethod
    async def complete_private_session(db: AsyncSession, actor: User, session_id: str) -> PrivateSessionResponse:
        session = await ScheduleService.complete_private_session(db, actor, session_id)
        return PrivateSessionResponse.model_validate(session)

    @staticmethod
    async def list_events(db: AsyncSession, days: int) -> ScheduleEventsResponse:
        events = await ScheduleService.list_upcoming_events(db, days)
        return ScheduleEventsResponse(
            classes=[ClassResponse.model_validate(item) for item in events["classes"]],
            private_sessions=[PrivateSessionResponse.model_validate(item) for item in events["private_sessions"]],
        )
