from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.models import User
from app.services.motivation_service import MotivationService
from app.schemas.motivation_schemas import QuoteResponse


class MotivationController:

    @staticmethod
    async def daily_quote(db: AsyncSession, user: User) -> QuoteResponse:
        return QuoteResponse.model_validate(await MotivationService.get_daily_quote(db, user))

    @staticmethod
    async def history(db: AsyncSession, user: User) -> List[QuoteResponse]:
        return [QuoteResponse.model_validate(quote) for quote in await MotivationService.history(db, user.id)]

    @staticmethod
    async def regenerate(db: AsyncSession, actor: User, user_id: str) -> QuoteResponse:
        return QuoteResponse.model_validate(await MotivationService.regenerate(db, actor, user_id))
