from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff
from app.api.v1.controllers.motivation_controller import MotivationController
from app.models.user import User
from app.schemas.motivation_schemas import QuoteResponse

router = APIRouter(tags=["Motivation"])


@router.get("/client/daily-quote", response_model=QuoteResponse)
async def daily_quote(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MotivationController.daily_quote(db, user)


@router.get("/client/quote-history", response_model=List[QuoteResponse])
async def quote_history(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await MotivationController.history(db, user)


@router.post("/admin/clients/{client_id}/generate-quote", response_model=QuoteResponse)
async def regenerate_quote(
    client_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await MotivationController.regenerate(db, staff, client_id)
