import json
import random
from typing import Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from sqlalchemy import select, func, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import DailyMotivationQuote, Booking, User
from app.enums import BookingStatus, UserRole
from app.exceptions.errors import NotFoundError, PermissionDeniedError
from app.core.config import settings
from app.utils.dates import utc_today, utc_now, start_of_month
from app.core.logger import get_logger

logger = get_logger("motivation_service")

FALLBACK_QUOTES = [
    {
        "quote": "Take care of your body. It's the only place you have to live.",
        "author": "Jim Rohn",
        "category": "wellness",
        "wellness_tip": "Drink a glass of water before every session.",
    },
    {
        "quote": "The only bad workout is the one that didn't happen.",
        "author": "Unknown",
        "category": "consistency",
        "wellness_tip": "Schedule your next session before you leave the studio.",
    },
    {
        "quote": "Strength doesn't come from what you can do. It comes from overcoming the things you once thought you couldn't.",
        "author": "Rikki Rogers",
        "category": "strength",
        "wellness_tip": "Sleep is when your muscles rebuild. Aim for seven hours tonight.",
    },
    {
        "quote": "Small daily improvements are the key to staggering long-term results.",
        "author": "Unknown",
        "category": "progress",
        "wellness_tip": "Two minutes of mobility work in the morning adds up.",
    },
    {
        "quote": "Motivation is what gets you started. Habit is what keeps you going.",
        "author": "Jim Ryun",
        "category": "habit",
        "wellness_tip": "Pair your workout with something you already do every day.",
    },
]

SYSTEM_PROMPT = """You write one short motivational quote for a member of a fitness and EMS studio.
Reply with JSON only, using the keys: quote, author, category, personalization_reason, wellness_tip.
Keep the quote under 200 characters and the wellness tip to one sentence."""


class MotivationService:
    """One motivational quote per user per day."""

    @staticmethod
    async def _context(db: AsyncSession, user: User) -> Dict:
        sessions_this_month = (await db.execute(
            select(func.count(Booking.id)).where(
                Booking.user_id == user.id,
                Booking.status != BookingStatus.CANCELLED,
                Booking.starts_at >= start_of_month(utc_now()),
            )
        )).scalar_one()
        return {
            "first_name": user.first_name or "there",
            "is_home_user": user.role == UserRole.HOME_USER,
            "sessions_this_month": int(sessions_this_month),
        }

    @staticmethod
    def _fallback(context: Dict) -> Dict:
        quote = dict(random.choice(FALLBACK_QUOTES))
        quote["personalization_reason"] = (
            f"You have {context['sessions_this_month']} sessions booked this month."
        )
        return quote

    @staticmethod
    def _parse_response(content: str) -> Optional[Dict]:
        text = content.strip()
        if text.startswith("```"):
            text = text.strip("`")
            text = text[text.find("{"):]
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return None
        if not isinstance(data, dict) or not data.get("quote"):
            return None
        return {
            "quote": str(data["quote"])[:500],
            "author": data.get("author"),
            "category": data.get("category"),
            "personalization_reason": data.get("personalization_reason"),
            "wellness_tip": data.get("wellness_tip"),
        }

    @staticmethod
    async def _generate(context: Dict) -> Dict:
        if not settings.openai_api_key:
            return MotivationService._fallback(context)

        llm = ChatOpenAI(
            model=settings.MOTIVATION_MODEL,
            temperature=0.8,
            api_key=settings.openai_api_key,
            timeout=20,
        )
        prompt = (
            f"Member first name: {context['first_name']}\n"
            f"Home EMS member: {'yes' if context['is_home_user'] else 'no'}\n"
            f"Sessions this month: {context['sessions_this_month']}"
        )
        try:
            response = await llm.ainvoke([SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)])
        except Exception as e:
            logger.error(f"Quote generation failed, using fallback: {e}")
            return MotivationService._fallback(context)

        parsed = MotivationService._parse_response(response.content)
        if parsed is None:
            logger.warning("Model returned an unparseable quote, using fallback")
            return MotivationService._fallback(context)
        return parsed

    @staticmethod
    async def _todays_quote(db: AsyncSession, user_id: str) -> Optional[DailyMotivationQuote]:
        result = await db.execute(
            select(DailyMotivationQuote).where(
                DailyMotivationQuote.user_id == user_id,
                DailyMotivationQuote.date_generated == utc_today(),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_daily_quote(db: AsyncSession, user: User) -> DailyMotivationQuote:
        user_id = user.id
        existing = await MotivationService._todays_quote(db, user_id)
        if existing:
            return existing

        context = await MotivationService._context(db, user)
        # End the read transaction before calling out to the model
        await db.commit()
        generated = await MotivationService._generate(context)

        quote = DailyMotivationQuote(user_id=user_id, date_generated=utc_today(), **generated)
        db.add(quote)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info(f"Quote for {user_id} was generated concurrently, returning stored one")
            return await MotivationService._todays_quote(db, user_id)

        logger.info(f"Generated daily quote for {user_id}")
        return quote

    @staticmethod
    async def regenerate(db: AsyncSession, actor: User, user_id: str) -> DailyMotivationQuote:
        if not actor.is_staff:
            raise PermissionDeniedError()
        actor_id = actor.id
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")

        context = await MotivationService._context(db, user)
        await db.commit()
        generated = await MotivationService._generate(context)

        quote = await MotivationService._todays_quote(db, user_id)
        if quote is None:
            quote = DailyMotivationQuote(user_id=user_id, date_generated=utc_today())
            db.add(quote)
        for field, value in generated.items():
            setattr(quote, field, value)
        await db.commit()
        logger.info(f"{actor_id} regenerated today's quote for {user_id}")
        return quote

    @staticmethod
    async def history(db: AsyncSession, user_id: str, limit: int = 30) -> List[DailyMotivationQuote]:
        result = await db.execute(
            select(DailyMotivationQuote)
            .where(DailyMotivationQuote.user_id == user_id)
            .order_by(desc(DailyMotivationQuote.date_generated))
            .limit(limit)
        )
        return result.scalars().all()
