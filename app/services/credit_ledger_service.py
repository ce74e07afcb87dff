"""
Credit ledger.

Credits live in individual entries, each with its own remaining amount and
optional expiry. Redemption draws from the entries that expire soonest, and
every movement is appended to `credit_logs`. Expiry is applied lazily: any
read or redemption first sweeps the entries whose expiry has passed.

Nothing in here commits. The caller owns the transaction so a booking and its
redemption land (or roll back) together.
"""
from collections import defaultdict
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Credit, CreditLog
from app.enums import CreditSource, CreditStatus, CreditOperation, RelatedEntityType
from app.exceptions.errors import InsufficientCreditError, InvalidStateError, NotFoundError
from app.utils.dates import utc_now
from app.utils.retry import retry_read
from app.core.logger import get_logger

logger = get_logger("credit_ledger_service")


def _is_expired(credit: Credit, now: datetime) -> bool:
    if credit.status == CreditStatus.EXPIRED:
        return True
    return credit.expiry_date is not None and credit.expiry_date <= now


def _usable_filter(user_id: str, now: datetime):
    return (
        Credit.user_id == user_id,
        Credit.status == CreditStatus.ACTIVE,
        Credit.remaining_amount > 0,
        or_(Credit.expiry_date.is_(None), Credit.expiry_date > now),
    )


class CreditLedgerService:
    """Grant, redeem, refund and balance operations over the credit ledger."""

    @staticmethod
    async def grant(
        db: AsyncSession,
        user_id: str,
        amount: int,
        source: CreditSource = CreditSource.ADMIN,
        expiry_date: Optional[datetime] = None,
        source_id: Optional[str] = None,
        related_entity_type: Optional[RelatedEntityType] = None,
        related_entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Credit:
        if amount is None or amount <= 0:
            raise InvalidStateError("Credit amount must be positive")
        if expiry_date is not None and expiry_date <= utc_now():
            raise InvalidStateError("Expiry date must be in the future")

        credit = Credit(
            user_id=user_id,
            amount=amount,
            remaining_amount=amount,
            expiry_date=expiry_date,
            source=source,
            source_id=source_id,
            status=CreditStatus.ACTIVE,
        )
        db.add(credit)
        await db.flush()

        db.add(CreditLog(
            credit_id=credit.id,
            user_id=user_id,
            amount=amount,
            operation=CreditOperation.GRANT,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            actor_id=actor_id,
            note=note,
        ))
        await db.flush()

        logger.info(f"Granted {amount} credits to {user_id} (source={source.value}, expires={expiry_date})")
        return credit

    @staticmethod
    async def expire_due_credits(db: AsyncSession, user_id: Optional[str] = None, now: Optional[datetime] = None) -> int:
        """Mark every active entry past its expiry as EXPIRED. Returns credits forfeited."""
        now = now or utc_now()
        stmt = select(Credit).where(
            Credit.status == CreditStatus.ACTIVE,
            Credit.expiry_date.is_not(None),
            Credit.expiry_date <= now,
        )
        if user_id is not None:
            stmt = stmt.where(Credit.user_id == user_id)

        result = await db.execute(stmt.with_for_update())
        entries = result.scalars().all()
        if not entries:
            return 0

        forfeited = 0
        for credit in entries:
            remaining = credit.remaining_amount
            credit.status = CreditStatus.EXPIRED
            credit.remaining_amount = 0
            if remaining > 0:
                forfeited += remaining
                db.add(CreditLog(
                    credit_id=credit.id,
                    user_id=credit.user_id,
                    amount=remaining,
                    operation=CreditOperation.EXPIRE,
                    note="Expired unused credits",
                ))
        await db.flush()

        logger.info(f"Expired {len(entries)} credit entries ({forfeited} credits forfeited)")
        return forfeited

    @staticmethod
    async def redeem(
        db: AsyncSession,
        user_id: str,
        amount: int,
        related_entity_type: RelatedEntityType,
        related_entity_id: str,
        booking_id: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> List[Tuple[Credit, int]]:
        """Consume `amount` credits, soonest-expiring entries first.

        Either the whole amount is redeemed or nothing is touched and
        InsufficientCreditError is raised.
        """
        if amount < 0:
            raise InvalidStateError("Redeem amount cannot be negative")
        if amount == 0:
            return []

        now = utc_now()
        await CreditLedgerService.expire_due_credits(db, user_id, now)

        # Entries without expiry are drawn last
        result = await db.execute(
            select(Credit)
            .where(*_usable_filter(user_id, now))
            .order_by(Credit.expiry_date.is_(None), Credit.expiry_date.asc(), Credit.created_at.asc())
            .with_for_update()
        )
        entries = result.scalars().all()

        available = sum(credit.remaining_amount for credit in entries)
        if available < amount:
            logger.warning(f"Insufficient credits for {user_id}: need {amount}, have {available}")
            raise InsufficientCreditError(required=amount, available=available)

        allocations = []
        outstanding = amount
        for credit in entries:
            if outstanding == 0:
                break
            portion = min(credit.remaining_amount, outstanding)
            credit.remaining_amount -= portion
            if credit.remaining_amount == 0:
                credit.status = CreditStatus.USED
            outstanding -= portion
            allocations.append((credit, portion))
            db.add(CreditLog(
                credit_id=credit.id,
                user_id=user_id,
                amount=portion,
                operation=CreditOperation.REDEEM,
                related_entity_type=related_entity_type,
                related_entity_id=related_entity_id,
                booking_id=booking_id,
                actor_id=actor_id,
            ))
        await db.flush()

        logger.info(
            f"Redeemed {amount} credits from {user_id} for {related_entity_type.value} {related_entity_id} "
            f"across {len(allocations)} entries"
        )
        return allocations

    @staticmethod
    async def refund(
        db: AsyncSession,
        user_id: str,
        amount: int,
        credit_id: str,
        related_entity_type: Optional[RelatedEntityType] = None,
        related_entity_id: Optional[str] = None,
        booking_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Credit:
        """Put `amount` credits back onto the entry they were drawn from."""
        if amount <= 0:
            raise InvalidStateError("Refund amount must be positive")

        result = await db.execute(
            select(Credit).where(Credit.id == credit_id).with_for_update()
        )
        credit = result.scalar_one_or_none()
        if not credit or credit.user_id != user_id:
            raise NotFoundError("Credit entry not found")
        if _is_expired(credit, utc_now()):
            raise InvalidStateError("Cannot refund onto an expired credit entry")
        if credit.remaining_amount + amount > credit.amount:
            raise InvalidStateError("Refund exceeds the amount originally granted")

        credit.remaining_amount += amount
        credit.status = CreditStatus.ACTIVE
        db.add(CreditLog(
            credit_id=credit.id,
            user_id=user_id,
            amount=amount,
            operation=CreditOperation.REFUND,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            booking_id=booking_id,
            actor_id=actor_id,
            note=note,
        ))
        await db.flush()

        logger.info(f"Refunded {amount} credits to {user_id} on entry {credit.id}")
        return credit

    @staticmethod
    async def refund_redemption(
        db: AsyncSession,
        user_id: str,
        booking_id: str,
        actor_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Refund what a booking redeemed and has not had back yet.

        Portions drawn from entries that have expired since are forfeited.
        Returns the number of credits refunded.
        """
        result = await db.execute(
            select(CreditLog).where(
                CreditLog.user_id == user_id,
                CreditLog.booking_id == booking_id,
                CreditLog.operation.in_([CreditOperation.REDEEM, CreditOperation.REFUND]),
            ).order_by(CreditLog.created_at.asc())
        )
        logs = result.scalars().all()

        outstanding = defaultdict(int)
        related = {}
        for log in logs:
            if log.operation == CreditOperation.REDEEM:
                outstanding[log.credit_id] += log.amount
                related[log.credit_id] = (log.related_entity_type, log.related_entity_id)
            else:
                outstanding[log.credit_id] -= log.amount

        now = utc_now()
        refunded = 0
        for credit_id, amount in outstanding.items():
            if amount <= 0:
                continue
            credit = await db.get(Credit, credit_id)
            if credit is None or _is_expired(credit, now):
                logger.warning(f"Forfeiting refund of {amount} credits for booking {booking_id}: entry {credit_id} expired")
                continue
            entity_type, entity_id = related[credit_id]
            await CreditLedgerService.refund(
                db, user_id, amount, credit_id,
                related_entity_type=entity_type,
                related_entity_id=entity_id,
                booking_id=booking_id,
                actor_id=actor_id,
                note=note,
            )
            refunded += amount

        return refunded

    @staticmethod
    async def get_balance(db: AsyncSession, user_id: str) -> int:
        """Sum of remaining credits over active, unexpired entries."""
        now = utc_now()
        await CreditLedgerService.expire_due_credits(db, user_id, now)
        result = await db.execute(
            select(func.coalesce(func.sum(Credit.remaining_amount), 0))
            .where(*_usable_filter(user_id, now))
        )
        return int(result.scalar_one())

    @staticmethod
    @retry_read
    async def read_balance(db: AsyncSession, user_id: str) -> int:
        return await CreditLedgerService.get_balance(db, user_id)

    @staticmethod
    @retry_read
    async def list_entries(db: AsyncSession, user_id: str, include_inactive: bool = True) -> List[Credit]:
        await CreditLedgerService.expire_due_credits(db, user_id)
        stmt = select(Credit).where(Credit.user_id == user_id)
        if not include_inactive:
            stmt = stmt.where(Credit.status == CreditStatus.ACTIVE)
        result = await db.execute(stmt.order_by(desc(Credit.created_at)))
        return result.scalars().all()

    @staticmethod
    @retry_read
    async def get_history(db: AsyncSession, user_id: str, limit: int = 100) -> List[CreditLog]:
        result = await db.execute(
            select(CreditLog)
            .where(CreditLog.user_id == user_id)
            .order_by(desc(CreditLog.created_at))
            .limit(limit)
        )
        return result.scalars().all()

    @staticmethod
    async def next_expiry(db: AsyncSession, user_id: str) -> Optional[datetime]:
        now = utc_now()
        result = await db.execute(
            select(func.min(Credit.expiry_date)).where(*_usable_filter(user_id, now))
        )
        return result.scalar_one_or_none()
