"""Credit ledger: grants, soonest-expiry redemption, lazy expiry and refunds."""
from datetime import timedelta

import pytest
from sqlalchemy import select

from app.enums import CreditOperation, CreditStatus, RelatedEntityType
from app.exceptions.errors import InsufficientCreditError, InvalidStateError
from app.models import Credit, CreditLog
from app.services.credit_ledger_service import CreditLedgerService
from app.utils.dates import utc_now


async def _logs(db, user_id, operation):
    result = await db.execute(
        select(CreditLog).where(CreditLog.user_id == user_id, CreditLog.operation == operation)
    )
    return result.scalars().all()


async def test_grant_adds_to_balance_and_logs(db, client_user, grant):
    user_id = client_user.id
    await grant(user_id, 5)
    await grant(user_id, 3, expires_in=timedelta(days=30))

    assert await CreditLedgerService.get_balance(db, user_id) == 8
    assert len(await _logs(db, user_id, CreditOperation.GRANT)) == 2


async def test_grant_rejects_non_positive_amount(db, client_user):
    with pytest.raises(InvalidStateError):
        await CreditLedgerService.grant(db, client_user.id, 0)


async def test_grant_rejects_past_expiry(db, client_user):
    with pytest.raises(InvalidStateError):
        await CreditLedgerService.grant(db, client_user.id, 2, expiry_date=utc_now() - timedelta(days=1))


async def test_redeem_draws_soonest_expiring_first(db, client_user, grant):
    user_id = client_user.id
    never = await grant(user_id, 5)
    later = await grant(user_id, 2, expires_in=timedelta(days=10))
    sooner = await grant(user_id, 2, expires_in=timedelta(days=5))

    allocations = await CreditLedgerService.redeem(
        db, user_id, 3, related_entity_type=RelatedEntityType.CLASS, related_entity_id="class-1"
    )
    await db.commit()

    assert [(credit.id, portion) for credit, portion in allocations] == [(sooner.id, 2), (later.id, 1)]
    assert sooner.remaining_amount == 0
    assert sooner.status == CreditStatus.USED
    assert later.remaining_amount == 1
    assert never.remaining_amount == 5
    assert await CreditLedgerService.get_balance(db, user_id) == 6


async def test_redeem_insufficient_touches_nothing(db, client_user, grant):
    user_id = client_user.id
    credit = await grant(user_id, 2)

    with pytest.raises(InsufficientCreditError) as exc_info:
        await CreditLedgerService.redeem(
            db, user_id, 3, related_entity_type=RelatedEntityType.CLASS, related_entity_id="class-1"
        )

    assert exc_info.value.required == 3
    assert exc_info.value.available == 2
    assert credit.remaining_amount == 2
    assert await _logs(db, user_id, CreditOperation.REDEEM) == []


async def test_redeem_zero_is_a_no_op(db, client_user):
    allocations = await CreditLedgerService.redeem(
        db, client_user.id, 0, related_entity_type=RelatedEntityType.CLASS, related_entity_id="class-1"
    )
    assert allocations == []


async def test_lazy_expiry_on_balance_read(db, client_user, grant):
    user_id = client_user.id
    expiring = await grant(user_id, 4, expires_in=timedelta(days=1))
    await grant(user_id, 1)

    expiring.expiry_date = utc_now() - timedelta(minutes=1)
    await db.commit()

    assert await CreditLedgerService.get_balance(db, user_id) == 1
    assert expiring.status == CreditStatus.EXPIRED
    assert expiring.remaining_amount == 0

    expired_logs = await _logs(db, user_id, CreditOperation.EXPIRE)
    assert len(expired_logs) == 1
    assert expired_logs[0].amount == 4


async def test_expired_credits_cannot_be_redeemed(db, client_user, grant):
    user_id = client_user.id
    credit = await grant(user_id, 3, expires_in=timedelta(days=1))
    credit.expiry_date = utc_now() - timedelta(seconds=1)
    await db.commit()

    with pytest.raises(InsufficientCreditError):
        await CreditLedgerService.redeem(
            db, user_id, 1, related_entity_type=RelatedEntityType.CLASS, related_entity_id="class-1"
        )


async def test_refund_redemption_restores_exact_entries(db, client_user, grant):
    user_id = client_user.id
    first = await grant(user_id, 1, expires_in=timedelta(days=3))
    second = await grant(user_id, 5)

    await CreditLedgerService.redeem(
        db, user_id, 3, related_entity_type=RelatedEntityType.CLASS,
        related_entity_id="class-1", booking_id="booking-1"
    )
    await db.commit()
    assert await CreditLedgerService.get_balance(db, user_id) == 3

    refunded = await CreditLedgerService.refund_redemption(db, user_id, "booking-1", note="cancelled")
    await db.commit()

    assert refunded == 3
    assert first.remaining_amount == 1
    assert second.remaining_amount == 5
    assert await CreditLedgerService.get_balance(db, user_id) == 6

    # Nothing left to give back the second time
    assert await CreditLedgerService.refund_redemption(db, user_id, "booking-1") == 0


async def test_refund_redemption_forfeits_expired_portion(db, client_user, grant):
    user_id = client_user.id
    short_lived = await grant(user_id, 2, expires_in=timedelta(days=1))
    await grant(user_id, 2)

    await CreditLedgerService.redeem(
        db, user_id, 3, related_entity_type=RelatedEntityType.CLASS,
        related_entity_id="class-1", booking_id="booking-1"
    )
    short_lived.expiry_date = utc_now() - timedelta(minutes=1)
    await db.commit()

    refunded = await CreditLedgerService.refund_redemption(db, user_id, "booking-1")
    await db.commit()

    assert refunded == 1
    assert await CreditLedgerService.get_balance(db, user_id) == 2


async def test_refund_cannot_exceed_granted_amount(db, client_user, grant):
    credit = await grant(client_user.id, 2)
    with pytest.raises(InvalidStateError):
        await CreditLedgerService.refund(db, client_user.id, 1, credit.id)


async def test_history_is_newest_first(db, client_user, grant):
    user_id = client_user.id
    await grant(user_id, 2)
    await CreditLedgerService.redeem(
        db, user_id, 1, related_entity_type=RelatedEntityType.CLASS, related_entity_id="class-1"
    )
    await db.commit()

    history = await CreditLedgerService.get_history(db, user_id)
    assert [log.operation for log in history] == [CreditOperation.REDEEM, CreditOperation.GRANT]


async def test_next_expiry_ignores_entries_without_expiry(db, client_user, grant):
    user_id = client_user.id
    await grant(user_id, 2)
    assert await CreditLedgerService.next_expiry(db, user_id) is None

    dated = await grant(user_id, 1, expires_in=timedelta(days=7))
    assert await CreditLedgerService.next_expiry(db, user_id) == dated.expiry_date


async def test_list_entries_includes_used_entries(db, client_user, grant):
    user_id = client_user.id
    await grant(user_id, 1)
    await CreditLedgerService.redeem(
        db, user_id, 1, related_entity_type=RelatedEntityType.CLASS, related_entity_id="class-1"
    )
    await db.commit()

    entries = await CreditLedgerService.list_entries(db, user_id)
    active = await CreditLedgerService.list_entries(db, user_id, include_inactive=False)
    assert [entry.status for entry in entries] == [CreditStatus.USED]
    assert active == []
    assert isinstance(entries[0], Credit)
