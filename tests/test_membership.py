"""Memberships and credit packages feeding the ledger."""
from datetime import timedelta
from decimal import Decimal

import pytest

from app.enums import CreditSource, MembershipStatus
from app.exceptions.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.services.credit_ledger_service import CreditLedgerService
from app.services.membership_service import MembershipService


async def test_assign_membership_grants_expiring_credits(db, admin, client_user):
    membership_type = await MembershipService.create_membership_type(db, admin, {
        "name": "Monthly EMS",
        "price": Decimal("129.00"),
        "duration_days": 30,
        "credit_amount": 8,
    })

    membership = await MembershipService.assign_membership(db, admin, client_user.id, membership_type.id)

    assert membership.status == MembershipStatus.ACTIVE
    assert membership.end_date - membership.start_date == timedelta(days=30)
    assert await CreditLedgerService.get_balance(db, client_user.id) == 8

    entries = await CreditLedgerService.list_entries(db, client_user.id)
    assert entries[0].source == CreditSource.MEMBERSHIP
    assert entries[0].expiry_date == membership.end_date

    active = await MembershipService.get_active_membership(db, client_user.id)
    assert active.id == membership.id


async def test_cancel_membership_keeps_granted_credits(db, admin, client_user):
    membership_type = await MembershipService.create_membership_type(db, admin, {
        "name": "Starter", "price": Decimal("49.00"), "duration_days": 30, "credit_amount": 4,
    })
    membership = await MembershipService.assign_membership(db, admin, client_user.id, membership_type.id)

    cancelled = await MembershipService.cancel_membership(db, admin, membership.id)

    assert cancelled.status == MembershipStatus.CANCELLED
    assert await MembershipService.get_active_membership(db, client_user.id) is None
    assert await CreditLedgerService.get_balance(db, client_user.id) == 4
    with pytest.raises(InvalidStateError):
        await MembershipService.cancel_membership(db, admin, membership.id)


async def test_assign_package_grants_purchase_credits(db, admin, client_user):
    package = await MembershipService.create_package(db, admin, {
        "name": "10 Pack", "credits": 10, "price": 180, "validity_days": 60,
    })

    credit = await MembershipService.assign_package(db, admin, package.id, client_user.id)

    assert credit.source == CreditSource.PURCHASE
    assert credit.source_id == package.id
    assert credit.amount == 10
    assert await CreditLedgerService.get_balance(db, client_user.id) == 10


async def test_deactivated_package_cannot_be_assigned(db, admin, client_user):
    package = await MembershipService.create_package(db, admin, {"name": "5 Pack", "credits": 5, "price": 95})
    await MembershipService.deactivate_package(db, admin, package.id)

    assert await MembershipService.list_packages(db) == []
    with pytest.raises(NotFoundError):
        await MembershipService.assign_package(db, admin, package.id, client_user.id)


async def test_packages_are_admin_only(db, trainer):
    with pytest.raises(PermissionDeniedError):
        await MembershipService.create_package(db, trainer, {"name": "Free", "credits": 100, "price": 0})
