"""
Credit ledger enums.
"""

from enum import Enum


class CreditSource(str, Enum):
    MEMBERSHIP = "MEMBERSHIP"
    PURCHASE = "PURCHASE"
    ADMIN = "ADMIN"
    PROMOTION = "PROMOTION"
    OTHER = "OTHER"


class CreditStatus(str, Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"


class CreditOperation(str, Enum):
    GRANT = "GRANT"
    REDEEM = "REDEEM"
    EXPIRE = "EXPIRE"
    REFUND = "REFUND"


class RelatedEntityType(str, Enum):
    CLASS = "CLASS"
    PRIVATE_SESSION = "PRIVATE_SESSION"
    MEMBERSHIP = "MEMBERSHIP"
    PACKAGE = "PACKAGE"
    ADMIN = "ADMIN"
