from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index, Enum as SQLEnum, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.base import Base
from app.enums import CreditSource, CreditStatus, CreditOperation, RelatedEntityType
from app.utils.dates import utc_now
import cuid


class Credit(Base):
    """A single ledger entry: granted credits with their own remaining amount and expiry."""

    __tablename__ = "credits"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    remaining_amount = Column(Integer, nullable=False)
    expiry_date = Column(DateTime, nullable=True)
    source = Column(SQLEnum(CreditSource, native_enum=False, length=20), nullable=False, default=CreditSource.OTHER)
    source_id = Column(String(25), nullable=True)
    status = Column(SQLEnum(CreditStatus, native_enum=False, length=20), nullable=False, default=CreditStatus.ACTIVE)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="credits")
    logs = relationship("CreditLog", back_populates="credit")

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        CheckConstraint("remaining_amount >= 0 AND remaining_amount <= amount", name="remaining_within_amount"),
        Index("ix_credits_user_status_expiry", "user_id", "status", "expiry_date"),
    )


class CreditLog(Base):
    """Append-only audit trail of every ledger movement."""

    __tablename__ = "credit_logs"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    credit_id = Column(String(25), ForeignKey("credits.id"), nullable=False, index=True)
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    operation = Column(SQLEnum(CreditOperation, native_enum=False, length=20), nullable=False)
    related_entity_type = Column(SQLEnum(RelatedEntityType, native_enum=False, length=20), nullable=True)
    related_entity_id = Column(String(25), nullable=True)
    booking_id = Column(String(25), nullable=True, index=True)
    actor_id = Column(String(25), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    credit = relationship("Credit", back_populates="logs")

    __table_args__ = (
        Index("ix_credit_logs_related", "related_entity_type", "related_entity_id"),
    )
