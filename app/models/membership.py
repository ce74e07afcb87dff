from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Text, ForeignKey, Enum as SQLEnum, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.base import Base
from app.enums import MembershipStatus
from app.utils.dates import utc_now
import cuid


class MembershipType(Base):
    """Sellable membership plan; assigning one grants `credit_amount` credits."""

    __tablename__ = "membership_types"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_days = Column(Integer, nullable=False)
    credit_amount = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)

    __table_args__ = (
        CheckConstraint("duration_days > 0", name="duration_positive"),
        CheckConstraint("credit_amount >= 0", name="credit_amount_non_negative"),
    )


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    membership_type_id = Column(String(25), ForeignKey("membership_types.id"), nullable=False)
    start_date = Column(DateTime, nullable=False, default=utc_now)
    end_date = Column(DateTime, nullable=False)
    status = Column(SQLEnum(MembershipStatus, native_enum=False, length=20), nullable=False, default=MembershipStatus.ACTIVE)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="memberships")
    membership_type = relationship("MembershipType", lazy="joined")
