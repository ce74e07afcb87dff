from sqlalchemy import Column, String, DateTime, Date, Text, ForeignKey, UniqueConstraint
from app.database.base import Base
from app.utils.dates import utc_now
import cuid


class DailyMotivationQuote(Base):
    __tablename__ = "daily_motivation_quotes"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    quote = Column(Text, nullable=False)
    author = Column(String(200), nullable=True)
    category = Column(String(50), nullable=True)
    personalization_reason = Column(Text, nullable=True)
    wellness_tip = Column(Text, nullable=True)
    date_generated = Column(Date, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "date_generated", name="uq_daily_motivation_quotes_user_date"),
    )
