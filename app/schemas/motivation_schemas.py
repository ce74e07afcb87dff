from pydantic import BaseModel
from typing import Optional
from datetime import date


class QuoteResponse(BaseModel):
    id: str
    quote: str
    author: Optional[str] = None
    category: Optional[str] = None
    personalization_reason: Optional[str] = None
    wellness_tip: Optional[str] = None
    date_generated: date

    class Config:
        from_attributes = True
