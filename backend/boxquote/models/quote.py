from datetime import datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Quote(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utcnow)
    box_type: str
    width_mm: float
    height_mm: float
    depth_mm: float
    quantity: int
    wrap_paper: Optional[str] = None
    print_mode: Optional[str] = None
    currency: str = "₽"
    total: float
    per_unit: float
    # validator decision: ok / needs_review
    status: Optional[str] = None
    issues: Optional[str] = None
    # optional customer email for the manager to reply to
    email: Optional[str] = None
    # full request as sent, so the quote can be recomputed later
    inputs_json: str
