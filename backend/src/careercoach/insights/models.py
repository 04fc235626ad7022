"""IndustryInsight ORM model: per-industry cache of AI-generated market data."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from careercoach.db.base import Base, TimestampMixin


class IndustryInsight(TimestampMixin, Base):
    """Cached insight for one industry.

    The unique constraint on industry is what arbitrates concurrent creation:
    first writer wins, later writers re-read the stored row.
    """

    __tablename__ = "industry_insights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    industry: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    # Generated content
    salary_ranges: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    growth_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    demand_level: Mapped[str] = mapped_column(String, nullable=False)
    top_skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    market_outlook: Mapped[str] = mapped_column(String, nullable=False)
    key_trends: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recommended_skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Refresh cadence (stored, not enforced on read)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    next_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<IndustryInsight industry={self.industry!r}>"
