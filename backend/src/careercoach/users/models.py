"""User ORM model.

One row per identity-provider account, provisioned lazily on the first
authenticated request. Profile fields stay empty until onboarding.
"""

from typing import Optional

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from careercoach.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """Identity-linked professional profile."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    clerk_user_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, default="")
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Onboarding profile
    industry: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<User id={self.id} clerk_user_id={self.clerk_user_id!r}>"
