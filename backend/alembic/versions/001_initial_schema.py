"""Initial schema: users and industry insights.

Revision ID: 001
Revises: None
Create Date: 2026-10-19

Creates: users, industry_insights
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create users and industry_insights."""

    # -- users --
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("clerk_user_id", sa.String, nullable=False, unique=True),
        sa.Column("email", sa.String, nullable=False, server_default=""),
        sa.Column("name", sa.String, nullable=False, server_default=""),
        sa.Column("image_url", sa.String, nullable=True),
        sa.Column("industry", sa.String, nullable=True),
        sa.Column("experience", sa.Integer, nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("skills", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_industry", "users", ["industry"])

    # -- industry_insights --
    op.create_table(
        "industry_insights",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("industry", sa.String, nullable=False, unique=True),
        sa.Column("salary_ranges", sa.JSON, nullable=False),
        sa.Column("growth_rate", sa.Float, nullable=False),
        sa.Column("demand_level", sa.String, nullable=False),
        sa.Column("top_skills", sa.JSON, nullable=False),
        sa.Column("market_outlook", sa.String, nullable=False),
        sa.Column("key_trends", sa.JSON, nullable=False),
        sa.Column("recommended_skills", sa.JSON, nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("next_update", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop both tables."""
    op.drop_table("industry_insights")
    op.drop_index("ix_users_industry", table_name="users")
    op.drop_table("users")
