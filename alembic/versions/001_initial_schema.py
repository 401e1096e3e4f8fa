"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all initial tables for the Guidely platform:
- Users and saved guides
- Tours
- Bookings
- Reviews
- Notifications
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="traveler", index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("avatar", sa.Text),
        sa.Column("phone", sa.String(30)),
        sa.Column("location", sa.String(200)),
        sa.Column("bio", sa.Text),
        sa.Column("languages", sa.JSON),
        sa.Column("specialty", sa.String(200)),
        sa.Column("preferences", sa.JSON),
        sa.Column("profile_completed", sa.Boolean, server_default=sa.false()),
        sa.Column("rating", sa.Float, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "saved_guides",
        sa.Column(
            "traveler_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "guide_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== TOURS ====================
    op.create_table(
        "tours",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "guide_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, index=True
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("duration", sa.String(50), nullable=False, server_default="2 hours"),
        sa.Column("location", sa.String(200), nullable=False, index=True),
        sa.Column("images", sa.JSON),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_time", sa.String(20), server_default="09:00 AM"),
        sa.Column("max_participants", sa.Integer, nullable=False, server_default="10"),
        sa.Column("available_spots", sa.Integer, nullable=False, server_default="10"),
        sa.Column("status", sa.String(20), server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("traveler_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("traveler_name", sa.String(100), nullable=False),
        sa.Column("traveler_email", sa.String(255), nullable=False),
        sa.Column("guide_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("guide_name", sa.String(100), nullable=False),
        sa.Column("tour_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("tours.id"), nullable=False),
        sa.Column("tour_name", sa.String(200), nullable=False),
        sa.Column("date", sa.String(50), nullable=False),
        sa.Column("time", sa.String(20), server_default="09:00 AM"),
        sa.Column("participants", sa.Integer, nullable=False),
        sa.Column("total_price", sa.Float, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("has_reviewed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_bookings_traveler_recent", "bookings", ["traveler_id", sa.text("created_at DESC")]
    )
    op.create_index(
        "ix_bookings_guide_recent", "bookings", ["guide_id", sa.text("created_at DESC")]
    )
    op.create_index("ix_bookings_date", "bookings", ["date"])

    # ==================== REVIEWS ====================
    op.create_table(
        "reviews",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id"), unique=True, nullable=False
        ),
        sa.Column("traveler_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "guide_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, index=True
        ),
        sa.Column(
            "tour_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("tours.id"), nullable=False, index=True
        ),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== NOTIFICATIONS ====================
    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("notification_type", sa.String(50), nullable=False),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id")),
        sa.Column("is_read", sa.Boolean, server_default=sa.false()),
        sa.Column("email_sent", sa.Boolean, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("notifications")
    op.drop_table("reviews")
    op.drop_index("ix_bookings_date", table_name="bookings")
    op.drop_index("ix_bookings_guide_recent", table_name="bookings")
    op.drop_index("ix_bookings_traveler_recent", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("tours")
    op.drop_table("saved_guides")
    op.drop_table("users")
