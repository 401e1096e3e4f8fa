"""Account status and notification read time.

Revision ID: 002_account_status
Revises: 001_initial
Create Date: 2026-10-19

- users.status: admin-facing account state (active, inactive, suspended)
- notifications.read_at: when the user marked the notification read
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "002_account_status"
down_revision: str = "001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "users",
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
    )
    op.create_index("ix_users_status", "users", ["status"])
    op.add_column("notifications", sa.Column("read_at", sa.DateTime(timezone=True)))


def downgrade() -> None:
    op.drop_column("notifications", "read_at")
    op.drop_index("ix_users_status", table_name="users")
    op.drop_column("users", "status")
