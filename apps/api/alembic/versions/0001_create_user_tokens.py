"""create user_tokens

Revision ID: 0001_create_user_tokens
Revises:
Create Date: 2026-10-19 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_create_user_tokens"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slack_user_id", sa.String(length=50), nullable=False),
        sa.Column("slack_team_id", sa.String(length=50), nullable=False),
        sa.Column("google_access_token", sa.Text(), nullable=False),
        sa.Column("google_refresh_token", sa.Text(), nullable=True),
        sa.Column("google_token_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slack_user_id", name="uq_user_tokens_slack_user_id"),
    )
    op.create_index("ix_user_tokens_slack_user_id", "user_tokens", ["slack_user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_tokens_slack_user_id", table_name="user_tokens")
    op.drop_table("user_tokens")
