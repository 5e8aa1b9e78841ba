"""Initial schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- accounts ---
    op.create_table(
        "accounts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("number", sa.String(32), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # --- devices ---
    op.create_table(
        "devices",
        sa.Column(
            "account_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("device_id", sa.SmallInteger, primary_key=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("last_seen", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("fcm_token", sa.String(512), nullable=True),
        sa.Column("apns_token", sa.String(512), nullable=True),
        sa.Column("voip_apns_token", sa.String(512), nullable=True),
    )

    # --- stored_messages ---
    op.create_table(
        "stored_messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("device_id", sa.SmallInteger, nullable=False),
        sa.Column("envelope", sa.LargeBinary, nullable=False),
        sa.Column("stored_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["account_id", "device_id"],
            ["devices.account_id", "devices.device_id"],
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_stored_messages_destination", "stored_messages", ["account_id", "device_id"])

    # --- idle_device_notifications ---
    op.create_table(
        "idle_device_notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("device_id", sa.SmallInteger, nullable=False),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("account_id", "device_id", name="uq_idle_device_notification_device"),
    )
    op.create_index(
        "ix_idle_device_notifications_account_id", "idle_device_notifications", ["account_id"]
    )
    op.create_index(
        "ix_idle_device_notifications_scheduled_for", "idle_device_notifications", ["scheduled_for"]
    )


def downgrade() -> None:
    op.drop_table("idle_device_notifications")
    op.drop_table("stored_messages")
    op.drop_table("devices")
    op.drop_table("accounts")
