"""Create notification queue, device tokens and the insert NOTIFY trigger.

Revision ID: 8c1f4e2a7b90
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "8c1f4e2a7b90"
down_revision = None
branch_labels = None
depends_on = None

NOTIFY_CHANNEL = "notification_queue_insert"
NOTIFY_PAYLOAD_LIMIT_BYTES = 8000


def _has_table(name: str) -> bool:
  return sa.inspect(op.get_bind()).has_table(name, schema="public")


def upgrade() -> None:
  """Upgrade schema."""
  # restaurants belongs to the ordering schema; only create it for standalone databases.
  if not _has_table("restaurants"):
    op.create_table(
      "restaurants",
      sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
      sa.Column("name", sa.Text(), nullable=True),
      sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=True),
      sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_restaurants_owner_id"), "restaurants", ["owner_id"], unique=False)

  op.create_table(
    "device_tokens",
    sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
    sa.Column("token", sa.Text(), nullable=False),
    sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column("enabled", sa.Boolean(), server_default=sa.text("true"), nullable=False),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index("ux_device_tokens_token", "device_tokens", ["token"], unique=True)
  op.create_index("ix_device_tokens_user_enabled", "device_tokens", ["user_id", "enabled"], unique=False)

  op.create_table(
    "notification_queue",
    sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
    sa.Column("event_type", sa.String(), nullable=False),
    sa.Column("recipient_user_id", postgresql.UUID(as_uuid=True), nullable=True),
    sa.Column("recipient_type", sa.Text(), nullable=True),
    sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
    sa.Column("status", sa.String(), server_default="pending", nullable=False),
    sa.Column("attempted", sa.Integer(), server_default="0", nullable=False),
    sa.Column("last_attempt", sa.DateTime(timezone=True), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.CheckConstraint("status IN ('pending', 'sent', 'failed')", name="ck_notification_queue_status"),
    sa.CheckConstraint("attempted >= 0", name="ck_notification_queue_attempted"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_notification_queue_recipient_user_id"), "notification_queue", ["recipient_user_id"], unique=False)
  op.create_index(op.f("ix_notification_queue_status"), "notification_queue", ["status"], unique=False)

  # NOTIFY payloads must stay under 8000 bytes; larger rows are announced by id only.
  op.execute(
    f"""
    CREATE OR REPLACE FUNCTION public.notify_notification_queue_insert() RETURNS trigger
    LANGUAGE plpgsql AS $$
    DECLARE
      body text := row_to_json(NEW)::text;
    BEGIN
      IF octet_length(body) >= {NOTIFY_PAYLOAD_LIMIT_BYTES} THEN
        body := json_build_object('id', NEW.id)::text;
      END IF;
      PERFORM pg_notify('{NOTIFY_CHANNEL}', body);
      RETURN NEW;
    END;
    $$
    """
  )
  op.execute(
    """
    CREATE TRIGGER notification_queue_insert_notify
    AFTER INSERT ON public.notification_queue
    FOR EACH ROW EXECUTE FUNCTION public.notify_notification_queue_insert()
    """
  )


def downgrade() -> None:
  """Downgrade schema."""
  op.execute("DROP TRIGGER IF EXISTS notification_queue_insert_notify ON public.notification_queue")
  op.execute("DROP FUNCTION IF EXISTS public.notify_notification_queue_insert()")
  op.drop_index(op.f("ix_notification_queue_status"), table_name="notification_queue")
  op.drop_index(op.f("ix_notification_queue_recipient_user_id"), table_name="notification_queue")
  op.drop_table("notification_queue")
  op.drop_index("ix_device_tokens_user_enabled", table_name="device_tokens")
  op.drop_index("ux_device_tokens_token", table_name="device_tokens")
  op.drop_table("device_tokens")
