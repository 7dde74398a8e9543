"""create addon billing tables

Revision ID: 202610180001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202610180001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "hosting_addon",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="Active"),
        sa.Column("payment_method", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("subscription_id", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("recurring_amount", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("next_due_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_hosting_addon_user", "hosting_addon", ["user_id"])

    op.create_table(
        "custom_field",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("rel_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("field_name", sa.String(length=255), nullable=False),
        sa.Column("field_type", sa.String(length=32), nullable=False, server_default="text"),
        sa.Column("admin_only", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_custom_field_lookup", "custom_field", ["type", "rel_id", "field_name"])

    op.create_table(
        "custom_field_value",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("field_id", sa.Integer(), nullable=False),
        sa.Column("rel_id", sa.Integer(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False, server_default=""),
        sa.ForeignKeyConstraint(["field_id"], ["custom_field.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("field_id", "rel_id", name="uq_custom_field_value_field_rel"),
    )

    op.create_table(
        "billing_invoice",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("invoice_number", sa.String(length=64), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="Unpaid"),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("date_paid", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_cancelled", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_method", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("taxrate", sa.Numeric(10, 3), nullable=False, server_default="0"),
        sa.Column("taxrate2", sa.Numeric(10, 3), nullable=False, server_default="0"),
        sa.Column("credit", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("subtotal", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("tax", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("tax2", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invoice_number", name="uq_billing_invoice_number"),
    )
    op.create_index("ix_billing_invoice_user_status", "billing_invoice", ["user_id", "status"])

    op.create_table(
        "billing_invoice_item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("rel_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("amount", sa.Numeric(18, 6), nullable=False, server_default="0"),
        sa.Column("taxed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["invoice_id"], ["billing_invoice.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_billing_invoice_item_invoice", "billing_invoice_item", ["invoice_id"])
    op.create_index("ix_billing_invoice_item_rel", "billing_invoice_item", ["type", "rel_id"])

    op.create_table(
        "email_notification_intent",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("message_name", sa.String(length=128), nullable=False),
        sa.Column("rel_id", sa.Integer(), nullable=False),
        sa.Column("requested_by", sa.String(length=128), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="Queued"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_email_notification_intent_rel", "email_notification_intent", ["message_name", "rel_id"])

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("username", sa.String(length=128), nullable=True),
        sa.Column("correlation_id", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("activity_log")
    op.drop_index("ix_email_notification_intent_rel", table_name="email_notification_intent")
    op.drop_table("email_notification_intent")
    op.drop_index("ix_billing_invoice_item_rel", table_name="billing_invoice_item")
    op.drop_index("ix_billing_invoice_item_invoice", table_name="billing_invoice_item")
    op.drop_table("billing_invoice_item")
    op.drop_index("ix_billing_invoice_user_status", table_name="billing_invoice")
    op.drop_table("billing_invoice")
    op.drop_table("custom_field_value")
    op.drop_index("ix_custom_field_lookup", table_name="custom_field")
    op.drop_table("custom_field")
    op.drop_index("ix_hosting_addon_user", table_name="hosting_addon")
    op.drop_table("hosting_addon")
