# This project was developed with assistance from AI tools.
"""create portal tables

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-02 09:12:41.503118

"""

import sqlalchemy as sa
from alembic import op

revision = "3f1c9a2b7d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("customer_number", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_type", sa.String(20), nullable=False, server_default="individual"),
        sa.Column("push_token", sa.String(255), nullable=True),
        sa.Column("last_logout_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_customer_number", "users", ["customer_number"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "password_resets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("otp", sa.String(10), nullable=False),
        sa.Column("otp_generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_password_resets_user_id", "password_resets", ["user_id"])

    op.create_table(
        "mpesa_payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("checkout_request_id", sa.String(100), nullable=False),
        sa.Column("merchant_request_id", sa.String(100), nullable=True),
        sa.Column("installment_schedule_id", sa.Integer(), nullable=False),
        sa.Column("customer_number", sa.String(50), nullable=False),
        sa.Column("lead_file_no", sa.String(50), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("amount", sa.String(50), nullable=False),
        sa.Column("plot_number", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("result_code", sa.Integer(), nullable=True),
        sa.Column("result_description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_mpesa_payments_checkout_request_id", "mpesa_payments", ["checkout_request_id"], unique=True
    )
    op.create_index("ix_mpesa_payments_installment_schedule_id", "mpesa_payments", ["installment_schedule_id"])
    op.create_index("ix_mpesa_payments_customer_number", "mpesa_payments", ["customer_number"])
    op.create_index("ix_mpesa_payments_lead_file_no", "mpesa_payments", ["lead_file_no"])
    op.create_index("ix_mpesa_payments_status", "mpesa_payments", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("data", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "referrals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("referrer_id", sa.String(50), nullable=False),
        sa.Column("referred_name", sa.String(255), nullable=False),
        sa.Column("referred_email", sa.String(255), nullable=False),
        sa.Column("referred_phone", sa.String(50), nullable=True),
        sa.Column("property_id", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("amount_paid", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_referrals_referrer_id", "referrals", ["referrer_id"])

    op.create_table(
        "campaigns",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("banner_image_url", sa.String(500), nullable=True),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campaigns_year_month", "campaigns", ["year", "month"])


def downgrade() -> None:
    op.drop_index("ix_campaigns_year_month", table_name="campaigns")
    op.drop_table("campaigns")
    op.drop_index("ix_referrals_referrer_id", table_name="referrals")
    op.drop_table("referrals")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    for name in (
        "ix_mpesa_payments_status",
        "ix_mpesa_payments_lead_file_no",
        "ix_mpesa_payments_customer_number",
        "ix_mpesa_payments_installment_schedule_id",
        "ix_mpesa_payments_checkout_request_id",
    ):
        op.drop_index(name, table_name="mpesa_payments")
    op.drop_table("mpesa_payments")
    op.drop_index("ix_password_resets_user_id", table_name="password_resets")
    op.drop_table("password_resets")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_customer_number", table_name="users")
    op.drop_table("users")
