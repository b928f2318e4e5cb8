"""create taskboard tables

Revision ID: 3f2c9a71d4b8
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f2c9a71d4b8"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(length=120), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("manager_code", sa.String(length=64), nullable=False),
        sa.Column("employee_code", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "auth_identities",
        sa.Column("uid", sa.String(length=64), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("token_version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("password_reset_token", sa.String(length=128), nullable=True),
        sa.Column("password_reset_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_auth_identities_email", "auth_identities", ["email"], unique=True)
    op.create_index("ix_auth_identities_password_reset_token", "auth_identities", ["password_reset_token"])

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("uid", sa.String(length=64), nullable=False),
        sa.Column("company_id", sa.String(length=120), nullable=False),
        sa.Column("company_name", sa.String(length=200), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False),
        sa.Column("is_super_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("account_state", sa.String(length=30), nullable=False),
        sa.Column("presence", sa.String(length=30), nullable=False),
        sa.Column("points_total_earned", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("points_current_balance", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("pending_task_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_assigned_at", sa.DateTime(timezone=True), nullable=True),
    )
    # uid -> (company_id, id) lookup; one profile per identity across all tenants
    op.create_index("ix_user_profiles_uid", "user_profiles", ["uid"], unique=True)
    op.create_index("ix_user_profiles_email", "user_profiles", ["email"])
    op.create_index("ix_user_profiles_company_created_at", "user_profiles", ["company_id", "created_at"])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.String(length=120), nullable=False),
        sa.Column("owner_uid", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("attachment_url", sa.Text(), nullable=True),
        sa.Column("attachment_type", sa.String(length=8), nullable=True),
        sa.Column("proof_url", sa.Text(), nullable=True),
        sa.Column("proof_type", sa.String(length=8), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_message", sa.Text(), nullable=True),
        sa.Column("assigned_by", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_tasks_owner_uid", "tasks", ["owner_uid"])
    op.create_index("ix_tasks_company_owner_created_at", "tasks", ["company_id", "owner_uid", "created_at"])

    op.create_table(
        "join_requests",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("uid", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role_requested", sa.String(length=30), nullable=False),
        sa.Column("company_slug", sa.String(length=120), nullable=False),
        sa.Column("approver_email", sa.String(length=320), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("decided_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_join_requests_approver_status", "join_requests", ["approver_email", "status"])
    op.create_index(
        "ix_join_requests_email_company_status",
        "join_requests",
        ["email", "company_slug", "status"],
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("company_id", sa.String(length=120), nullable=False),
        sa.Column("employee_uid", sa.String(length=64), nullable=False),
        sa.Column("sender_id", sa.String(length=64), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_messages_conversation_created_at",
        "messages",
        ["company_id", "employee_uid", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_messages_conversation_created_at", table_name="messages")
    op.drop_table("messages")

    op.drop_index("ix_join_requests_email_company_status", table_name="join_requests")
    op.drop_index("ix_join_requests_approver_status", table_name="join_requests")
    op.drop_table("join_requests")

    op.drop_index("ix_tasks_company_owner_created_at", table_name="tasks")
    op.drop_index("ix_tasks_owner_uid", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_user_profiles_company_created_at", table_name="user_profiles")
    op.drop_index("ix_user_profiles_email", table_name="user_profiles")
    op.drop_index("ix_user_profiles_uid", table_name="user_profiles")
    op.drop_table("user_profiles")

    op.drop_index("ix_auth_identities_password_reset_token", table_name="auth_identities")
    op.drop_index("ix_auth_identities_email", table_name="auth_identities")
    op.drop_table("auth_identities")

    op.drop_table("tenants")
