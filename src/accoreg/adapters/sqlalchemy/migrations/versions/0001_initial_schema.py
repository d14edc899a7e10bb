"""Initial schema for the tracked collections.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-08-04 09:12:41.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

ID = sa.String(length=64)


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "role",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_role"),
        sa.UniqueConstraint("name", name="uq_role_role_name"),
    )
    op.create_table(
        "permissions",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("resource", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("role_id", ID, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["role_id"],
            ["role.id"],
            name="fk_permissions_permissions_role_id_role",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_permissions"),
    )
    op.create_table(
        "admin",
        sa.Column("id", ID, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("role_id", ID, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], name="fk_admin_admin_role_id_role"),
        sa.PrimaryKeyConstraint("id", name="pk_admin"),
        sa.UniqueConstraint("email", name="uq_admin_admin_email"),
    )
    op.create_table(
        "users",
        sa.Column("id", ID, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("role_id", ID, nullable=False),
        sa.Column("phone_number", sa.String(), nullable=True),
        sa.Column("phone_verified", sa.Boolean(), nullable=False),
        sa.Column("phone_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", ID, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["role_id"], ["role.id"], name="fk_users_users_role_id_role"),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_users_email"),
    )
    op.create_table(
        "registration",
        sa.Column("id", ID, nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("date_of_birth", sa.DateTime(timezone=True), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("branch", sa.String(), nullable=False),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("email_address", sa.String(), nullable=False),
        sa.Column("emergency_contact_name", sa.String(), nullable=False),
        sa.Column("emergency_contact_relationship", sa.String(), nullable=False),
        sa.Column("emergency_contact_phone", sa.String(), nullable=False),
        sa.Column("parent_guardian_name", sa.String(), nullable=True),
        sa.Column("parent_guardian_phone", sa.String(), nullable=True),
        sa.Column("parent_guardian_email", sa.String(), nullable=True),
        sa.Column("roommate_request_confirmation_number", sa.String(), nullable=True),
        sa.Column("medications", sa.Text(), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("special_needs", sa.Text(), nullable=True),
        sa.Column("dietary_restrictions", sa.Text(), nullable=True),
        sa.Column("qr_code", sa.String(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(), nullable=True),
        sa.Column("unverified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("unverified_by", sa.String(), nullable=True),
        sa.Column("unverification_reason", sa.Text(), nullable=True),
        sa.Column("attendance_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("parental_permission_granted", sa.Boolean(), nullable=False),
        sa.Column("parental_permission_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_registration"),
        sa.UniqueConstraint("qr_code", name="uq_registration_registration_qr_code"),
    )
    op.create_index("ix_registration_branch", "registration", ["branch"])
    op.create_index("ix_registration_email_address", "registration", ["email_address"])
    op.create_table(
        "children_registrations",
        sa.Column("id", ID, nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("date_of_birth", sa.DateTime(timezone=True), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("branch", sa.String(), nullable=False),
        sa.Column("parent_guardian_name", sa.String(), nullable=False),
        sa.Column("parent_guardian_phone", sa.String(), nullable=False),
        sa.Column("parent_guardian_email", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_children_registrations"),
    )
    op.create_table(
        "rooms",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("gender", sa.String(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_rooms"),
        sa.UniqueConstraint("name", name="uq_rooms_rooms_name"),
    )
    op.create_table(
        "room_allocations",
        sa.Column("id", ID, nullable=False),
        sa.Column("registration_id", ID, nullable=False),
        sa.Column("room_id", ID, nullable=False),
        sa.Column("allocated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("allocated_by", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["registration_id"],
            ["registration.id"],
            name="fk_room_allocations_room_allocations_registration_id_registration",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["room_id"],
            ["rooms.id"],
            name="fk_room_allocations_room_allocations_room_id_rooms",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_room_allocations"),
        sa.UniqueConstraint(
            "registration_id", name="uq_room_allocations_room_allocations_registration_id"
        ),
    )
    op.create_table(
        "system_config",
        sa.Column("id", ID, nullable=False),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_system_config"),
        sa.UniqueConstraint("key", name="uq_system_config_system_config_key"),
    )
    op.create_table(
        "sms_verifications",
        sa.Column("id", ID, nullable=False),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_sms_verifications"),
    )
    op.create_index(
        "ix_sms_verifications_phone_number", "sms_verifications", ["phone_number"]
    )


def downgrade() -> None:
    op.drop_index("ix_sms_verifications_phone_number", table_name="sms_verifications")
    op.drop_table("sms_verifications")
    op.drop_table("system_config")
    op.drop_table("room_allocations")
    op.drop_table("rooms")
    op.drop_table("children_registrations")
    op.drop_index("ix_registration_email_address", table_name="registration")
    op.drop_index("ix_registration_branch", table_name="registration")
    op.drop_table("registration")
    op.drop_table("users")
    op.drop_table("admin")
    op.drop_table("permissions")
    op.drop_table("role")
