"""create users and passports

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("Admin", "Dentist", "Patient", name="user_role")
implant_type = sa.Enum("TitaniumStandard", "TitaniumPremium", "Ceramic", "Zirconia", name="implant_type")
passport_status = sa.Enum("Active", "Archived", name="passport_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "passports",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("dentist_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=True),
        sa.Column("patient_name", sa.String(length=255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("implant_type", implant_type, nullable=False),
        sa.Column("status", passport_status, nullable=False),
        sa.Column("implant_brand", sa.String(length=255), nullable=False),
        sa.Column("implant_lot_number", sa.String(length=100), nullable=False),
        sa.Column("implant_date", sa.Date(), nullable=False),
        sa.Column("implant_position", sa.String(length=50), nullable=False),
        sa.Column("implant_diameter", sa.Float(), nullable=False),
        sa.Column("implant_length", sa.Float(), nullable=False),
        sa.Column("implant_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["dentist_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["patient_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_passports_id"), "passports", ["id"], unique=False)
    op.create_index(op.f("ix_passports_dentist_id"), "passports", ["dentist_id"], unique=False)
    op.create_index(op.f("ix_passports_patient_id"), "passports", ["patient_id"], unique=False)
    op.create_index(op.f("ix_passports_patient_name"), "passports", ["patient_name"], unique=False)
    op.create_index(op.f("ix_passports_created_at"), "passports", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_passports_created_at"), table_name="passports")
    op.drop_index(op.f("ix_passports_patient_name"), table_name="passports")
    op.drop_index(op.f("ix_passports_patient_id"), table_name="passports")
    op.drop_index(op.f("ix_passports_dentist_id"), table_name="passports")
    op.drop_index(op.f("ix_passports_id"), table_name="passports")
    op.drop_table("passports")

    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    passport_status.drop(bind, checkfirst=True)
    implant_type.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
