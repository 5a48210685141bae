"""Counters and lab numbers

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Series counters (S_SERIES, F_SERIES); rows are created by the first upsert
    op.create_table(
        "counters",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("value >= 0", name="chk_counters_value_non_negative"),
    )

    # Lab number register
    op.create_table(
        "lab_numbers",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("number", sa.String(100), nullable=False),
        sa.Column("patient", sa.String(200), nullable=False),
        sa.Column("medical_type", sa.String(50), nullable=False, server_default="N/A"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lab_numbers_number", "lab_numbers", ["number"], unique=True)
    op.create_index("ix_lab_numbers_patient", "lab_numbers", ["patient"], unique=False)
    op.create_index("ix_lab_numbers_status", "lab_numbers", ["status"], unique=False)
    op.create_index("ix_lab_numbers_medical_type", "lab_numbers", ["medical_type"], unique=False)
    op.create_index("ix_lab_numbers_created_at", "lab_numbers", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_lab_numbers_created_at", table_name="lab_numbers")
    op.drop_index("ix_lab_numbers_medical_type", table_name="lab_numbers")
    op.drop_index("ix_lab_numbers_status", table_name="lab_numbers")
    op.drop_index("ix_lab_numbers_patient", table_name="lab_numbers")
    op.drop_index("ix_lab_numbers_number", table_name="lab_numbers")
    op.drop_table("lab_numbers")
    op.drop_table("counters")
