"""Patient store baseline

Revision ID: 20261018_01
Revises: None
Create Date: 2026-10-18
"""
# pylint: disable=no-member,invalid-name,wrong-import-order

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "patients",
        sa.Column("patient_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("owner_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("clinical_context", sa.Text(), nullable=True),
        sa.Column("is_temporary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at_utc", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_patients_owner_id", "patients", ["owner_id"])
    op.create_index("ix_patients_owner_id_name", "patients", ["owner_id", "name"])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_patients_owner_id_name", table_name="patients")
    op.drop_index("ix_patients_owner_id", table_name="patients")
    op.drop_table("patients")
