"""environment matrix data

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "cleaner_env_matrix_data",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("environment", sa.String(length=100), nullable=False),
        sa.Column("plugin", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False, server_default=""),
        sa.UniqueConstraint("environment", "plugin", "name", name="uq_cleaner_env_matrix_data_env_plugin_name"),
    )
    op.create_index("ix_cleaner_env_matrix_data_environment", "cleaner_env_matrix_data", ["environment"])


def downgrade() -> None:
    op.drop_index("ix_cleaner_env_matrix_data_environment", table_name="cleaner_env_matrix_data")
    op.drop_table("cleaner_env_matrix_data")
