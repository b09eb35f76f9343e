"""Create fluent_domain table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the domain mapping table."""
    op.create_table(
        "fluent_domain",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("default_locale", sa.String(length=32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("domain", name="uq_fluent_domain_domain"),
    )


def downgrade() -> None:
    """Drop the domain mapping table."""
    op.drop_table("fluent_domain")
