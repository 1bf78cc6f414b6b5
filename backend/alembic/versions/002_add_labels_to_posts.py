"""Add labels column to posts.

Revision ID: 002_add_labels_to_posts
Revises: 001_create_posts
Create Date: 2025-06-04

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002_add_labels_to_posts"
down_revision: str | None = "001_create_posts"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add labels JSON column, defaulting to an empty list."""
    op.add_column(
        "posts",
        sa.Column(
            "labels",
            sa.JSON(),
            server_default="[]",
            nullable=False,
        ),
    )


def downgrade() -> None:
    """Remove labels column."""
    op.drop_column("posts", "labels")
