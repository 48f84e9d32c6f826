"""Create todos table

Revision ID: 3f9c1a7e2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f9c1a7e2b40"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


CATEGORY_VALUES = ("work", "personal", "shopping", "health", "other")
PRIORITY_VALUES = ("low", "medium", "high")


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "todos",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "category",
            sa.Enum(*CATEGORY_VALUES, name="todocategory"),
            nullable=True,
        ),
        sa.Column(
            "priority",
            sa.Enum(*PRIORITY_VALUES, name="todopriority"),
            nullable=True,
        ),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_id", sa.String(length=128), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_todo_created_at", "todos", ["created_at"])
    op.create_index("idx_todo_user_created_at", "todos", ["user_id", "created_at"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("idx_todo_user_created_at", table_name="todos")
    op.drop_index("idx_todo_created_at", table_name="todos")
    op.drop_table("todos")

    sa.Enum(name="todopriority").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="todocategory").drop(op.get_bind(), checkfirst=True)
