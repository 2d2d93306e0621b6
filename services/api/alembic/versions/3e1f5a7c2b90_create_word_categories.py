"""create_word_categories

Revision ID: 3e1f5a7c2b90
Revises:
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e1f5a7c2b90"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "word_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_name", sa.String(length=200), nullable=False),
        sa.Column("words", sa.JSON(), nullable=False),
        sa.Column("source_tag", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            "json_array_length(words) BETWEEN 1 AND 20",
            name="ck_word_categories_words_length",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(op.f("ix_word_categories_created_at"), "word_categories", ["created_at"], unique=False)
    op.create_index(
        "uq_word_categories_category_name",
        "word_categories",
        ["category_name"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("uq_word_categories_category_name", table_name="word_categories")
    op.drop_index(op.f("ix_word_categories_created_at"), table_name="word_categories")
    op.drop_table("word_categories")
