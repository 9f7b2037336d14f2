"""Create item_difficulty and learning_streaks tables."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0003"
down_revision: Union[str, None] = "20261019_0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "item_difficulty",
        sa.Column("item_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("difficulty", sa.Float(), nullable=False),
        sa.Column("total_attempts", sa.Integer(), nullable=False),
        sa.Column("success_rate", sa.Integer(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_table(
        "learning_streaks",
        sa.Column("learner_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("current_streak", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("longest_streak", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("streak_started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_learning_streaks_current_streak",
        "learning_streaks",
        ("current_streak",),
    )


def downgrade() -> None:
    op.drop_index("ix_learning_streaks_current_streak", table_name="learning_streaks")
    op.drop_table("learning_streaks")
    op.drop_table("item_difficulty")
