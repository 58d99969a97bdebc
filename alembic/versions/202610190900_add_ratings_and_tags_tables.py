"""add ratings and tags tables

Revision ID: 202610190900
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "202610190900"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "movies",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "movie_rating_categories",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("movie_id", sa.String(64), sa.ForeignKey("movies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("movie_id", "category_name", name="uq_movie_rating_categories_movie_name"),
    )

    op.create_table(
        "movie_tag_names",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("movie_id", sa.String(64), sa.ForeignKey("movies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tag_name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("movie_id", "tag_name", name="uq_movie_tag_names_movie_name"),
    )

    op.create_table(
        "ratings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("movie_id", sa.String(64), nullable=False),
        sa.Column("movie_title", sa.String(512), nullable=True),
        sa.Column("category_name", sa.String(255), nullable=False),
        sa.Column("upperbound", sa.Integer, nullable=False),
        sa.Column("value", sa.Integer, nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("subtype", sa.String(50), nullable=True),
        sa.Column("privacy", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint(
            "movie_id", "category_name", "upperbound", "username",
            name="uq_ratings_movie_category_upperbound_user",
        ),
        sa.CheckConstraint("upperbound >= 1", name="chk_ratings_upperbound_positive"),
        sa.CheckConstraint("value BETWEEN 1 AND upperbound", name="chk_ratings_value_range"),
    )
    op.create_index("idx_ratings_movie", "ratings", ["movie_id"])
    op.create_index("idx_ratings_category", "ratings", ["category_name", "upperbound"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("movie_id", sa.String(64), nullable=False),
        sa.Column("movie_title", sa.String(512), nullable=True),
        sa.Column("tag_name", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("privacy", sa.String(20), nullable=True),
        sa.Column("state", sa.String(10), nullable=False, server_default="upvote"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("movie_id", "tag_name", "username", name="uq_tags_movie_tag_user"),
        sa.CheckConstraint("state IN ('upvote', 'downvote')", name="chk_tags_state"),
    )
    op.create_index("idx_tags_movie", "tags", ["movie_id"])
    op.create_index("idx_tags_tag_name", "tags", ["tag_name"])
    op.create_index("idx_tags_username", "tags", ["username"])


def downgrade() -> None:
    op.drop_index("idx_tags_username", table_name="tags")
    op.drop_index("idx_tags_tag_name", table_name="tags")
    op.drop_index("idx_tags_movie", table_name="tags")
    op.drop_table("tags")
    op.drop_index("idx_ratings_category", table_name="ratings")
    op.drop_index("idx_ratings_movie", table_name="ratings")
    op.drop_table("ratings")
    op.drop_table("movie_tag_names")
    op.drop_table("movie_rating_categories")
    op.drop_table("movies")
