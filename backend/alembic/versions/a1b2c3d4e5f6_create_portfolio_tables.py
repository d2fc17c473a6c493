"""Create portfolio tables.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 00:00:00.000000

This migration:
1. Creates the tags table holding both tags and categories
2. Creates the projects table
3. Creates the project_tags and project_categories link tables
"""
from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    """Create tags, projects and link tables."""
    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(280), nullable=True),
        sa.Column(
            "kind",
            sa.Enum("TAG", "CATEGORY", name="tagkind"),
            nullable=False,
        ),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "usage_count >= 0", name="ck_tags_usage_count_non_negative"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("name", name="uq_tags_name"),
    )
    op.create_index("ix_tags_kind_usage_count", "tags", ["kind", "usage_count"])

    op.create_table(
        "projects",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("project_name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("live_url", sa.String(2048), nullable=True),
        sa.Column("github_url", sa.String(2048), nullable=True),
        sa.Column("image_url", sa.String(2048), nullable=True),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("external_id", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.UniqueConstraint("slug", name="uq_projects_slug"),
        sa.UniqueConstraint("external_id", name="uq_projects_external_id"),
    )
    op.create_index("ix_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "project_tags",
        sa.Column("project_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(
            ["project_id"],
            ["projects.id"],
            name="fk_project_tags_project_id_projects",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("project_id", "name", name="pk_project_tags"),
    )
    op.create_index("ix_project_tags_name", "project_tags", ["name"])

    op.create_table(
        "project_categories",
        sa.Column("project_id", sa.String(36), nullable=False),
        sa.Column("category_id", sa.String(36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(
            ["project_id"],
            ["projects.id"],
            name="fk_project_categories_project_id_projects",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["tags.id"],
            name="fk_project_categories_category_id_tags",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "project_id", "category_id", name="pk_project_categories"
        ),
    )
    op.create_index(
        "ix_project_categories_category_id", "project_categories", ["category_id"]
    )


def downgrade() -> None:
    """Drop portfolio tables."""
    op.drop_index("ix_project_categories_category_id", table_name="project_categories")
    op.drop_table("project_categories")
    op.drop_index("ix_project_tags_name", table_name="project_tags")
    op.drop_table("project_tags")
    op.drop_index("ix_projects_created_at", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_tags_kind_usage_count", table_name="tags")
    op.drop_table("tags")
    sa.Enum(name="tagkind").drop(op.get_bind(), checkfirst=True)
