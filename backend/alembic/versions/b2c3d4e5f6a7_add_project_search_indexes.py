"""Add text search indexes for projects.

Revision ID: b2c3d4e5f6a7
Revises: a1b2c3d4e5f6
Create Date: 2026-10-19 00:00:00.000000

Search narrows candidates with ILIKE on project name and description
before fuzzy scoring; tag filters and facets use ix_project_tags_name.
"""
from collections.abc import Sequence

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "b2c3d4e5f6a7"
down_revision: str | None = "a1b2c3d4e5f6"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add trigram indexes for project text search.

    Creates (PostgreSQL only):
    1. pg_trgm extension for trigram support
    2. Trigram GIN indexes on project_name and description for ILIKE
    3. Trigram GIN index on project_tags.name for fuzzy tag suggestions

    SQLite has no index type that serves infix LIKE, so nothing is
    created there; the candidate query falls back to a table scan.
    """
    if op.get_bind().dialect.name != "postgresql":
        return

    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")

    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_projects_project_name_trgm
        ON projects USING gin (project_name gin_trgm_ops)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_projects_description_trgm
        ON projects USING gin (description gin_trgm_ops)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_project_tags_name_trgm
        ON project_tags USING gin (name gin_trgm_ops)
    """)


def downgrade() -> None:
    """Remove project text search indexes."""
    if op.get_bind().dialect.name != "postgresql":
        return

    op.execute("DROP INDEX IF EXISTS ix_project_tags_name_trgm")
    op.execute("DROP INDEX IF EXISTS ix_projects_description_trgm")
    op.execute("DROP INDEX IF EXISTS ix_projects_project_name_trgm")
