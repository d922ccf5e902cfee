"""Create url_mappings table

Revision ID: 0001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the url_mappings table.

    The unique index on original_url makes the insert conditional: a second
    mapping for the same URL is rejected by the database.
    """
    op.create_table(
        'url_mappings',
        sa.Column('short_id', sa.String(length=12), nullable=False),
        sa.Column('original_url', sa.String(length=2048), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('short_id'),
    )
    op.create_index(
        'ix_url_mappings_original_url',
        'url_mappings',
        ['original_url'],
        unique=True,
    )
    op.create_index(
        'ix_url_mappings_created_at',
        'url_mappings',
        ['created_at'],
    )


def downgrade() -> None:
    op.drop_index('ix_url_mappings_created_at', table_name='url_mappings')
    op.drop_index('ix_url_mappings_original_url', table_name='url_mappings')
    op.drop_table('url_mappings')
