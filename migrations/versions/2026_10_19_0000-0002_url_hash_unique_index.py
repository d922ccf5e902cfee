"""Enforce URL uniqueness on a SHA-256 digest

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 00:00:00.000000

"""
import hashlib
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


url_mappings = sa.table(
    'url_mappings',
    sa.column('short_id', sa.String),
    sa.column('original_url', sa.String),
    sa.column('url_hash', sa.String),
)


def upgrade() -> None:
    """
    Replace the unique index on original_url with one on url_hash.

    Long URLs with multi-byte characters can exceed the PostgreSQL btree
    entry size, so uniqueness is enforced on the fixed-size digest instead.
    """
    op.add_column('url_mappings', sa.Column('url_hash', sa.String(length=64), nullable=True))

    bind = op.get_bind()
    rows = bind.execute(sa.select(url_mappings.c.short_id, url_mappings.c.original_url)).fetchall()
    for short_id, original_url in rows:
        bind.execute(
            url_mappings.update()
            .where(url_mappings.c.short_id == short_id)
            .values(url_hash=hashlib.sha256(original_url.encode('utf-8')).hexdigest())
        )

    op.drop_index('ix_url_mappings_original_url', table_name='url_mappings')
    with op.batch_alter_table('url_mappings') as batch_op:
        batch_op.alter_column('url_hash', existing_type=sa.String(length=64), nullable=False)
        batch_op.create_index('ix_url_mappings_url_hash', ['url_hash'], unique=True)


def downgrade() -> None:
    with op.batch_alter_table('url_mappings') as batch_op:
        batch_op.drop_index('ix_url_mappings_url_hash')
        batch_op.drop_column('url_hash')
    op.create_index(
        'ix_url_mappings_original_url',
        'url_mappings',
        ['original_url'],
        unique=True,
    )
