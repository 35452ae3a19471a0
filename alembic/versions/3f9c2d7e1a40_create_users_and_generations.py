"""create users and generations

Revision ID: 3f9c2d7e1a40
Revises: 
Create Date: 2026-10-17 09:12:44.301522

"""
from typing import Sequence, Union

from alembic import op  # type: ignore
import sqlalchemy as sa  # type: ignore


# revision identifiers, used by Alembic.
revision: str = '3f9c2d7e1a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('published_url', sa.Text(), nullable=True),
        sa.Column('published_generation_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint(
            '(published_url IS NULL) = (published_generation_id IS NULL)',
            name='ck_users_publish_pointer_pair',
        ),
        schema='public',
    )

    op.create_table(
        'generations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('html_code', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['public.users.id'], ondelete='CASCADE'),
        schema='public',
    )

    # History listing reads one user's rows in creation order
    op.create_index(
        'ix_generations_user_id_created_at',
        'generations',
        ['user_id', 'created_at'],
        unique=False,
        schema='public',
    )

    # Added after both tables exist: users and generations reference each other
    op.create_foreign_key(
        'fk_users_published_generation_id',
        'users', 'generations',
        ['published_generation_id'], ['id'],
        source_schema='public',
        referent_schema='public',
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('fk_users_published_generation_id', 'users', type_='foreignkey', schema='public')
    op.drop_index('ix_generations_user_id_created_at', table_name='generations', schema='public')
    op.drop_table('generations', schema='public')
    op.drop_table('users', schema='public')
