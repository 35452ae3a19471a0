from sqlalchemy import Table, Column, Integer, Text, TIMESTAMP, ForeignKey, Index, func

from sitegen.db.base import metadata


# Rows are append-only: html_code and created_at are never updated.
generations = Table(
    'generations',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('user_id', Integer, ForeignKey('public.users.id', ondelete='CASCADE'), nullable=False),
    Column('html_code', Text, nullable=False),
    Column('created_at', TIMESTAMP(timezone=True), nullable=False, server_default=func.now()),
    Index('ix_generations_user_id_created_at', 'user_id', 'created_at'),
    schema='public',
)
