from sqlalchemy import Table, Column, Integer, Text, TIMESTAMP, ForeignKey, CheckConstraint, func

from sitegen.db.base import metadata


users = Table(
    'users',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('name', Text, nullable=False),
    Column('email', Text, nullable=False, unique=True),
    Column('password_hash', Text, nullable=False),
    Column('published_url', Text, nullable=True),
    # use_alter: users and generations reference each other
    Column(
        'published_generation_id',
        Integer,
        ForeignKey('public.generations.id', use_alter=True, name='fk_users_published_generation_id'),
        nullable=True,
    ),
    Column('created_at', TIMESTAMP(timezone=True), nullable=False, server_default=func.now()),
    # Publish pointer is set and cleared as a pair
    CheckConstraint(
        '(published_url IS NULL) = (published_generation_id IS NULL)',
        name='ck_users_publish_pointer_pair',
    ),
    schema='public',
)
