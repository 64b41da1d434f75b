"""initial

Revision ID: 0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('nickname', sa.String(30), nullable=False, server_default=''),
        sa.Column('avatar_url', sa.String(), nullable=False, server_default=''),
        sa.Column('cover_url', sa.String(), nullable=False, server_default=''),
        sa.Column('bio', sa.Text(), nullable=False, server_default=''),
        sa.Column('social_links', sa.JSON(), nullable=False),
        sa.Column('sticker', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('user_relations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('owner_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('other_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('owner_id', 'other_id', name='uix_relation_pair'),
        sa.CheckConstraint('owner_id <> other_id', name='ck_relation_not_self'),
    )
    op.create_index('ix_user_relations_owner_id', 'user_relations', ['owner_id'])
    op.create_index('ix_user_relations_other_id', 'user_relations', ['other_id'])

    op.create_table('notifications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('from_user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('resolution', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table('anime_entries',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shikimori_id', sa.String(32), nullable=False),
        sa.Column('mal_id', sa.String(32), nullable=True),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('poster_url', sa.String(), nullable=True),
        sa.Column('episodes_total', sa.Integer, nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('last_watched_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'shikimori_id', name='uix_user_title'),
    )
    op.create_index('ix_anime_entries_user_id', 'anime_entries', ['user_id'])

    op.create_table('watch_history',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mal_id', sa.String(32), nullable=False),
        sa.Column('shikimori_id', sa.String(32), nullable=True),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('episode', sa.Integer, nullable=False),
        sa.Column('watched_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_watch_history_user_id', 'watch_history', ['user_id'])
    op.create_index('ix_watch_history_watched_at', 'watch_history', ['watched_at'])

def downgrade():
    op.drop_table('watch_history')
    op.drop_table('anime_entries')
    op.drop_table('notifications')
    op.drop_table('user_relations')
    op.drop_table('users')
