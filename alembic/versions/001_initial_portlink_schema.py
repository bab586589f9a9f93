"""Initial PortLink schema: users, profiles, posts, tags, engagement, notifications.

Revision ID: 001_initial_portlink_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

This migration creates:
1. users / profiles (one-to-one, profession + open-to-work feed filters)
2. posts with feed indexes (status+published_at, status+view_count, editor picks)
3. post_tags (tech / skill labels, unique per post+kind+name, indexed for hasSome)
4. likes / bookmarks (unique per post+user) and comments
5. notifications with the inbox index (user_id, is_read, created_at)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial_portlink_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profession', sa.String(length=30), nullable=True),
        sa.Column('is_open_to_work', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_profiles_user_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
        sa.UniqueConstraint('user_id', name='uq_profiles_user_id'),
    )
    op.create_index('ix_profiles_id', 'profiles', ['id'])
    op.create_index('ix_profiles_profession', 'profiles', ['profession'])

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('summary', sa.String(length=500), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=30), nullable=True),
        sa.Column('is_team_project', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='DRAFT'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_editor_pick', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], name='fk_posts_author_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_posts'),
    )
    op.create_index('ix_posts_id', 'posts', ['id'])
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])
    # Feed: WHERE status='PUBLISHED' ORDER BY published_at DESC
    op.create_index('idx_posts_status_published', 'posts', ['status', 'published_at'])
    # Popular sort: ORDER BY view_count DESC
    op.create_index('idx_posts_status_views', 'posts', ['status', 'view_count'])
    op.create_index('idx_posts_editor_pick', 'posts', ['is_editor_pick', 'published_at'])

    op.create_table(
        'post_tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], name='fk_post_tags_post_id_posts', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_post_tags'),
        sa.UniqueConstraint('post_id', 'kind', 'name', name='uq_post_tags_post_kind_name'),
    )
    # hasSome lookups and trending tag aggregation
    op.create_index('idx_post_tags_kind_name', 'post_tags', ['kind', 'name'])

    for table in ('likes', 'bookmarks'):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('post_id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.ForeignKeyConstraint(['post_id'], ['posts.id'], name=f'fk_{table}_post_id_posts', ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], name=f'fk_{table}_user_id_users', ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id', name=f'pk_{table}'),
            sa.UniqueConstraint('post_id', 'user_id', name=f'uq_{table}_post_user'),
        )
    op.create_index('idx_bookmarks_user_created', 'bookmarks', ['user_id', 'created_at'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], name='fk_comments_post_id_posts', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], name='fk_comments_author_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_comments'),
    )
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.String(length=500), nullable=False),
        sa.Column('related_post_id', sa.Integer(), nullable=True),
        sa.Column('related_user_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_notifications_user_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['related_post_id'], ['posts.id'], name='fk_notifications_related_post_id_posts', ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['related_user_id'], ['users.id'], name='fk_notifications_related_user_id_users', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_notifications'),
    )
    # Inbox: WHERE user_id=? [AND is_read=false] ORDER BY created_at DESC
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'is_read', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_notifications_user_read', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('ix_comments_post_id', table_name='comments')
    op.drop_table('comments')

    op.drop_index('idx_bookmarks_user_created', table_name='bookmarks')
    op.drop_table('bookmarks')
    op.drop_table('likes')

    op.drop_index('idx_post_tags_kind_name', table_name='post_tags')
    op.drop_table('post_tags')

    op.drop_index('idx_posts_editor_pick', table_name='posts')
    op.drop_index('idx_posts_status_views', table_name='posts')
    op.drop_index('idx_posts_status_published', table_name='posts')
    op.drop_index('ix_posts_author_id', table_name='posts')
    op.drop_index('ix_posts_id', table_name='posts')
    op.drop_table('posts')

    op.drop_index('ix_profiles_profession', table_name='profiles')
    op.drop_index('ix_profiles_id', table_name='profiles')
    op.drop_table('profiles')

    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
