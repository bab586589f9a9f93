"""Post reports and @mentions.

Revision ID: 002_reports_and_mentions
Revises: 001_initial_portlink_schema
Create Date: 2026-10-19 14:00:00.000000

This migration creates:
1. reports (PENDING -> RESOLVED moderation queue, indexed by status+created_at)
2. mentions (from a post or a comment, indexed by mentioned user for the inbox)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002_reports_and_mentions'
down_revision: Union[str, Sequence[str], None] = '001_initial_portlink_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reporter_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
        sa.Column('admin_note', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['reporter_id'], ['users.id'], name='fk_reports_reporter_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], name='fk_reports_post_id_posts', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_reports'),
    )
    op.create_index('idx_reports_post_reporter', 'reports', ['post_id', 'reporter_id'])
    op.create_index('idx_reports_status_created', 'reports', ['status', 'created_at'])

    op.create_table(
        'mentions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('mentioned_user_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=True),
        sa.Column('comment_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], name='fk_mentions_author_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mentioned_user_id'], ['users.id'], name='fk_mentions_mentioned_user_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], name='fk_mentions_post_id_posts', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['comment_id'], ['comments.id'], name='fk_mentions_comment_id_comments', ondelete='CASCADE'),
        sa.CheckConstraint('(post_id IS NOT NULL) OR (comment_id IS NOT NULL)', name='ck_mentions_has_source'),
        sa.PrimaryKeyConstraint('id', name='pk_mentions'),
    )
    op.create_index('idx_mentions_user_created', 'mentions', ['mentioned_user_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_mentions_user_created', table_name='mentions')
    op.drop_table('mentions')

    op.drop_index('idx_reports_status_created', table_name='reports')
    op.drop_index('idx_reports_post_reporter', table_name='reports')
    op.drop_table('reports')
