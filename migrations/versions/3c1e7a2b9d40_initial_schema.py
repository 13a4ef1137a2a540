"""initial schema

Revision ID: 3c1e7a2b9d40
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1e7a2b9d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

notification_category = sa.Enum(
    'like', 'comment', 'follow', 'mention', 'share', 'message', name='notification_category'
)
message_type = sa.Enum('text', 'image', 'video', 'file', name='message_type')


def _link_table(name, owner, owner_fk, member, member_fk, *extra):
    op.create_table(
        name,
        sa.Column(owner, sa.Integer(), sa.ForeignKey(owner_fk, ondelete='CASCADE'), primary_key=True),
        sa.Column(member, sa.Integer(), sa.ForeignKey(member_fk, ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        *extra,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('handle', sa.String(30), nullable=False),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('bio', sa.String(500), nullable=False),
        sa.Column('avatar_url', sa.String(500), nullable=False),
        sa.Column('cover_url', sa.String(500), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('blocked', sa.Boolean(), nullable=False),
        sa.Column('last_active', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_accounts_handle', 'accounts', ['handle'], unique=True)
    op.create_index('ix_accounts_email', 'accounts', ['email'], unique=True)
    op.create_index('ix_accounts_blocked', 'accounts', ['blocked'])

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('media', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('reported', sa.Boolean(), nullable=False),
        sa.Column('report_count', sa.Integer(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])
    op.create_index(
        'idx_posts_feed', 'posts',
        ['author_id', 'deleted', sa.text('created_at DESC'), sa.text('id DESC')],
    )
    op.create_index('idx_posts_reported', 'posts', ['reported', 'deleted', 'report_count'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('reported', sa.Boolean(), nullable=False),
        sa.Column('report_count', sa.Integer(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])
    op.create_index('ix_comments_parent_id', 'comments', ['parent_id'])
    op.create_index('idx_comments_post_parent', 'comments', ['post_id', 'parent_id', 'deleted'])

    op.create_table(
        'direct_messages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sender_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('body', sa.String(1000), nullable=False),
        sa.Column('message_type', message_type, nullable=False),
        sa.Column('media_url', sa.String(500), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('idx_messages_pair', 'direct_messages', ['sender_id', 'receiver_id', 'created_at'])
    op.create_index('idx_messages_unread', 'direct_messages', ['receiver_id', 'read'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('recipient_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_id', sa.Integer(), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category', notification_category, nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=True),
        sa.Column('comment_id', sa.Integer(), sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        sa.Column(
            'message_id', sa.Integer(), sa.ForeignKey('direct_messages.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('recipient_id <> actor_id', name='ck_notifications_not_self'),
    )
    op.create_index('idx_notifications_recipient', 'notifications', ['recipient_id', 'created_at'])
    op.create_index('idx_notifications_unread', 'notifications', ['recipient_id', 'read'])

    _link_table(
        'follows', 'followed_id', 'accounts.id', 'follower_id', 'accounts.id',
        sa.CheckConstraint('follower_id <> followed_id', name='ck_follows_not_self'),
    )
    op.create_index('idx_follows_follower', 'follows', ['follower_id', 'created_at'])
    _link_table('post_likes', 'post_id', 'posts.id', 'account_id', 'accounts.id')
    _link_table('post_shares', 'post_id', 'posts.id', 'account_id', 'accounts.id')
    _link_table('comment_likes', 'comment_id', 'comments.id', 'account_id', 'accounts.id')
    _link_table('account_posts', 'account_id', 'accounts.id', 'post_id', 'posts.id')
    _link_table('post_comments', 'post_id', 'posts.id', 'comment_id', 'comments.id')
    _link_table('comment_replies', 'comment_id', 'comments.id', 'reply_id', 'comments.id')


def downgrade() -> None:
    """Downgrade schema."""
    for name in (
        'comment_replies', 'post_comments', 'account_posts', 'comment_likes',
        'post_shares', 'post_likes', 'follows',
    ):
        op.drop_table(name)
    op.drop_table('notifications')
    op.drop_table('direct_messages')
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('accounts')
    notification_category.drop(op.get_bind(), checkfirst=True)
    message_type.drop(op.get_bind(), checkfirst=True)
