"""Initial collaboration schema: users, notes, collaborators, version ledger

Revision ID: 5b1e0c7d2a41
Revises:
Create Date: 2026-10-19 18:40:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5b1e0c7d2a41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False, unique=True),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('length(username) <= 50', name='ck_users_username_len'),
        sa.CheckConstraint('full_name IS NULL OR length(full_name) <= 100', name='ck_users_full_name_len'),
    )
    op.create_index('idx_users_username', 'users', ['username'])

    op.create_table(
        'notes',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('tags', postgresql.ARRAY(sa.String(length=50)), nullable=True),
        sa.Column('content_type', sa.String(length=20), nullable=False, server_default='plain'),
        sa.Column('folder', sa.String(length=100), nullable=True),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_shared', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('share_code', sa.String(length=32), nullable=True, unique=True),
        sa.Column('share_code_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_version', sa.Integer(), nullable=False, server_default='-1'),
        sa.Column('last_edited_by_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('last_edited_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.now()),
        *_timestamps(),
        sa.CheckConstraint('length(title) <= 200', name='ck_notes_title_len'),
        sa.CheckConstraint("content_type IN ('plain', 'markdown', 'html')", name='ck_notes_content_type'),
    )
    op.create_index('idx_notes_owner_id', 'notes', ['owner_id'])
    op.create_index('idx_notes_owner_created', 'notes', ['owner_id', 'created_at'])
    op.create_index('idx_notes_is_shared', 'notes', ['is_shared'])
    op.create_index('idx_notes_last_edited_at', 'notes', ['last_edited_at'])

    op.create_table(
        'note_collaborators',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('note_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission', sa.String(length=20), nullable=False, server_default='write'),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.UniqueConstraint('note_id', 'user_id', name='uq_collaborators_note_user'),
        sa.CheckConstraint("permission IN ('read', 'write', 'owner')", name='ck_collaborators_permission'),
    )
    op.create_index('idx_collaborators_note_id', 'note_collaborators', ['note_id'])
    op.create_index('idx_collaborators_user_id', 'note_collaborators', ['user_id'])

    op.create_table(
        'note_versions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('note_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('author_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        *_timestamps(),
        sa.UniqueConstraint('note_id', 'sequence', name='uq_note_versions_note_sequence'),
    )
    op.create_index('idx_note_versions_note_id', 'note_versions', ['note_id'])


def downgrade() -> None:
    op.drop_index('idx_note_versions_note_id', table_name='note_versions')
    op.drop_table('note_versions')
    op.drop_index('idx_collaborators_user_id', table_name='note_collaborators')
    op.drop_index('idx_collaborators_note_id', table_name='note_collaborators')
    op.drop_table('note_collaborators')
    op.drop_index('idx_notes_last_edited_at', table_name='notes')
    op.drop_index('idx_notes_is_shared', table_name='notes')
    op.drop_index('idx_notes_owner_created', table_name='notes')
    op.drop_index('idx_notes_owner_id', table_name='notes')
    op.drop_table('notes')
    op.drop_index('idx_users_username', table_name='users')
    op.drop_table('users')
