"""Initial schema - principals, ranked collections, photos, follows

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

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
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('auth_subject', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(1024), nullable=True),
        sa.Column('role', sa.String(50), nullable=False, default='free'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Trips table
    op.create_table(
        'trips',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, default='planning'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Bucket list items table
    op.create_table(
        'bucket_list_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('place_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('rank', sa.Float(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, default='want_to_visit'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('visited_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('visited_date', sa.String(10), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('weather', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('owner_id', 'place_id', name='uq_bucket_list_owner_place'),
    )
    op.create_index('ix_bucket_list_owner_status', 'bucket_list_items', ['owner_id', 'status'])

    # Itinerary items table
    op.create_table(
        'itinerary_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('trip_id', sa.Uuid(), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('place_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('rank', sa.Float(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('category', sa.String(50), nullable=False, default='activity'),
        sa.Column('ai_generated', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_itinerary_scope', 'itinerary_items', ['owner_id', 'trip_id', 'day_number'])

    # Photos table
    op.create_table(
        'photos',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('place_id', sa.Uuid(), nullable=False),
        sa.Column('trip_id', sa.Uuid(), sa.ForeignKey('trips.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('visibility', sa.String(20), nullable=False, default='private'),
        sa.Column('storage_ref', sa.String(1024), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('taken_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_photos_place_visibility', 'photos', ['place_id', 'visibility'])

    # Follows table
    op.create_table(
        'follows',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('follower_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('followee_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('follower_id', 'followee_id', name='uq_follows_pair'),
    )

    # Event logs table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('user_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, index=True),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])
    op.create_index('ix_event_logs_user_time', 'event_logs', ['user_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('event_logs')
    op.drop_table('follows')
    op.drop_table('photos')
    op.drop_table('itinerary_items')
    op.drop_table('bucket_list_items')
    op.drop_table('trips')
    op.drop_table('users')
