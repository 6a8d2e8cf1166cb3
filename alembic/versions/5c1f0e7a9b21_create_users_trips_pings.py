"""create_users_trips_pings

Revision ID: 5c1f0e7a9b21
Revises:
Create Date: 2025-01-06 09:12:40

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1f0e7a9b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the users, trips and pings tables.

    - trips.ended_at is NOT NULL: open trips carry 2099-12-31T23:59:59Z
    - pings.trip_id is SET NULL on trip deletion (pings outlive their trip)
    """
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'trips',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('owner_id', sa.String(length=100), nullable=False),
        sa.Column('calendar_date', sa.Date(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_seconds', sa.Integer(), server_default='0', nullable=False),
        sa.Column('cumulative_distance_meters', sa.Float(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('ended_at >= started_at', name='check_trip_time_order'),
        sa.CheckConstraint('duration_seconds >= 0', name='check_trip_duration'),
        sa.CheckConstraint('cumulative_distance_meters >= 0', name='check_trip_distance'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trips_owner_id'), 'trips', ['owner_id'], unique=False)
    op.create_index('idx_trips_owner_ended_at', 'trips', ['owner_id', 'ended_at'], unique=False)
    op.create_index('idx_trips_owner_calendar_date', 'trips', ['owner_id', 'calendar_date'], unique=False)

    op.create_table(
        'pings',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('trip_id', sa.String(length=100), nullable=True),
        sa.Column('device_id', sa.String(length=100), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('altitude', sa.Float(), nullable=True),
        sa.Column('speed_over_ground', sa.Float(), nullable=True),
        sa.Column('observed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('latitude >= -90 AND latitude <= 90', name='check_ping_lat_range'),
        sa.CheckConstraint('longitude >= -180 AND longitude <= 180', name='check_ping_lon_range'),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_pings_trip_id'), 'pings', ['trip_id'], unique=False)
    op.create_index(op.f('ix_pings_device_id'), 'pings', ['device_id'], unique=False)
    op.create_index('idx_pings_trip_id_desc', 'pings', ['trip_id', sa.text('id DESC')], unique=False)
    op.create_index('idx_pings_trip_observed_at', 'pings', ['trip_id', 'observed_at'], unique=False)
    op.create_index('idx_pings_device_id_desc', 'pings', ['device_id', sa.text('id DESC')], unique=False)
    op.create_index('idx_pings_observed_at', 'pings', ['observed_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_pings_observed_at', table_name='pings')
    op.drop_index('idx_pings_device_id_desc', table_name='pings')
    op.drop_index('idx_pings_trip_observed_at', table_name='pings')
    op.drop_index('idx_pings_trip_id_desc', table_name='pings')
    op.drop_index(op.f('ix_pings_device_id'), table_name='pings')
    op.drop_index(op.f('ix_pings_trip_id'), table_name='pings')
    op.drop_table('pings')

    op.drop_index('idx_trips_owner_calendar_date', table_name='trips')
    op.drop_index('idx_trips_owner_ended_at', table_name='trips')
    op.drop_index(op.f('ix_trips_owner_id'), table_name='trips')
    op.drop_table('trips')

    op.drop_table('users')
