"""
initial schema: users, classes, events, participants, assignments, presents

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('user', 'admin', name='userrole')
participant_status = sa.Enum(
    'REGISTERED', 'ASSIGNED', 'GIFT_SUBMITTED', 'GIFT_DELIVERED', name='participantstatus'
)
present_status = sa.Enum('NOT_SUBMITTED', 'SUBMITTED', 'DELIVERED', name='presentstatus')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('external_id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('role', user_role, nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'classes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('registration_deadline', sa.DateTime(), nullable=False),
        sa.Column('assignment_date', sa.DateTime(), nullable=False),
        sa.Column('gift_deadline', sa.DateTime(), nullable=False),
        sa.Column('delivery_date', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('is_registration_open', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('are_assignments_created', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_events_is_active', 'events', ['is_active'])

    op.create_table(
        'participants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('interests', sa.Text(), nullable=True),
        sa.Column('status', participant_status, nullable=False, server_default='REGISTERED'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('user_id', 'event_id', name='uq_participants_user_event'),
    )
    op.create_index('ix_participants_user_id', 'participants', ['user_id'])
    op.create_index('ix_participants_event_id', 'participants', ['event_id'])
    op.create_index('ix_participants_class_id', 'participants', ['class_id'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('giver_id', sa.String(), sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', sa.String(), sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('event_id', 'giver_id', name='uq_assignments_event_giver'),
        sa.UniqueConstraint('event_id', 'receiver_id', name='uq_assignments_event_receiver'),
        sa.CheckConstraint('giver_id <> receiver_id', name='ck_assignments_no_self_gift'),
    )
    op.create_index('ix_assignments_event_id', 'assignments', ['event_id'])

    op.create_table(
        'presents',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('assignment_id', sa.String(), sa.ForeignKey('assignments.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('giver_id', sa.String(), sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', sa.String(), sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', present_status, nullable=False, server_default='NOT_SUBMITTED'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_presents_giver_id', 'presents', ['giver_id'])
    op.create_index('ix_presents_receiver_id', 'presents', ['receiver_id'])


def downgrade() -> None:
    op.drop_index('ix_presents_receiver_id', table_name='presents')
    op.drop_index('ix_presents_giver_id', table_name='presents')
    op.drop_table('presents')
    op.drop_index('ix_assignments_event_id', table_name='assignments')
    op.drop_table('assignments')
    op.drop_index('ix_participants_class_id', table_name='participants')
    op.drop_index('ix_participants_event_id', table_name='participants')
    op.drop_index('ix_participants_user_id', table_name='participants')
    op.drop_table('participants')
    op.drop_index('ix_events_is_active', table_name='events')
    op.drop_table('events')
    op.drop_table('classes')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_external_id', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    present_status.drop(bind, checkfirst=True)
    participant_status.drop(bind, checkfirst=True)
    user_role.drop(bind, checkfirst=True)
