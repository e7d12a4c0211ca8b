"""Initial migration

Revision ID: 0001
Revises: 
Create Date: 2026-10-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto;')

    # Enum columns are stored as VARCHAR (native_enum=False on the models)

    # Create profiles table; id is the auth provider's user id
    op.create_table('profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('username', sa.String(length=48), nullable=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=512), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('steam_id', sa.String(length=128), nullable=True),
        sa.Column('epic_games_id', sa.String(length=128), nullable=True),
        sa.Column('riot_id', sa.String(length=128), nullable=True),
        sa.Column('tournaments_played', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tournaments_won', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_earnings', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )

    # Create games table
    op.create_table('games',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('cover_image', sa.String(length=512), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    # Create wallets table
    op.create_table('wallets',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.CheckConstraint('balance >= 0', name='chk_wallet_balance_nonneg')
    )

    # Create tournaments table
    op.create_table('tournaments',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('game_name', sa.String(length=128), nullable=False),
        sa.Column('game_cover_image', sa.String(length=512), nullable=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('rules', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('start_time', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('total_slots', sa.Integer(), nullable=False),
        sa.Column('entry_fee', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('prize_pool', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('room_id', sa.String(length=128), nullable=True),
        sa.Column('room_password', sa.String(length=128), nullable=True),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='upcoming'),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('total_slots > 0', name='chk_tournament_slots_positive'),
        sa.CheckConstraint('entry_fee >= 0', name='chk_tournament_fee_nonneg')
    )

    # Create transactions table
    op.create_table('transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='pending'),
        sa.Column('description', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('reference_id', sa.String(length=128), nullable=True),
        sa.Column('idempotency_key', sa.String(length=128), nullable=True),
        sa.Column('tournament_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'])
    )

    # Create tournament_participants table
    op.create_table('tournament_participants',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('tournament_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('transaction_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('joined_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='registered'),
        sa.Column('placement', sa.Integer(), nullable=True),
        sa.Column('payment_status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id']),
        sa.UniqueConstraint('tournament_id', 'user_id', name='uq_tournament_participant')
    )

    # Create notifications table
    op.create_table('notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False, server_default='system'),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('tournament_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )

    # Create indexes
    op.create_index('idx_transactions_user_created', 'transactions', ['user_id', 'created_at'])
    op.create_index('idx_transactions_type_status', 'transactions', ['type', 'status'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('idx_tournaments_status_start', 'tournaments', ['status', 'start_time'])


def downgrade() -> None:
    op.drop_index('idx_tournaments_status_start', table_name='tournaments')
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_index('idx_transactions_type_status', table_name='transactions')
    op.drop_index('idx_transactions_user_created', table_name='transactions')

    op.drop_table('notifications')
    op.drop_table('tournament_participants')
    op.drop_table('transactions')
    op.drop_table('tournaments')
    op.drop_table('wallets')
    op.drop_table('games')
    op.drop_table('profiles')
