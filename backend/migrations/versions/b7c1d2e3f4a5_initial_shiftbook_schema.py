"""initial shiftbook schema

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the complete schema from scratch:
- users, session_tokens: operator accounts and bearer sessions
- catalog_items: item master (string ids, soft delete)
- shifts: shift aggregate with lifecycle status and cash counts
- production_entries, sale_entries, discharge_entries: per-shift ledgers
- shift_inventory_counts: beginning/ending counts (ending NULL = uncounted)
- shift_reports: immutable archive written when a shift closes
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c1d2e3f4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=128), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_is_revoked', 'session_tokens', ['is_revoked'])

    op.create_table(
        'catalog_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('unit', sa.String(length=16), nullable=False),
        sa.Column('cost_price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('selling_price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_catalog_items_active_sort', 'catalog_items', ['is_active', 'sort_order'])

    op.create_table(
        'shifts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='CLOSED'),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('opening_cash_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('closing_cash_cents', sa.Integer(), nullable=True),
        sa.Column('opened_by_user_id', sa.Integer(), nullable=True),
        sa.Column('closed_by_user_id', sa.Integer(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['opened_by_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['closed_by_user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_shifts_status', 'shifts', ['status'])

    for table in ('production_entries', 'sale_entries'):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('shift_id', sa.Integer(), nullable=False),
            sa.Column('item_id', sa.String(length=36), nullable=False),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                      server_default=sa.text('CURRENT_TIMESTAMP')),
            sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
            sa.ForeignKeyConstraint(['item_id'], ['catalog_items.id']),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True
        )
        op.create_index(f'ix_{table}_shift_id', table, ['shift_id'])
        op.create_index(f'ix_{table}_item_id', table, ['item_id'])

    op.create_table(
        'discharge_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=32), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['item_id'], ['catalog_items.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_discharge_entries_shift_id', 'discharge_entries', ['shift_id'])
    op.create_index('ix_discharge_entries_item_id', 'discharge_entries', ['item_id'])

    op.create_table(
        'shift_inventory_counts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.String(length=36), nullable=False),
        sa.Column('beginning_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ending_quantity', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['item_id'], ['catalog_items.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shift_id', 'item_id', name='uq_shift_inventory_counts_shift_item'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_shift_inventory_counts_shift_id', 'shift_inventory_counts', ['shift_id'])
    op.create_index('ix_shift_inventory_counts_item_id', 'shift_inventory_counts', ['item_id'])

    op.create_table(
        'shift_reports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shift_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('user_display_name', sa.String(length=128), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('opening_cash_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('closing_cash_cents', sa.Integer(), nullable=True),
        sa.Column('inventory_start', sa.JSON(), nullable=False),
        sa.Column('inventory_end', sa.JSON(), nullable=False),
        sa.Column('total_produced', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_sold', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_discharged', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_revenue_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_cost_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('discharge_cost_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shift_id', name='uq_shift_reports_shift'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_shift_reports_shift_id', 'shift_reports', ['shift_id'])
    op.create_index('ix_shift_reports_user_id', 'shift_reports', ['user_id'])
    op.create_index('ix_shift_reports_end_time', 'shift_reports', ['end_time'])


def downgrade():
    op.drop_table('shift_reports')
    op.drop_table('shift_inventory_counts')
    op.drop_table('discharge_entries')
    op.drop_table('sale_entries')
    op.drop_table('production_entries')
    op.drop_table('shifts')
    op.drop_table('catalog_items')
    op.drop_table('session_tokens')
    op.drop_table('users')
