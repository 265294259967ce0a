"""create wallet ledger tables

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = 'a0b1c2d3e4f5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_unique_constraint('uq_users_username', 'users', ['username'])
    op.create_unique_constraint('uq_users_email', 'users', ['email'])

    op.create_table(
        'wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='BGN'),
        sa.Column('opening_balance', sa.Numeric(20, 2), nullable=False, server_default='0'),
        sa.Column('income', sa.Numeric(20, 2), nullable=False, server_default='0'),
        sa.Column('expense', sa.Numeric(20, 2), nullable=False, server_default='0'),
        sa.Column('balance', sa.Numeric(20, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'], unique=True)

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('wallet_id', sa.Integer(), sa.ForeignKey('wallets.id'), nullable=False),
        sa.Column('operation_type', sa.String(16), nullable=False),
        sa.Column('amount', sa.Numeric(20, 2), nullable=False),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('description', sa.String(255), nullable=False, server_default=''),
        sa.Column('occurred_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_transactions_wallet_id', 'transactions', ['wallet_id'])
    op.create_index('ix_transactions_wallet_occurred', 'transactions', ['wallet_id', 'occurred_at'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(20, 2), nullable=False),
        sa.Column('period', sa.String(16), nullable=False, server_default='MONTHLY'),
        sa.Column('subscription_type', sa.String(16), nullable=False, server_default='DEFAULT'),
        sa.Column('expiry_on', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('category', sa.String(32), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(20, 2), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_budgets_user_id', 'budgets', ['user_id'])
    op.create_unique_constraint(
        'uq_budget_user_category_month', 'budgets', ['user_id', 'category', 'year', 'month']
    )


def downgrade():
    op.drop_table('budgets')
    op.drop_table('subscriptions')
    op.drop_table('transactions')
    op.drop_table('wallets')
    op.drop_table('users')
