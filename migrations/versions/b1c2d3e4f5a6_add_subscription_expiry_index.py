"""add subscription expiry index

Revision ID: b1c2d3e4f5a6
Revises: a0b1c2d3e4f5
Create Date: 2026-10-19
"""
from alembic import op


revision = 'b1c2d3e4f5a6'
down_revision = 'a0b1c2d3e4f5'
branch_labels = None
depends_on = None


def upgrade():
    # expiring-notice scan: unpaid subscriptions by expiry date
    op.create_index('ix_subscriptions_expiry_paid', 'subscriptions', ['expiry_on', 'paid_date'])


def downgrade():
    op.drop_index('ix_subscriptions_expiry_paid', table_name='subscriptions')
