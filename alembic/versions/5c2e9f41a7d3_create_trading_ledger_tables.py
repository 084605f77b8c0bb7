"""Create agents, prices, ledger, order, transaction, notification and trend tables

Revision ID: 5c2e9f41a7d3
Revises:
Create Date: 2026-10-19 09:12:04.118233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c2e9f41a7d3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AMOUNT = sa.Numeric(28, 10)


def upgrade() -> None:
    op.create_table(
        'agents',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('symbol', sa.String(), nullable=False, index=True),
        sa.Column('price', AMOUNT, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint('price > 0', name='check_agent_price_positive'),
    )
    op.create_table(
        'prices',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('agents.id'), nullable=False, index=True),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('volume', sa.Float(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, index=True),
    )
    op.create_table(
        'balances',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('currency', sa.String(), nullable=False),
        sa.Column('available', AMOUNT, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('user_id', 'currency', name='uq_balance_user_currency'),
        sa.CheckConstraint('available >= 0', name='check_balance_non_negative'),
    )
    op.create_table(
        'holdings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('agents.id'), nullable=False),
        sa.Column('quantity', AMOUNT, nullable=False),
        sa.Column('average_price', AMOUNT, nullable=False),
        sa.Column('total_invested', AMOUNT, nullable=False),
        sa.Column('realized_pnl', AMOUNT, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('user_id', 'agent_id', name='uq_holding_user_agent'),
        sa.CheckConstraint('quantity >= 0', name='check_holding_quantity_non_negative'),
    )
    op.create_table(
        'orders',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('agents.id'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('side', sa.String(), nullable=False),
        sa.Column('amount', AMOUNT, nullable=False),
        sa.Column('price', AMOUNT, nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('filled_amount', AMOUNT, nullable=False),
        sa.Column('average_fill_price', AMOUNT, nullable=True),
        sa.Column('fees', AMOUNT, nullable=False),
        sa.Column('time_in_force', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint('amount > 0', name='check_order_amount_positive'),
        sa.CheckConstraint('filled_amount <= amount', name='check_order_filled_within_amount'),
    )
    op.create_table(
        'transactions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('agents.id'), nullable=False),
        sa.Column('order_id', sa.String(), sa.ForeignKey('orders.id'), nullable=False, unique=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('quantity', AMOUNT, nullable=False),
        sa.Column('price', AMOUNT, nullable=False),
        sa.Column('total_amount', AMOUNT, nullable=False),
        sa.Column('fees', AMOUNT, nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
    )
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True)),
    )
    op.create_table(
        'trend_analysis',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('agents.id'), nullable=False, index=True),
        sa.Column('trend_direction', sa.String(), nullable=False),
        sa.Column('trend_strength', sa.Float(), nullable=False),
        sa.Column('trend_duration_hours', sa.Integer(), nullable=False),
        sa.Column('support_levels', sa.JSON(), nullable=False),
        sa.Column('resistance_levels', sa.JSON(), nullable=False),
        sa.Column('detected_patterns', sa.JSON(), nullable=False),
        sa.Column('pattern_confidence', sa.Float(), nullable=False),
        sa.Column('rsi', sa.Float(), nullable=False),
        sa.Column('macd', sa.Float(), nullable=False),
        sa.Column('moving_avg_50', sa.Float(), nullable=False),
        sa.Column('moving_avg_200', sa.Float(), nullable=True),
        sa.Column('volume_trend', sa.String(), nullable=False),
        sa.Column('predicted_price_24h', sa.Float(), nullable=False),
        sa.Column('predicted_direction', sa.String(), nullable=False),
        sa.Column('confidence_score', sa.Float(), nullable=False),
        sa.Column('analysis_timestamp', sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    for table in (
        'trend_analysis', 'notifications', 'transactions', 'orders',
        'holdings', 'balances', 'prices', 'agents',
    ):
        op.drop_table(table)
