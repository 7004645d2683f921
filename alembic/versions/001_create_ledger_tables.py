"""Create seller commission ledger tables

Revision ID: 001_ledger
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers
revision = '001_ledger'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create sellers, commission events, withdrawal requests and audit logs"""

    # ====================
    # SELLERS TABLE
    # ====================
    op.create_table(
        'sellers',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean, server_default='true', nullable=False),
        sa.Column('available_commission', sa.Numeric(14, 2), server_default='0', nullable=False,
                  comment='Cached available balance; reconciled against the ledger'),
        sa.Column('balance_reconciled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index('ix_sellers_email', 'sellers', ['email'])

    # ====================
    # COMMISSION EVENTS TABLE
    # ====================
    op.create_table(
        'commission_events',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('seller_id', UUID(as_uuid=True), sa.ForeignKey('sellers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('order_id', sa.String(100), nullable=False, comment='External order reference'),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('original_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('type', sa.String(20), server_default='EARNED', nullable=False, comment='EARNED, REVERSED'),
        sa.Column('status', sa.String(20), server_default='PENDING', nullable=False,
                  comment='PENDING, CONFIRMED, VOIDED'),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmed_by', sa.String(100), nullable=True),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('void_reason', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_commission_events_amount_positive'),
    )

    op.create_index('ix_commission_events_seller_id', 'commission_events', ['seller_id'])
    op.create_index('ix_commission_events_order_id', 'commission_events', ['order_id'])
    op.create_index('ix_commission_events_created_at', 'commission_events', ['created_at'])
    op.create_index(
        'ix_commission_events_seller_status_type',
        'commission_events',
        ['seller_id', 'status', 'type'],
    )

    # ====================
    # WITHDRAWAL REQUESTS TABLE
    # ====================
    op.create_table(
        'withdrawal_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('seller_id', UUID(as_uuid=True), sa.ForeignKey('sellers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(20), server_default='PENDING', nullable=False,
                  comment='PENDING, COMPLETED, REJECTED'),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolution_note', sa.Text, nullable=True),
        sa.Column('payout_reference', sa.String(100), nullable=True,
                  comment='Bank/gateway reference for completed payouts'),
        sa.CheckConstraint('amount > 0', name='ck_withdrawal_requests_amount_positive'),
    )

    op.create_index('ix_withdrawal_requests_seller_id', 'withdrawal_requests', ['seller_id'])
    op.create_index('ix_withdrawal_requests_requested_at', 'withdrawal_requests', ['requested_at'])
    op.create_index('ix_withdrawal_requests_seller_status', 'withdrawal_requests', ['seller_id', 'status'])

    # ====================
    # AUDIT LOGS TABLE
    # ====================
    op.create_table(
        'audit_logs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', UUID(as_uuid=True), nullable=True),
        sa.Column('old_values', sa.JSON, nullable=True),
        sa.Column('new_values', sa.JSON, nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('performed_by', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    )

    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])


def downgrade():
    """Drop ledger tables"""
    op.drop_table('audit_logs')
    op.drop_table('withdrawal_requests')
    op.drop_table('commission_events')
    op.drop_table('sellers')
