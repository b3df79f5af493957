"""Create ledger schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-12-08 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create ledger tables."""
    # Create tenants table
    op.create_table(
        'tenants',
        *_timestamps(),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('unit_number', sa.String(50), nullable=True),
        sa.Column('monthly_rent', sa.Numeric(10, 2), nullable=False),
        sa.Column('lease_start', sa.Date(), nullable=True),
        sa.Column('lease_end', sa.Date(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'PENDING', 'TERMINATED', 'EXPIRED', 'INACTIVE', name='tenantstatus'),
            nullable=False,
        ),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('contact_number', sa.String(50), nullable=True),
        sa.Column('terminated_by', sa.String(255), nullable=True),
        sa.Column('termination_date', sa.Date(), nullable=True),
        sa.Column('termination_reason', sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_username', 'tenants', ['username'], unique=True)
    op.create_index('ix_tenants_status', 'tenants', ['status'])

    # Create units table
    op.create_table(
        'units',
        *_timestamps(),
        sa.Column('unit_number', sa.String(50), nullable=False),
        sa.Column(
            'status',
            sa.Enum('VACANT', 'OCCUPIED', 'MAINTENANCE', name='unitstatus'),
            nullable=False,
        ),
        sa.Column('tenant_id', sa.Integer(), nullable=True),
        sa.Column('vacated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('vacate_reason', sa.String(500), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('unit_number'),
    )
    op.create_index('ix_units_status', 'units', ['status'])
    op.create_index('ix_units_tenant_id', 'units', ['tenant_id'])

    # Create utility_rates table
    op.create_table(
        'utility_rates',
        *_timestamps(),
        sa.Column('electricity_rate', sa.Numeric(14, 6), nullable=False),
        sa.Column('water_rate', sa.Numeric(14, 6), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Create bills table
    op.create_table(
        'bills',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('electricity_kwh', sa.Numeric(14, 6), nullable=False),
        sa.Column('electricity_rate', sa.Numeric(14, 6), nullable=False),
        sa.Column('electricity_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('water_cubic', sa.Numeric(14, 6), nullable=False),
        sa.Column('water_rate', sa.Numeric(14, 6), nullable=False),
        sa.Column('water_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('paid_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column(
            'status',
            sa.Enum('UNPAID', 'PARTIAL', 'PAID', name='settlementstatus'),
            nullable=False,
        ),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'month', name='uq_bill_tenant_month'),
    )
    op.create_index('ix_bills_tenant_id', 'bills', ['tenant_id'])
    op.create_index('ix_bills_month', 'bills', ['month'])

    # Create rent_statuses table
    op.create_table(
        'rent_statuses',
        *_timestamps(),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('required_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('paid_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('remaining_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column(
            'status',
            sa.Enum('UNPAID', 'PARTIAL', 'PAID', name='settlementstatus'),
            nullable=False,
        ),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'month', name='uq_rent_status_tenant_month'),
    )
    op.create_index('ix_rent_statuses_tenant_id', 'rent_statuses', ['tenant_id'])
    op.create_index('ix_rent_statuses_month', 'rent_statuses', ['month'])

    # Create payments table
    op.create_table(
        'payments',
        *_timestamps(),
        sa.Column('payment_type', sa.Enum('RENT', 'BILL', name='paymenttype'), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('bill_id', sa.Integer(), nullable=True),
        sa.Column('tenant_name', sa.String(255), nullable=False),
        sa.Column('unit_number', sa.String(50), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('method', sa.String(50), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'VERIFIED', 'REJECTED', 'COMPLETED', name='paymentstatus'),
            nullable=False,
        ),
        sa.Column('reference', sa.String(100), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.String(1000), nullable=False),
        sa.Column('admin_notes', sa.String(1000), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_payment_type', 'payments', ['payment_type'])
    op.create_index('ix_payments_tenant_id', 'payments', ['tenant_id'])
    op.create_index('ix_payments_status', 'payments', ['status'])
    op.create_index('idx_payment_tenant_month', 'payments', ['tenant_id', 'month'])
    op.create_index('idx_payment_tenant_type', 'payments', ['tenant_id', 'payment_type'])

    # Create ledger_entries table
    op.create_table(
        'ledger_entries',
        *_timestamps(),
        sa.Column('payment_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('rent_status_id', sa.Integer(), nullable=True),
        sa.Column('bill_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('kind', sa.Enum('APPLY', 'REVERSAL', name='entrykind'), nullable=False),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id']),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.ForeignKeyConstraint(['rent_status_id'], ['rent_statuses.id']),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ledger_entries_payment_id', 'ledger_entries', ['payment_id'])
    op.create_index('idx_ledger_entry_rent_status', 'ledger_entries', ['rent_status_id'])
    op.create_index('idx_ledger_entry_bill', 'ledger_entries', ['bill_id'])

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        *_timestamps(),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('actor', sa.String(255), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Drop ledger tables."""
    op.drop_table('audit_logs')
    op.drop_index('idx_ledger_entry_bill', table_name='ledger_entries')
    op.drop_index('idx_ledger_entry_rent_status', table_name='ledger_entries')
    op.drop_index('ix_ledger_entries_payment_id', table_name='ledger_entries')
    op.drop_table('ledger_entries')
    op.drop_index('idx_payment_tenant_type', table_name='payments')
    op.drop_index('idx_payment_tenant_month', table_name='payments')
    op.drop_index('ix_payments_status', table_name='payments')
    op.drop_index('ix_payments_tenant_id', table_name='payments')
    op.drop_index('ix_payments_payment_type', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_rent_statuses_month', table_name='rent_statuses')
    op.drop_index('ix_rent_statuses_tenant_id', table_name='rent_statuses')
    op.drop_table('rent_statuses')
    op.drop_index('ix_bills_month', table_name='bills')
    op.drop_index('ix_bills_tenant_id', table_name='bills')
    op.drop_table('bills')
    op.drop_table('utility_rates')
    op.drop_index('ix_units_tenant_id', table_name='units')
    op.drop_index('ix_units_status', table_name='units')
    op.drop_table('units')
    op.drop_index('ix_tenants_status', table_name='tenants')
    op.drop_index('ix_tenants_username', table_name='tenants')
    op.drop_table('tenants')
