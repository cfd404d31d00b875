"""Create contract import tables

Revision ID: 5e1f0c9a2b7d
Revises:
Create Date: 2025-06-02 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5e1f0c9a2b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _rate(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(5, 2), nullable=True)


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(14, 2), nullable=True)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'))


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        'customers',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('customer_code', sa.String(50), nullable=False, unique=True),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('contact_person_name', sa.String(255), nullable=True),
        sa.Column('contact_person_title', sa.String(255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('tax_code', sa.String(20), nullable=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True,
                  comment='Login account provisioned for the customer'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('customer_since', sa.Date(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()')),
    )

    op.create_table(
        'customer_sync_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('sync_type', sa.String(20), nullable=False),
        sa.Column('sync_status', sa.String(20), nullable=False),
        sa.Column('fields_changed', postgresql.JSONB(), nullable=True),
        sa.Column('new_values', postgresql.JSONB(), nullable=True),
        sa.Column('sync_initiated_by', sa.String(50), nullable=False),
        sa.Column('retry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sync_started_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('sync_completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        _created_at(),
    )

    op.create_table(
        'contracts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('contract_number', sa.String(100), nullable=False, unique=True),
        sa.Column('contract_title', sa.String(500), nullable=False),
        sa.Column('contract_type', sa.String(30), nullable=False,
                  comment='one_day, weekly, monthly, short_term, long_term'),
        sa.Column('service_scope', sa.String(30), nullable=False,
                  comment='shift_based, event_based, daily_basis'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False),
        sa.Column('coverage_model', sa.String(30), nullable=False, server_default='fixed_schedule'),
        sa.Column('follows_customer_calendar', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('work_on_public_holidays', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('work_on_customer_closed_days', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_generate_shifts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('generate_shifts_advance_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('is_renewable', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('auto_renewal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('renewal_notice_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('renewal_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()')),
    )

    op.create_table(
        'contract_periods',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('contract_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('contracts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('period_number', sa.Integer(), nullable=False),
        sa.Column('period_type', sa.String(20), nullable=False, comment='initial or renewal'),
        sa.Column('period_start_date', sa.Date(), nullable=False),
        sa.Column('period_end_date', sa.Date(), nullable=False),
        sa.Column('is_current', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()')),
        sa.UniqueConstraint('contract_id', 'period_number', name='uq_contract_period_number'),
    )

    op.create_table(
        'customer_locations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('location_code', sa.String(50), nullable=False),
        sa.Column('location_name', sa.String(255), nullable=False),
        sa.Column('location_type', sa.String(30), nullable=False, server_default='office'),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('ward', sa.String(100), nullable=True),
        sa.Column('district', sa.String(100), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('latitude', sa.Numeric(10, 7), nullable=True),
        sa.Column('longitude', sa.Numeric(10, 7), nullable=True),
        sa.Column('geofence_radius_meters', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('minimum_guards_required', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('requires_24h_coverage', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )

    op.create_table(
        'contract_locations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('contract_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('contracts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('customer_locations.id'), nullable=False),
        sa.Column('guards_required', sa.Integer(), nullable=False),
        sa.Column('coverage_type', sa.String(20), nullable=False, server_default='24x7'),
        sa.Column('service_start_date', sa.Date(), nullable=True),
        sa.Column('service_end_date', sa.Date(), nullable=True),
        sa.Column('is_primary_location', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('priority_level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('auto_generate_shifts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )

    op.create_table(
        'contract_shift_schedules',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('contract_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('contracts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('customer_locations.id'), nullable=True),
        sa.Column('schedule_name', sa.String(100), nullable=False),
        sa.Column('schedule_type', sa.String(30), nullable=False, server_default='regular'),
        sa.Column('shift_start_time', sa.Time(), nullable=False),
        sa.Column('shift_end_time', sa.Time(), nullable=False),
        sa.Column('crosses_midnight', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('duration_hours', sa.Numeric(5, 2), nullable=False),
        sa.Column('break_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('guards_per_shift', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('recurrence_type', sa.String(20), nullable=False, server_default='weekly'),
        sa.Column('applies_monday', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('applies_tuesday', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('applies_wednesday', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('applies_thursday', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('applies_friday', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('applies_saturday', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('applies_sunday', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('applies_on_public_holidays', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_generate_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
    )

    op.create_table(
        'contract_working_conditions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('contract_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('contracts.id', ondelete='CASCADE'), nullable=False, unique=True),

        # Standard hours
        sa.Column('standard_hours_per_day', sa.Numeric(5, 2), nullable=False, server_default='8'),
        sa.Column('standard_hours_per_week', sa.Numeric(5, 2), nullable=False, server_default='40'),
        sa.Column('standard_hours_per_month', sa.Numeric(6, 2), nullable=False, server_default='160'),

        # Overtime
        sa.Column('allow_overtime', sa.Boolean(), nullable=True),
        sa.Column('max_overtime_hours_per_day', sa.Numeric(5, 2), nullable=True),
        sa.Column('max_overtime_hours_per_month', sa.Numeric(6, 2), nullable=True),
        sa.Column('max_overtime_hours_per_year', sa.Numeric(7, 2), nullable=True),
        _rate('overtime_rate_weekday'),
        _rate('overtime_rate_weekend'),
        _rate('overtime_rate_holiday'),
        sa.Column('require_overtime_approval', sa.Boolean(), nullable=True),
        sa.Column('allow_compensatory_time_off', sa.Boolean(), nullable=True),
        _rate('compensatory_time_off_ratio'),
        sa.Column('max_compensatory_days_per_month', sa.Integer(), nullable=True),

        # Holidays and weekends
        _rate('public_holiday_rate'),
        sa.Column('holiday_compensation_day', sa.Boolean(), nullable=True),
        _rate('weekend_rate'),
        _rate('saturday_rate'),
        _rate('sunday_rate'),
        sa.Column('saturday_as_regular_workday', sa.Boolean(), nullable=True),
        sa.Column('holiday_weekend_calculation_method', sa.String(20), nullable=True,
                  comment='highest_rate or cumulative'),

        # Night shift
        _rate('night_shift_rate'),
        sa.Column('night_shift_start_time', sa.Time(), nullable=True),
        sa.Column('night_shift_end_time', sa.Time(), nullable=True),
        sa.Column('minimum_night_shift_hours', sa.Numeric(4, 2), nullable=False, server_default='2'),
        _money('night_shift_allowance'),
        _rate('overtime_night_weekday_rate'),
        _rate('overtime_night_weekend_rate'),
        _rate('overtime_night_holiday_rate'),

        # Continuous shifts
        sa.Column('allow_continuous_24h_shift', sa.Boolean(), nullable=True),
        sa.Column('allow_continuous_48h_shift', sa.Boolean(), nullable=True),
        _rate('continuous_24h_rate'),
        _rate('continuous_48h_rate'),
        sa.Column('count_sleep_time_in_continuous_shift', sa.Boolean(), nullable=True),
        sa.Column('sleep_time_calculation_ratio', sa.Numeric(4, 2), nullable=True),
        sa.Column('minimum_rest_hours_between_shifts', sa.Numeric(4, 2), nullable=True),
        _rate('consecutive_shift_rate'),

        # Leave
        sa.Column('paid_leave_days_per_month', sa.Integer(), nullable=True),
        sa.Column('annual_leave_days', sa.Integer(), nullable=True),
        sa.Column('sick_leave_days_per_year', sa.Integer(), nullable=True),
        sa.Column('follows_customer_schedule', sa.Boolean(), nullable=True),
        sa.Column('work_when_customer_closed', sa.Boolean(), nullable=True),

        # Tet
        _rate('tet_holiday_rate'),
        _rate('tet_continuous_shift_rate'),
        _money('tet_allowance'),

        # Special shifts
        _rate('event_shift_rate'),
        _rate('emergency_call_rate'),
        _rate('replacement_shift_rate'),
        sa.Column('allow_event_shift', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('allow_emergency_call', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('allow_replacement_shift', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('minimum_emergency_notice_minutes', sa.Integer(), nullable=False, server_default='60'),

        # Policies
        sa.Column('overtime_limit_violation_policy', sa.String(30), nullable=True),
        _rate('overtime_limit_violation_rate'),
        sa.Column('unapproved_overtime_policy', sa.String(30), nullable=True),
        sa.Column('insufficient_rest_policy', sa.String(30), nullable=False, server_default='compensate'),

        # Allowances
        _money('meal_allowance'),
        _money('transport_allowance'),
        _money('phone_allowance'),
        _money('supervisor_allowance'),

        # Free text
        sa.Column('special_terms', sa.Text(), nullable=True),
        sa.Column('penalty_terms', sa.Text(), nullable=True),
        sa.Column('bonus_terms', sa.Text(), nullable=True),
        sa.Column('general_notes', sa.Text(), nullable=True),

        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        _created_at(),
    )

    op.create_index('idx_customers_company_name', 'customers', ['company_name'])
    op.create_index('idx_customers_user_id', 'customers', ['user_id'])
    op.create_index('idx_contracts_customer_id', 'contracts', ['customer_id'])
    op.create_index('idx_contract_periods_contract_id', 'contract_periods', ['contract_id'])
    op.create_index('idx_customer_locations_customer_id', 'customer_locations', ['customer_id'])
    op.create_index('idx_contract_locations_contract_id', 'contract_locations', ['contract_id'])
    op.create_index('idx_contract_locations_location_id', 'contract_locations', ['location_id'])
    op.create_index('idx_contract_shift_schedules_contract_id', 'contract_shift_schedules', ['contract_id'])


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index('idx_contract_shift_schedules_contract_id', table_name='contract_shift_schedules')
    op.drop_index('idx_contract_locations_location_id', table_name='contract_locations')
    op.drop_index('idx_contract_locations_contract_id', table_name='contract_locations')
    op.drop_index('idx_customer_locations_customer_id', table_name='customer_locations')
    op.drop_index('idx_contract_periods_contract_id', table_name='contract_periods')
    op.drop_index('idx_contracts_customer_id', table_name='contracts')
    op.drop_index('idx_customers_user_id', table_name='customers')
    op.drop_index('idx_customers_company_name', table_name='customers')

    op.drop_table('contract_working_conditions')
    op.drop_table('contract_shift_schedules')
    op.drop_table('contract_locations')
    op.drop_table('customer_locations')
    op.drop_table('contract_periods')
    op.drop_table('contracts')
    op.drop_table('customer_sync_logs')
    op.drop_table('customers')
