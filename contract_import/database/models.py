"""SQLAlchemy models for the contract import tables."""

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_import.database.base import Base


class Customer(Base):
    """Counterparty of a service contract."""

    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    customer_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_person_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_person_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tax_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    customer_since: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=datetime.utcnow
    )

    contracts: Mapped[list["Contract"]] = relationship("Contract", back_populates="customer")


class CustomerSyncLog(Base):
    """Audit entry written when a customer is linked to a login account."""

    __tablename__ = "customer_sync_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customers.id"), nullable=True
    )
    sync_type: Mapped[str] = mapped_column(String(20), nullable=False)
    sync_status: Mapped[str] = mapped_column(String(20), nullable=False)
    fields_changed: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    new_values: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    sync_initiated_by: Mapped[str] = mapped_column(String(50), nullable=False)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sync_started_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    sync_completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class Contract(Base):
    """Service contract created from an imported document."""

    __tablename__ = "contracts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True
    )
    contract_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    contract_title: Mapped[str] = mapped_column(String(500), nullable=False)
    contract_type: Mapped[str] = mapped_column(String(30), nullable=False)
    service_scope: Mapped[str] = mapped_column(String(30), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    coverage_model: Mapped[str] = mapped_column(String(30), nullable=False, default="fixed_schedule")
    follows_customer_calendar: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    work_on_public_holidays: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    work_on_customer_closed_days: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_generate_shifts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    generate_shifts_advance_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    is_renewable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_renewal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    renewal_notice_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=datetime.utcnow
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="contracts")
    periods: Mapped[list["ContractPeriod"]] = relationship(
        "ContractPeriod", back_populates="contract", order_by="ContractPeriod.period_number"
    )


class ContractPeriod(Base):
    """Append-only history of the date ranges a contract has covered."""

    __tablename__ = "contract_periods"
    __table_args__ = (
        UniqueConstraint("contract_id", "period_number", name="uq_contract_period_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_number: Mapped[int] = mapped_column(Integer, nullable=False)
    period_type: Mapped[str] = mapped_column(String(20), nullable=False)
    period_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()", onupdate=datetime.utcnow
    )

    contract: Mapped["Contract"] = relationship("Contract", back_populates="periods")


class CustomerLocation(Base):
    """Physical site guarded under a contract."""

    __tablename__ = "customer_locations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True
    )
    location_code: Mapped[str] = mapped_column(String(50), nullable=False)
    location_name: Mapped[str] = mapped_column(String(255), nullable=False)
    location_type: Mapped[str] = mapped_column(String(30), nullable=False, default="office")
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    ward: Mapped[str | None] = mapped_column(String(100), nullable=True)
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    geofence_radius_meters: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    minimum_guards_required: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    requires_24h_coverage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class ContractLocation(Base):
    """Link between a contract and a guarded location."""

    __tablename__ = "contract_locations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    location_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customer_locations.id"), nullable=False, index=True
    )
    guards_required: Mapped[int] = mapped_column(Integer, nullable=False)
    coverage_type: Mapped[str] = mapped_column(String(20), nullable=False, default="24x7")
    service_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    service_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_primary_location: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    priority_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    auto_generate_shifts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class ContractShiftSchedule(Base):
    """Recurring shift template derived from a shift-time line."""

    __tablename__ = "contract_shift_schedules"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    location_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("customer_locations.id"), nullable=True
    )
    schedule_name: Mapped[str] = mapped_column(String(100), nullable=False)
    schedule_type: Mapped[str] = mapped_column(String(30), nullable=False, default="regular")
    shift_start_time: Mapped[time] = mapped_column(Time, nullable=False)
    shift_end_time: Mapped[time] = mapped_column(Time, nullable=False)
    crosses_midnight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    duration_hours: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    guards_per_shift: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    recurrence_type: Mapped[str] = mapped_column(String(20), nullable=False, default="weekly")
    applies_monday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_tuesday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_wednesday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_thursday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_friday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applies_saturday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_sunday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_on_public_holidays: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_generate_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )


class ContractWorkingConditions(Base):
    """Labor policy of a contract: overtime, night work, leave and allowances.

    Unmatched clauses are stored as NULL so reviewers can tell "not in the
    document" apart from an explicit value.
    """

    __tablename__ = "contract_working_conditions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    # Standard hours
    standard_hours_per_day: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=8)
    standard_hours_per_week: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=40)
    standard_hours_per_month: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=160)

    # Overtime
    allow_overtime: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    max_overtime_hours_per_day: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    max_overtime_hours_per_month: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    max_overtime_hours_per_year: Mapped[Decimal | None] = mapped_column(Numeric(7, 2), nullable=True)
    overtime_rate_weekday: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    overtime_rate_weekend: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    overtime_rate_holiday: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    require_overtime_approval: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    allow_compensatory_time_off: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    compensatory_time_off_ratio: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    max_compensatory_days_per_month: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Holidays and weekends
    public_holiday_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    holiday_compensation_day: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    weekend_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    saturday_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    sunday_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    saturday_as_regular_workday: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    holiday_weekend_calculation_method: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Night shift
    night_shift_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    night_shift_start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    night_shift_end_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    minimum_night_shift_hours: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False, default=2)
    night_shift_allowance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    overtime_night_weekday_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    overtime_night_weekend_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    overtime_night_holiday_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    # Continuous shifts
    allow_continuous_24h_shift: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    allow_continuous_48h_shift: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    continuous_24h_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    continuous_48h_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    count_sleep_time_in_continuous_shift: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    sleep_time_calculation_ratio: Mapped[Decimal | None] = mapped_column(Numeric(4, 2), nullable=True)
    minimum_rest_hours_between_shifts: Mapped[Decimal | None] = mapped_column(Numeric(4, 2), nullable=True)
    consecutive_shift_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    # Leave
    paid_leave_days_per_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    annual_leave_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sick_leave_days_per_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    follows_customer_schedule: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    work_when_customer_closed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Tet
    tet_holiday_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    tet_continuous_shift_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    tet_allowance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    # Special shifts
    event_shift_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    emergency_call_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    replacement_shift_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    allow_event_shift: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_emergency_call: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allow_replacement_shift: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    minimum_emergency_notice_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    # Policies
    overtime_limit_violation_policy: Mapped[str | None] = mapped_column(String(30), nullable=True)
    overtime_limit_violation_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    unapproved_overtime_policy: Mapped[str | None] = mapped_column(String(30), nullable=True)
    insufficient_rest_policy: Mapped[str] = mapped_column(String(30), nullable=False, default="compensate")

    # Allowances
    meal_allowance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    transport_allowance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    phone_allowance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    supervisor_allowance: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    # Free text
    special_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    penalty_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    bonus_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    general_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default="NOW()"
    )
