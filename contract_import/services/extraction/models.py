"""Value objects produced by the contract text extractors.

All of them are frozen: the extraction result is built once from the raw
text and then only read by classification, scoring and persistence.
"""

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ShiftBlock:
    """One recognized shift-time line, e.g. ``Ca sáng: 08:00 - 17:00``."""

    name: str
    label: str
    start_time: Optional[time]
    end_time: Optional[time]

    @property
    def crosses_midnight(self) -> bool:
        if self.start_time is None or self.end_time is None:
            return False
        return self.end_time < self.start_time

    @property
    def duration_hours(self) -> Optional[Decimal]:
        if self.start_time is None or self.end_time is None:
            return None
        start_minutes = self.start_time.hour * 60 + self.start_time.minute
        end_minutes = self.end_time.hour * 60 + self.end_time.minute
        minutes = end_minutes - start_minutes
        if minutes < 0:
            minutes += 24 * 60
        return (Decimal(minutes) / Decimal(60)).quantize(Decimal("0.01"))


@dataclass(frozen=True)
class ContractPeriodInfo:
    """Dates found in the contract-term article."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration: Optional[str] = None


@dataclass(frozen=True)
class LocationDetails:
    """Site named in the subject-of-contract article."""

    name: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class WorkingConditionsInfo:
    """Labor policy parameters; None means the clause was not found."""

    # Compensatory time off
    allows_compensatory_time_off: Optional[bool] = None
    compensatory_time_off_ratio: Optional[Decimal] = None
    max_compensatory_days_per_month: Optional[int] = None

    # Overtime
    allows_overtime: Optional[bool] = None
    overtime_rate_weekday: Optional[Decimal] = None
    overtime_rate_weekend: Optional[Decimal] = None
    overtime_rate_holiday: Optional[Decimal] = None
    max_overtime_hours_per_day: Optional[Decimal] = None
    max_overtime_hours_per_month: Optional[Decimal] = None
    requires_overtime_approval: Optional[bool] = None

    # Holidays and leave
    public_holiday_rate: Optional[Decimal] = None
    holiday_compensation_day: Optional[bool] = None
    paid_leave_days_per_month: Optional[int] = None
    paid_leave_days_per_year: Optional[int] = None
    sick_leave_days_per_year: Optional[int] = None
    follows_customer_schedule: Optional[bool] = None
    work_when_customer_closed: Optional[bool] = None

    # Weekends
    weekend_rate: Optional[Decimal] = None
    saturday_rate: Optional[Decimal] = None
    sunday_rate: Optional[Decimal] = None
    saturday_as_regular_workday: Optional[bool] = None

    # Night shift
    night_shift_rate: Optional[Decimal] = None
    night_shift_start_time: Optional[time] = None
    night_shift_end_time: Optional[time] = None
    night_shift_allowance: Optional[Decimal] = None
    overtime_night_weekday_rate: Optional[Decimal] = None
    overtime_night_weekend_rate: Optional[Decimal] = None
    overtime_night_holiday_rate: Optional[Decimal] = None

    # Continuous shifts
    continuous_24h_rate: Optional[Decimal] = None
    continuous_48h_rate: Optional[Decimal] = None
    count_sleep_time: Optional[bool] = None
    sleep_time_ratio: Optional[Decimal] = None
    minimum_rest_hours: Optional[Decimal] = None
    consecutive_shift_rate: Optional[Decimal] = None

    # Tet
    tet_holiday_rate: Optional[Decimal] = None
    tet_continuous_shift_rate: Optional[Decimal] = None
    tet_allowance: Optional[Decimal] = None
    holiday_weekend_calculation_method: Optional[str] = None

    # Special shifts
    event_shift_rate: Optional[Decimal] = None
    emergency_call_rate: Optional[Decimal] = None
    replacement_shift_rate: Optional[Decimal] = None

    # Violation policies
    overtime_limit_violation_policy: Optional[str] = None
    overtime_limit_violation_rate: Optional[Decimal] = None
    unapproved_overtime_policy: Optional[str] = None

    # Allowances
    meal_allowance: Optional[Decimal] = None
    transport_allowance: Optional[Decimal] = None
    phone_allowance: Optional[Decimal] = None
    supervisor_allowance: Optional[Decimal] = None

    # Free text
    special_requirements: Optional[str] = None
    penalty_terms: Optional[str] = None
    bonus_terms: Optional[str] = None

    @property
    def max_overtime_hours_per_year(self) -> Optional[Decimal]:
        if self.max_overtime_hours_per_month is None:
            return None
        return self.max_overtime_hours_per_month * 12


@dataclass(frozen=True)
class ExtractionResult:
    """Every field pulled out of one contract document."""

    raw_text: str
    contract_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    tax_code: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_person_title: Optional[str] = None
    guards_required: int = 0
    coverage_type: Optional[str] = None
    shifts: Tuple[ShiftBlock, ...] = field(default_factory=tuple)
    works_on_holidays: Optional[bool] = None
    works_on_weekends: Optional[bool] = None
    location: LocationDetails = field(default_factory=LocationDetails)
    period: ContractPeriodInfo = field(default_factory=ContractPeriodInfo)
    working_conditions: WorkingConditionsInfo = field(default_factory=WorkingConditionsInfo)

    @property
    def complete_shifts(self) -> List[ShiftBlock]:
        """Shift blocks that carry both a start and an end time."""
        return [s for s in self.shifts if s.start_time is not None and s.end_time is not None]
