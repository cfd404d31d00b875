"""Classifies a contract by its length, with keyword cues taking priority."""

import re
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_DURATION_MONTHS = 12

# Six months of elapsed days; longer contracts are long term.
SHORT_TERM_MAX_DAYS = 183


@dataclass(frozen=True)
class ContractClassification:
    """Contract type and the shift-generation policy that goes with it."""

    contract_type: str
    service_scope: str
    duration_months: int
    auto_generate_shifts: bool
    generate_advance_days: int
    is_renewable: bool
    auto_renewal: bool = False
    total_days: Optional[int] = None


def months_between(start: date, end: date) -> int:
    """Calendar-month difference, ignoring the day of month.

    Only reported as ``duration_months``; bucket boundaries use elapsed days.
    """
    return (end.year - start.year) * 12 + end.month - start.month


def classify_by_dates(start: Optional[date], end: Optional[date]) -> ContractClassification:
    """Baseline classification from the elapsed time between two dates.

    Args:
        start: Contract start date
        end: Contract end date

    Returns:
        Classification; ``long_term`` over 12 months when a date is missing
    """
    if start is None or end is None:
        return ContractClassification(
            contract_type="long_term",
            service_scope="shift_based",
            duration_months=DEFAULT_DURATION_MONTHS,
            auto_generate_shifts=True,
            generate_advance_days=30,
            is_renewable=True,
        )

    total_days = (end - start).days
    duration_months = months_between(start, end)

    if total_days <= 1:
        return ContractClassification(
            contract_type="one_day",
            service_scope="event_based",
            duration_months=duration_months,
            auto_generate_shifts=False,
            generate_advance_days=0,
            is_renewable=False,
            total_days=total_days,
        )
    if total_days <= 7:
        return ContractClassification(
            contract_type="weekly",
            service_scope="shift_based",
            duration_months=duration_months,
            auto_generate_shifts=True,
            generate_advance_days=3,
            is_renewable=False,
            total_days=total_days,
        )
    if total_days <= 30:
        return ContractClassification(
            contract_type="monthly",
            service_scope="shift_based",
            duration_months=duration_months,
            auto_generate_shifts=True,
            generate_advance_days=7,
            is_renewable=True,
            total_days=total_days,
        )
    if total_days <= SHORT_TERM_MAX_DAYS:
        return ContractClassification(
            contract_type="short_term",
            service_scope="shift_based",
            duration_months=duration_months,
            auto_generate_shifts=True,
            generate_advance_days=14,
            is_renewable=True,
            total_days=total_days,
        )
    return ContractClassification(
        contract_type="long_term",
        service_scope="shift_based",
        duration_months=duration_months,
        auto_generate_shifts=True,
        generate_advance_days=30,
        is_renewable=True,
        total_days=total_days,
    )


_LONG_TERM = re.compile(r"hợp\s*đồng\s*(?:dài\s*hạn|lâu\s*dài)", re.IGNORECASE)
_SHORT_TERM = re.compile(r"hợp\s*đồng\s*(?:ngắn\s*hạn|tạm\s*thời)", re.IGNORECASE)
_ONE_DAY = re.compile(r"hợp\s*đồng\s*(?:1\s*ngày|một\s*ngày|sự\s*kiện)", re.IGNORECASE)
_WEEKLY = re.compile(r"hợp\s*đồng\s*(?:tuần|7\s*ngày)", re.IGNORECASE)
_AUTO_RENEWAL = re.compile(r"tự\s*động\s*gia\s*hạn", re.IGNORECASE)
_EVENT_SCOPE = re.compile(r"sự\s*kiện|\bevent\b|\bbuổi\b|\boccasion\b", re.IGNORECASE)


def apply_keyword_overrides(text: str, baseline: ContractClassification) -> ContractClassification:
    """Let explicit wording in the document win over the date-derived baseline."""
    if not text:
        return baseline

    result = baseline
    if _LONG_TERM.search(text):
        result = replace(result, contract_type="long_term", is_renewable=True)
    elif _SHORT_TERM.search(text):
        result = replace(result, contract_type="short_term", is_renewable=False)
    elif _ONE_DAY.search(text):
        result = replace(
            result,
            contract_type="one_day",
            service_scope="event_based",
            auto_generate_shifts=False,
            is_renewable=False,
        )
    elif _WEEKLY.search(text):
        result = replace(result, contract_type="weekly", is_renewable=False)

    if _AUTO_RENEWAL.search(text):
        result = replace(result, auto_renewal=True)

    if _EVENT_SCOPE.search(text):
        result = replace(result, service_scope="event_based")

    if result != baseline:
        LOGGER.debug(
            "Keyword cues overrode date-based classification",
            extra={"baseline": baseline.contract_type, "final": result.contract_type},
        )
    return result


def classify_contract(text: str, start: Optional[date], end: Optional[date]) -> ContractClassification:
    """Classify a contract from its dates and wording.

    Args:
        text: Full document text
        start: Contract start date
        end: Contract end date

    Returns:
        Final classification
    """
    return apply_keyword_overrides(text, classify_by_dates(start, end))
