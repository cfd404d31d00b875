"""Completeness score of an extraction."""

from datetime import date
from typing import Optional

CONTRACT_NUMBER_WEIGHT = 15
CUSTOMER_NAME_WEIGHT = 20
START_DATE_WEIGHT = 15
END_DATE_WEIGHT = 15
GUARDS_WEIGHT = 20
SCHEDULES_WEIGHT = 15
MAX_SCORE = 100


def confidence_score(
    contract_number: Optional[str],
    customer_name: Optional[str],
    start_date: Optional[date],
    end_date: Optional[date],
    guards_required: int,
    schedule_count: int,
) -> int:
    """Score how much of the contract was extracted, from 0 to 100.

    Args:
        contract_number: Extracted contract number (generated numbers do not count)
        customer_name: Extracted customer name
        start_date: Extracted start date (defaulted dates do not count)
        end_date: Extracted end date
        guards_required: Extracted guard count
        schedule_count: Number of shift schedules extracted

    Returns:
        Additive score capped at 100
    """
    score = 0
    if contract_number:
        score += CONTRACT_NUMBER_WEIGHT
    if customer_name:
        score += CUSTOMER_NAME_WEIGHT
    if start_date is not None:
        score += START_DATE_WEIGHT
    if end_date is not None:
        score += END_DATE_WEIGHT
    if guards_required > 0:
        score += GUARDS_WEIGHT
    if schedule_count > 0:
        score += SCHEDULES_WEIGHT
    return min(score, MAX_SCORE)
