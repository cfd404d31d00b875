"""Result of importing one contract document."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ImportResult(BaseModel):
    """Outcome of a contract import.

    On failure ``error_message`` is set and no ids are present; warnings and
    whatever was extracted are still returned so a reviewer can finish the
    record by hand.
    """

    success: bool
    error_message: Optional[str] = None
    contract_id: Optional[UUID] = None
    customer_id: Optional[UUID] = None
    location_ids: List[UUID] = Field(default_factory=list)
    shift_schedule_ids: List[UUID] = Field(default_factory=list)
    contract_number: Optional[str] = None
    customer_name: Optional[str] = None
    locations_created: int = 0
    schedules_created: int = 0
    raw_text: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    confidence_score: int = Field(default=0, ge=0, le=100)

    @classmethod
    def failure(
        cls,
        error_message: str,
        warnings: Optional[List[str]] = None,
        raw_text: Optional[str] = None,
        contract_number: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> "ImportResult":
        return cls(
            success=False,
            error_message=error_message,
            warnings=list(warnings or []),
            raw_text=raw_text,
            contract_number=contract_number,
            customer_name=customer_name,
        )
