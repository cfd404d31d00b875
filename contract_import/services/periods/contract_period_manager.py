"""Versioned contract period history.

A contract has either no period yet or exactly one current period. The
first write creates period 1 (``initial``). A renewal closes the current
period and appends ``previous + 1`` (``renewal``). Any other write with new
dates corrects the current period in place; identical dates are a no-op.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from contract_import.database.models import ContractPeriod
from contract_import.repositories.contract_period_repository import ContractPeriodRepository
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

INITIAL = "initial"
RENEWAL = "renewal"


def _period_notes(duration: Optional[str], default: str) -> str:
    return f"Thời hạn: {duration}" if duration else default


class ContractPeriodManager:
    """Creates, renews and corrects contract periods.

    Args:
        repository: Period repository bound to the caller's session
    """

    def __init__(self, repository: ContractPeriodRepository):
        self.repository = repository

    @staticmethod
    def _current(periods: List[ContractPeriod]) -> Optional[ContractPeriod]:
        """The current period, falling back to the highest numbered one."""
        for period in periods:
            if period.is_current:
                return period
        return max(periods, key=lambda p: p.period_number) if periods else None

    async def create_or_update(
        self,
        contract_id: UUID,
        start_date: Optional[date],
        end_date: Optional[date],
        duration: Optional[str] = None,
        is_renewal: bool = False,
    ) -> Optional[ContractPeriod]:
        """Record a contract's dates in its period history.

        Args:
            contract_id: Contract the period belongs to
            start_date: Period start
            end_date: Period end
            duration: Duration wording from the document, kept in the notes
            is_renewal: Append a renewal period instead of correcting the current one

        Returns:
            The created or updated period; None when dates are missing
        """
        if start_date is None or end_date is None:
            LOGGER.warning(
                "Missing period dates, skipping period write",
                extra={"contract_id": str(contract_id)},
            )
            return None

        periods = await self.repository.get_by_contract(contract_id)
        current = self._current(periods)

        if current is None:
            period = await self.repository.create(
                contract_id=contract_id,
                period_number=1,
                period_type=INITIAL,
                period_start_date=start_date,
                period_end_date=end_date,
                is_current=True,
                notes=_period_notes(duration, "Initial contract period"),
            )
            LOGGER.info(
                "Created initial contract period",
                extra={"contract_id": str(contract_id), "period_number": 1},
            )
            return period

        if is_renewal:
            next_number = max(p.period_number for p in periods) + 1
            for period in periods:
                if period.is_current:
                    await self.repository.apply_updates(period, {"is_current": False})
            period = await self.repository.create(
                contract_id=contract_id,
                period_number=next_number,
                period_type=RENEWAL,
                period_start_date=start_date,
                period_end_date=end_date,
                is_current=True,
                notes=_period_notes(duration, f"Renewal {next_number - 1}"),
            )
            LOGGER.info(
                "Created renewal contract period",
                extra={"contract_id": str(contract_id), "period_number": next_number},
            )
            return period

        if current.period_start_date == start_date and current.period_end_date == end_date:
            LOGGER.info(
                "Contract period unchanged",
                extra={"contract_id": str(contract_id), "period_number": current.period_number},
            )
            return current

        await self.repository.apply_updates(
            current, {"period_start_date": start_date, "period_end_date": end_date}
        )
        LOGGER.info(
            "Corrected current contract period",
            extra={"contract_id": str(contract_id), "period_number": current.period_number},
        )
        return current

    async def renew(
        self,
        contract_id: UUID,
        start_date: date,
        end_date: date,
        duration: Optional[str] = None,
    ) -> Optional[ContractPeriod]:
        """Append a renewal period and make it current."""
        return await self.create_or_update(
            contract_id, start_date, end_date, duration=duration, is_renewal=True
        )
