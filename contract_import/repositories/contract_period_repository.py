"""Repository for the contract period history."""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from contract_import.database.models import ContractPeriod
from contract_import.repositories.base_repository import BaseRepository


class ContractPeriodRepository(BaseRepository[ContractPeriod]):
    """Repository for ContractPeriod model.

    Rows are only ever appended or have their dates/current flag updated;
    nothing here deletes a period.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContractPeriod)

    async def get_by_contract(self, contract_id: UUID) -> List[ContractPeriod]:
        """Get every period of a contract, newest first.

        Args:
            contract_id: Contract UUID

        Returns:
            Periods ordered by descending period number
        """
        return await self.list_by(
            order_by=ContractPeriod.period_number.desc(), contract_id=contract_id
        )
