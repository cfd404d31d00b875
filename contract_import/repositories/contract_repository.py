"""Repositories for contracts and the records hanging off them."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_import.database.models import (
    Contract,
    ContractShiftSchedule,
    ContractWorkingConditions,
)
from contract_import.repositories.base_repository import BaseRepository
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ContractRepository(BaseRepository[Contract]):
    """Repository for Contract model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Contract)

    async def get_by_contract_number(self, contract_number: str) -> Optional[Contract]:
        """Get a contract by its business number.

        Args:
            contract_number: Contract number as printed on the document

        Returns:
            Contract if found, None otherwise
        """
        try:
            query = select(Contract).where(Contract.contract_number == contract_number)
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            LOGGER.error(f"Error getting contract by number: {e}", exc_info=True)
            raise


class ContractShiftScheduleRepository(BaseRepository[ContractShiftSchedule]):
    """Repository for ContractShiftSchedule model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContractShiftSchedule)


class ContractWorkingConditionsRepository(BaseRepository[ContractWorkingConditions]):
    """Repository for ContractWorkingConditions model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContractWorkingConditions)
