"""Repositories for guarded locations and their contract links."""

from sqlalchemy.ext.asyncio import AsyncSession

from contract_import.database.models import ContractLocation, CustomerLocation
from contract_import.repositories.base_repository import BaseRepository


class CustomerLocationRepository(BaseRepository[CustomerLocation]):
    """Repository for CustomerLocation model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, CustomerLocation)


class ContractLocationRepository(BaseRepository[ContractLocation]):
    """Repository for ContractLocation model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ContractLocation)
