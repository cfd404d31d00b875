"""Repositories for customers and their account-sync audit log."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_import.database.models import Customer, CustomerSyncLog
from contract_import.repositories.base_repository import BaseRepository
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)


class CustomerRepository(BaseRepository[Customer]):
    """Repository for Customer model.

    Lookups ignore soft-deleted customers.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, Customer)

    async def get_by_user_id(self, user_id: UUID) -> Optional[Customer]:
        """Get the customer linked to a login account.

        Args:
            user_id: Identity service user id

        Returns:
            Customer if found, None otherwise
        """
        try:
            query = select(Customer).where(
                and_(Customer.user_id == user_id, Customer.is_deleted.is_(False))
            )
            result = await self.session.execute(query)
            return result.scalars().first()
        except SQLAlchemyError as e:
            LOGGER.error(f"Error getting customer by user id: {e}", exc_info=True)
            raise

    async def get_by_company_name(self, company_name: str) -> Optional[Customer]:
        """Get a customer by exact company name.

        Args:
            company_name: Company name as extracted from the contract

        Returns:
            Customer if found, None otherwise
        """
        try:
            query = select(Customer).where(
                and_(Customer.company_name == company_name, Customer.is_deleted.is_(False))
            )
            result = await self.session.execute(query)
            return result.scalars().first()
        except SQLAlchemyError as e:
            LOGGER.error(f"Error getting customer by name: {e}", exc_info=True)
            raise

    async def link_user(self, customer: Customer, user_id: UUID) -> Customer:
        """Attach a login account to an existing customer."""
        return await self.apply_updates(
            customer, {"user_id": user_id, "updated_at": datetime.now(timezone.utc)}
        )


class CustomerSyncLogRepository(BaseRepository[CustomerSyncLog]):
    """Repository for CustomerSyncLog model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, CustomerSyncLog)

    async def log_created(
        self,
        user_id: UUID,
        customer_id: UUID,
        new_values: Dict[str, Any],
        initiated_by: str,
    ) -> CustomerSyncLog:
        """Record that a customer was created for a login account.

        Args:
            user_id: Identity service user id
            customer_id: Linked customer
            new_values: Customer fields as written
            initiated_by: Workflow that triggered the sync

        Returns:
            The created log entry
        """
        now = datetime.now(timezone.utc)
        fields_changed: List[str] = list(new_values.keys())
        return await self.create(
            user_id=user_id,
            customer_id=customer_id,
            sync_type="CREATE",
            sync_status="SUCCESS",
            fields_changed=fields_changed,
            new_values=new_values,
            sync_initiated_by=initiated_by,
            retry_count=0,
            sync_started_at=now,
            sync_completed_at=now,
        )
