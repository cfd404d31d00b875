import uuid
from typing import Any, Dict, Generic, List, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contract_import.utils.logging import get_logger

ModelType = TypeVar("ModelType")

LOGGER = get_logger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository implementing common persistence operations.

    Writes only ``add`` and ``flush``; committing is left to whoever opened
    the unit of work so a multi-entity import commits or rolls back as one.
    """

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session
            model: The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model
        self.logger = LOGGER

    async def list_by(self, order_by: Any = None, **filters: Any) -> List[ModelType]:
        """List records whose columns equal the given values.

        Args:
            order_by: Optional column expression to order by
            **filters: column_name=value pairs

        Returns:
            List of matching records
        """
        try:
            query = select(self.model)
            for field, value in filters.items():
                query = query.where(getattr(self.model, field) == value)
            if order_by is not None:
                query = query.order_by(order_by)
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error listing {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def create(self, **kwargs) -> ModelType:
        """Stage a new record in the current transaction.

        The primary key is assigned up front so callers can reference it
        before the surrounding transaction commits.

        Args:
            **kwargs: Fields and values for the new record

        Returns:
            The created record
        """
        try:
            kwargs.setdefault("id", uuid.uuid4())
            instance = self.model(**kwargs)
            self.session.add(instance)
            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error creating {self.model.__name__}: {str(e)}",
                exc_info=True
            )
            raise

    async def apply_updates(self, instance: ModelType, values: Dict[str, Any]) -> ModelType:
        """Set attributes on a loaded record and flush the change.

        Args:
            instance: Record previously loaded through this session
            values: Attribute name to new value

        Returns:
            The updated record
        """
        try:
            for key, value in values.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)
            await self.session.flush()
            return instance
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error updating {self.model.__name__} {getattr(instance, 'id', None)}: {str(e)}",
                exc_info=True
            )
            raise
