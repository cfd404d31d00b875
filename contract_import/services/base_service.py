import time
from abc import ABC, abstractmethod
from typing import Any

from contract_import.core.exceptions import AppError
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for application services.

    ``execute`` validates the input, runs the service and times it. Business
    outcomes are returned by ``run``; only unexpected exceptions escape, and
    those are wrapped in :class:`AppError`.
    """

    def __init__(self):
        self.logger = LOGGER

    @property
    def service_name(self) -> str:
        return self.__class__.__name__

    async def execute(self, *args, **kwargs) -> Any:
        """Validate the input, then run the service.

        Returns:
            Result of ``run``

        Raises:
            ValidationError: If ``validate`` rejects the input
            AppError: If execution fails unexpectedly
        """
        started = time.perf_counter()
        try:
            self.validate(*args, **kwargs)
            return await self.run(*args, **kwargs)
        except AppError:
            raise
        except Exception as e:
            self.logger.error(
                f"{self.service_name} failed: {str(e)}",
                exc_info=True,
                extra={"service": self.service_name}
            )
            raise AppError(f"Service execution failed: {str(e)}", original_error=e)
        finally:
            self.logger.info(
                f"{self.service_name} finished",
                extra={"service": self.service_name, "duration_seconds": round(time.perf_counter() - started, 3)},
            )

    def validate(self, *args, **kwargs):
        """Validate service input; override to reject bad calls.

        Raises:
            ValidationError: If input is invalid
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic."""
        pass
