"""Unit tests for contract period history."""

from datetime import date
from uuid import uuid4

import pytest

from contract_import.database.models import ContractPeriod
from contract_import.services.periods.contract_period_manager import ContractPeriodManager


class InMemoryPeriodRepository:
    """Period repository double keeping rows in a list."""

    def __init__(self):
        self.periods = []

    async def get_by_contract(self, contract_id):
        rows = [p for p in self.periods if p.contract_id == contract_id]
        return sorted(rows, key=lambda p: p.period_number, reverse=True)

    async def create(self, **kwargs):
        period = ContractPeriod(id=uuid4(), **kwargs)
        self.periods.append(period)
        return period

    async def apply_updates(self, instance, values):
        for key, value in values.items():
            setattr(instance, key, value)
        return instance


@pytest.fixture
def repository():
    return InMemoryPeriodRepository()


@pytest.fixture
def manager(repository):
    return ContractPeriodManager(repository)


class TestContractPeriodManager:
    """Tests for ContractPeriodManager."""

    @pytest.mark.asyncio
    async def test_first_write_creates_initial_period(self, manager, repository):
        contract_id = uuid4()

        period = await manager.create_or_update(contract_id, date(2025, 1, 1), date(2025, 12, 31))

        assert period.period_number == 1
        assert period.period_type == "initial"
        assert period.is_current is True
        assert period.notes == "Initial contract period"
        assert len(repository.periods) == 1

    @pytest.mark.asyncio
    async def test_duration_goes_into_notes(self, manager):
        period = await manager.create_or_update(
            uuid4(), date(2025, 1, 1), date(2025, 12, 31), duration="12 tháng"
        )
        assert period.notes == "Thời hạn: 12 tháng"

    @pytest.mark.asyncio
    async def test_renewals_append_and_move_current(self, manager, repository):
        contract_id = uuid4()
        await manager.create_or_update(contract_id, date(2025, 1, 1), date(2025, 12, 31))

        for year in (2026, 2027, 2028):
            await manager.renew(contract_id, date(year, 1, 1), date(year, 12, 31))

        periods = sorted(repository.periods, key=lambda p: p.period_number)
        assert [p.period_number for p in periods] == [1, 2, 3, 4]
        assert [p.period_type for p in periods] == ["initial", "renewal", "renewal", "renewal"]
        assert [p.is_current for p in periods] == [False, False, False, True]
        assert periods[-1].notes == "Renewal 3"
        assert periods[-1].period_start_date == date(2028, 1, 1)

    @pytest.mark.asyncio
    async def test_same_dates_is_a_no_op(self, manager, repository):
        contract_id = uuid4()
        first = await manager.create_or_update(contract_id, date(2025, 1, 1), date(2025, 12, 31))

        again = await manager.create_or_update(contract_id, date(2025, 1, 1), date(2025, 12, 31))

        assert again is first
        assert len(repository.periods) == 1

    @pytest.mark.asyncio
    async def test_new_dates_correct_current_period_in_place(self, manager, repository):
        contract_id = uuid4()
        await manager.create_or_update(contract_id, date(2025, 1, 1), date(2025, 12, 31))
        await manager.renew(contract_id, date(2026, 1, 1), date(2026, 12, 31))

        corrected = await manager.create_or_update(contract_id, date(2026, 2, 1), date(2027, 1, 31))

        assert corrected.period_number == 2
        assert corrected.period_start_date == date(2026, 2, 1)
        assert corrected.period_end_date == date(2027, 1, 31)
        assert len(repository.periods) == 2

    @pytest.mark.asyncio
    async def test_missing_dates_write_nothing(self, manager, repository):
        assert await manager.create_or_update(uuid4(), None, date(2025, 12, 31)) is None
        assert repository.periods == []
