"""Unit tests for the contract import pipeline."""

from datetime import date
from decimal import Decimal
from io import BytesIO
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from contract_import.core.exceptions import (
    ConfigurationError,
    ExtractionFailureError,
    NotificationError,
    StorageError,
    ValidationError,
)
from contract_import.database.models import (
    Contract,
    ContractLocation,
    ContractPeriod,
    ContractShiftSchedule,
    ContractWorkingConditions,
    Customer,
    CustomerLocation,
    CustomerSyncLog,
)
from contract_import.services.clients.identity_client import CreateUserResponse
from contract_import.services.contract_import_service import ContractImportService, add_months
from contract_import.services.decoding.document_decoder import DecoderRegistry


class StaticDecoder:
    """Decoder double returning fixed text."""

    def __init__(self, text):
        self.text = text
        self.received = None

    def decode(self, content):
        self.received = content
        return self.text


def _added(session, model):
    return [c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], model)]


def _without(text, *fragments):
    for fragment in fragments:
        assert fragment in text
        text = text.replace(fragment, "")
    return text


@pytest.fixture
def make_service(mock_session, fake_geocoder, fake_identity_client, fake_notifier):
    def _make(text=None, storage=None):
        decoders = DecoderRegistry(decoders={".docx": StaticDecoder(text), ".pdf": StaticDecoder(text)})
        return ContractImportService(
            mock_session,
            geocoder=fake_geocoder,
            identity_client=fake_identity_client,
            notifier=fake_notifier,
            decoders=decoders,
            storage=storage or MagicMock(),
        )

    return _make


class TestRoundTrip:
    """A complete document produces the whole record graph."""

    @pytest.mark.asyncio
    async def test_success_result(self, make_service, sample_contract_text, mock_session):
        result = await make_service().import_text(sample_contract_text)

        assert result.success is True
        assert result.error_message is None
        assert result.contract_number == "001/2025/HĐDV-BV/HCM/ABC"
        assert result.customer_name == "CÔNG TY TNHH THƯƠNG MẠI ABC"
        assert result.schedules_created == 2
        assert result.locations_created == 1
        assert result.confidence_score == 100
        assert result.warnings == []
        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_records_written(self, make_service, sample_contract_text, mock_session, fake_identity_client):
        result = await make_service().import_text(sample_contract_text)

        [customer] = _added(mock_session, Customer)
        assert customer.id == result.customer_id
        assert customer.phone == "+842838234567"
        assert customer.tax_code == "0312345678"
        assert customer.user_id == fake_identity_client.create_user.return_value.user_id
        assert customer.customer_code.startswith(f"CUST-{date.today():%Y%m%d}-")

        [sync_log] = _added(mock_session, CustomerSyncLog)
        assert sync_log.customer_id == customer.id
        assert sync_log.sync_type == "CREATE"

        [contract] = _added(mock_session, Contract)
        assert contract.id == result.contract_id
        assert contract.status == "draft"
        assert contract.contract_type == "long_term"
        assert contract.contract_title == "Hợp đồng bảo vệ - CÔNG TY TNHH THƯƠNG MẠI ABC"
        assert contract.work_on_public_holidays is True

        [period] = _added(mock_session, ContractPeriod)
        assert period.period_number == 1
        assert period.period_start_date == date(2025, 1, 1)
        assert period.notes == "Thời hạn: 12 tháng"

        [working_conditions] = _added(mock_session, ContractWorkingConditions)
        assert working_conditions.contract_id == contract.id
        assert working_conditions.standard_hours_per_day == 8
        assert working_conditions.general_notes == "Imported from contract document 001/2025/HĐDV-BV/HCM/ABC"

    @pytest.mark.asyncio
    async def test_location_and_schedules(self, make_service, sample_contract_text, mock_session, fake_geocoder):
        result = await make_service().import_text(sample_contract_text)

        [location] = _added(mock_session, CustomerLocation)
        assert result.location_ids == [location.id]
        assert location.location_name == "Tòa nhà ABC Tower"
        assert location.minimum_guards_required == 3
        assert location.district == "Quận 7"
        assert location.latitude == Decimal("10.7290000")
        assert location.requires_24h_coverage is True
        fake_geocoder.resolve.assert_awaited_once_with(
            "123 Nguyễn Văn Linh, Phường Tân Phong, Quận 7, TP. Hồ Chí Minh"
        )

        [link] = _added(mock_session, ContractLocation)
        assert link.location_id == location.id
        assert link.guards_required == 3
        assert link.is_primary_location is True

        schedules = _added(mock_session, ContractShiftSchedule)
        assert [s.schedule_name for s in schedules] == ["Ca sáng", "Ca đêm"]
        night = schedules[1]
        assert night.crosses_midnight is True
        assert night.duration_hours == Decimal("8.00")
        assert night.location_id == location.id
        assert night.guards_per_shift == 3
        assert night.applies_saturday is True
        assert night.applies_on_public_holidays is True
        assert night.effective_to == date(2025, 12, 31)

    @pytest.mark.asyncio
    async def test_login_email_sent_after_commit(
        self, make_service, sample_contract_text, mock_session, fake_identity_client, fake_notifier
    ):
        await make_service().import_text(sample_contract_text)

        request = fake_identity_client.create_user.await_args.args[0]
        assert request.email == "ketoan@abc.com.vn"
        assert request.full_name == "Nguyễn Văn An"
        fake_notifier.send_login_credentials.assert_awaited_once()
        sent = fake_notifier.send_login_credentials.await_args.kwargs
        assert sent["email"] == "ketoan@abc.com.vn"
        assert sent["password"] == request.password
        assert sent["contract_number"] == "001/2025/HĐDV-BV/HCM/ABC"


class TestHardFailures:
    """Failures that abort the import."""

    @pytest.mark.asyncio
    async def test_missing_customer_name_writes_nothing(
        self, make_service, mock_session, fake_identity_client, fake_geocoder
    ):
        text = "HỢP ĐỒNG DỊCH VỤ\nSố HĐ: HD-2025-01\nSố lượng bảo vệ: 2\n"

        result = await make_service().import_text(text)

        assert result.success is False
        assert "Customer name" in result.error_message
        assert result.raw_text == text
        assert result.contract_number == "HD-2025-01"
        mock_session.add.assert_not_called()
        mock_session.commit.assert_not_awaited()
        fake_identity_client.create_user.assert_not_awaited()
        fake_geocoder.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_text(self, make_service, mock_session):
        result = await make_service().import_text("  \n ")
        assert result.success is False
        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_persistence_error_rolls_back(
        self, make_service, sample_contract_text, mock_session, fake_notifier
    ):
        service = make_service()
        service.schedules.create = AsyncMock(side_effect=SQLAlchemyError("constraint violated"))

        result = await service.import_text(sample_contract_text)

        assert result.success is False
        assert "constraint violated" in result.error_message
        assert result.contract_id is None
        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()
        fake_notifier.send_login_credentials.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_contract_number_rolls_back(self, make_service, sample_contract_text, mock_session):
        mock_session.execute.return_value.scalar_one_or_none.return_value = Contract(contract_number="dup")

        result = await make_service().import_text(sample_contract_text)

        assert result.success is False
        assert "already exists" in result.error_message
        assert _added(mock_session, Contract) == []
        mock_session.rollback.assert_awaited_once()


class TestSoftFailures:
    """Problems that only produce warnings."""

    @pytest.mark.asyncio
    async def test_geocoding_miss(self, make_service, sample_contract_text, mock_session, fake_geocoder):
        fake_geocoder.resolve.return_value = None

        result = await make_service().import_text(sample_contract_text)

        assert result.success is True
        [location] = _added(mock_session, CustomerLocation)
        assert location.latitude is None
        assert location.longitude is None
        assert any("coordinates" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_email_failure_keeps_committed_import(
        self, make_service, sample_contract_text, mock_session, fake_notifier
    ):
        fake_notifier.send_login_credentials.side_effect = NotificationError("mail service down")

        result = await make_service().import_text(sample_contract_text)

        assert result.success is True
        mock_session.commit.assert_awaited_once()
        assert any("mail service down" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_provisioning_rejected(
        self, make_service, sample_contract_text, mock_session, fake_identity_client, fake_notifier
    ):
        fake_identity_client.create_user.return_value = CreateUserResponse(
            success=False, error_message="Email already registered"
        )

        result = await make_service().import_text(sample_contract_text)

        assert result.success is True
        [customer] = _added(mock_session, Customer)
        assert customer.user_id is None
        assert _added(mock_session, CustomerSyncLog) == []
        fake_notifier.send_login_credentials.assert_not_awaited()
        assert any("Email already registered" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_no_email_skips_provisioning(
        self, make_service, sample_contract_text, fake_identity_client
    ):
        text = _without(sample_contract_text, "Email: ketoan@abc.com.vn\n")

        result = await make_service().import_text(text)

        assert result.success is True
        fake_identity_client.create_user.assert_not_awaited()
        assert any("No customer email" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_defaults_for_number_and_dates(self, make_service, sample_contract_text, mock_session):
        text = _without(
            sample_contract_text,
            "Hợp đồng số: 001/2025/HĐDV-BV/HCM/ABC\n",
            "Hợp đồng có hiệu lực từ ngày 01/01/2025 đến hết ngày 31/12/2025.\n",
        )

        result = await make_service().import_text(text)

        assert result.success is True
        assert result.contract_number.startswith(f"CTR-{date.today():%Y%m%d}-")
        assert result.confidence_score == 55
        [contract] = _added(mock_session, Contract)
        assert contract.start_date == date.today()
        assert contract.end_date == add_months(date.today(), 12)
        assert contract.duration_months == 12
        assert any("Contract number not found" in w for w in result.warnings)
        assert any("Contract dates not found" in w for w in result.warnings)

    @pytest.mark.asyncio
    async def test_no_guard_count_skips_location(
        self, make_service, sample_contract_text, mock_session, fake_geocoder
    ):
        text = _without(sample_contract_text, "Số lượng bảo vệ: 3 người\n")

        result = await make_service().import_text(text)

        assert result.success is True
        assert result.locations_created == 0
        assert _added(mock_session, CustomerLocation) == []
        fake_geocoder.resolve.assert_not_awaited()
        schedules = _added(mock_session, ContractShiftSchedule)
        assert len(schedules) == 2
        assert all(s.location_id is None for s in schedules)


class TestEntryPoints:
    """File and storage entry points."""

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, make_service, mock_session):
        result = await make_service("ignored").import_document("contract.txt", b"data")

        assert result.success is False
        assert "Unsupported file format" in result.error_message
        mock_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stream_content_is_read(self, make_service, sample_contract_text):
        service = make_service(sample_contract_text)

        result = await service.import_document("HopDong.DOCX", BytesIO(b"docx-bytes"))

        assert result.success is True
        assert service.decoders.decoder_for("x.docx").received == b"docx-bytes"

    @pytest.mark.asyncio
    async def test_import_from_storage(self, make_service, sample_contract_text):
        storage = MagicMock()
        storage.download_file = AsyncMock(return_value=b"pdf-bytes")
        service = make_service(sample_contract_text, storage=storage)

        result = await service.import_from_storage("2025/01/hop-dong.pdf")

        assert result.success is True
        storage.download_file.assert_awaited_once_with("2025/01/hop-dong.pdf", bucket=None)

    @pytest.mark.asyncio
    async def test_storage_failure(self, make_service):
        storage = MagicMock()
        storage.download_file = AsyncMock(side_effect=StorageError("Download failed: not found"))

        result = await make_service("text", storage=storage).import_from_storage("missing.pdf")

        assert result.success is False
        assert result.error_message == "Download failed: not found"

    @pytest.mark.asyncio
    async def test_storage_not_configured(self, make_service):
        storage = MagicMock()
        storage.download_file = AsyncMock(side_effect=ConfigurationError("STORAGE_URL is not configured"))

        result = await make_service("text", storage=storage).import_from_storage("a.pdf")

        assert result.success is False
        assert result.error_message == "STORAGE_URL is not configured"

    @pytest.mark.asyncio
    async def test_decoding_goes_through_registry(self, make_service, sample_contract_text):
        service = make_service(sample_contract_text)
        service.decoders = MagicMock(wraps=service.decoders)

        result = await service.import_document("hop-dong.pdf", b"pdf-bytes")

        assert result.success is True
        service.decoders.decode.assert_called_once_with("hop-dong.pdf", b"pdf-bytes")

    @pytest.mark.asyncio
    async def test_unreadable_file(self, make_service, mock_session):
        service = make_service()
        broken = MagicMock()
        broken.decode.side_effect = ExtractionFailureError("Cannot open PDF document: EOF marker not found")
        service.decoders = DecoderRegistry(decoders={".pdf": broken})

        result = await service.import_document("scan.pdf", b"\x00")

        assert result.success is False
        assert result.error_message == "Cannot open PDF document: EOF marker not found"
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_execute_rejects_blank_file_name(self, make_service):
        with pytest.raises(ValidationError):
            await make_service().execute("", b"data")


def test_add_months_clamps_to_month_end():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
