"""Contract document import.

An import runs in three stages with different failure policies:

1. Extraction (no writes): decode, extract fields, validate hard
   requirements, provision a login account and geocode the site. Hard
   failures return a failed result; everything else becomes a warning.
2. Persistence (one transaction): customer, sync log, contract, period,
   location and link, shift schedules, working conditions. Any exception
   rolls the whole graph back and fails the import.
3. Notification (after commit): the login email. Failures are warnings and
   never touch committed data.
"""

import calendar
import posixpath
import secrets
from dataclasses import dataclass
from datetime import date
from typing import BinaryIO, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from contract_import.core.config import ImportSettings, settings
from contract_import.core.database import async_session_maker
from contract_import.core.exceptions import (
    ConfigurationError,
    DocumentDecodingError,
    StorageError,
    ValidationError,
)
from contract_import.database.models import (
    Contract,
    ContractShiftSchedule,
    Customer,
    CustomerLocation,
)
from contract_import.repositories.contract_period_repository import ContractPeriodRepository
from contract_import.repositories.contract_repository import (
    ContractRepository,
    ContractShiftScheduleRepository,
    ContractWorkingConditionsRepository,
)
from contract_import.repositories.customer_repository import (
    CustomerRepository,
    CustomerSyncLogRepository,
)
from contract_import.repositories.location_repository import (
    ContractLocationRepository,
    CustomerLocationRepository,
)
from contract_import.schemas.import_result import ImportResult
from contract_import.services.base_service import BaseService
from contract_import.services.clients.identity_client import (
    IdentityProvisioningClient,
    generate_password,
)
from contract_import.services.clients.notification_client import NotificationClient
from contract_import.services.clients.storage_client import StorageClient
from contract_import.services.decoding.document_decoder import DecoderRegistry
from contract_import.services.extraction.confidence import confidence_score
from contract_import.services.extraction.contract_classifier import (
    ContractClassification,
    classify_contract,
)
from contract_import.services.extraction.field_extractor import extract_contract
from contract_import.services.extraction.models import ExtractionResult
from contract_import.services.geocoding.address_parser import parse_address
from contract_import.services.geocoding.resolver import Coordinates, GeocodingResolver
from contract_import.services.periods.contract_period_manager import ContractPeriodManager
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

SYNC_INITIATED_BY = "CONTRACT_IMPORT"


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_code(prefix: str, today: date) -> str:
    """Business code such as ``CTR-20250101-1A2B``."""
    return f"{prefix}-{today:%Y%m%d}-{secrets.token_hex(2).upper()}"


@dataclass(frozen=True)
class ContractPlan:
    """Extraction results with soft defaults applied, ready to persist."""

    contract_number: str
    start_date: date
    end_date: date
    classification: ContractClassification
    location_address: Optional[str]


@dataclass(frozen=True)
class ProvisionedAccount:
    """Login account created for the customer before the transaction."""

    user_id: UUID
    email: str
    password: str


@dataclass
class PersistedGraph:
    """Ids of the records written by one import."""

    customer_id: UUID
    contract_id: UUID
    location_ids: List[UUID]
    schedule_ids: List[UUID]


class ContractImportService(BaseService):
    """Imports a contract document into customer, contract and schedule records.

    Args:
        session: Session whose transaction this service commits or rolls back
        geocoder: Address resolver
        identity_client: Login-account provisioning client
        notifier: Email client
        decoders: File decoders by extension
        storage: Object storage client for imports by storage path
        config: Import defaults; the application settings by default
    """

    def __init__(
        self,
        session: AsyncSession,
        geocoder: Optional[GeocodingResolver] = None,
        identity_client: Optional[IdentityProvisioningClient] = None,
        notifier: Optional[NotificationClient] = None,
        decoders: Optional[DecoderRegistry] = None,
        storage: Optional[StorageClient] = None,
        config: Optional[ImportSettings] = None,
    ):
        super().__init__()
        self.session = session
        self.config = config or settings.imports
        self.geocoder = geocoder or GeocodingResolver()
        self.identity_client = identity_client or IdentityProvisioningClient()
        self.notifier = notifier or NotificationClient()
        self.decoders = decoders or DecoderRegistry(supported_extensions=self.config.supported_extensions)
        self.storage = storage or StorageClient()

        self.customers = CustomerRepository(session)
        self.sync_logs = CustomerSyncLogRepository(session)
        self.contracts = ContractRepository(session)
        self.locations = CustomerLocationRepository(session)
        self.contract_locations = ContractLocationRepository(session)
        self.schedules = ContractShiftScheduleRepository(session)
        self.working_conditions = ContractWorkingConditionsRepository(session)
        self.periods = ContractPeriodManager(ContractPeriodRepository(session))

    def validate(self, file_name: str, content, created_by: Optional[UUID] = None):
        if not file_name or not file_name.strip():
            raise ValidationError("File name is required")
        if content is None:
            raise ValidationError("Document content is required")

    async def run(self, file_name: str, content, created_by: Optional[UUID] = None) -> ImportResult:
        return await self.import_document(file_name, content, created_by)

    async def import_document(
        self,
        file_name: str,
        content: Union[bytes, BinaryIO],
        created_by: Optional[UUID] = None,
    ) -> ImportResult:
        """Import an uploaded contract file.

        Args:
            file_name: Original file name; its extension selects the decoder
            content: File bytes or a binary stream
            created_by: User who started the import

        Returns:
            ImportResult describing what was created
        """
        try:
            self.decoders.decoder_for(file_name)
        except DocumentDecodingError as e:
            LOGGER.warning(f"Rejected contract file: {e.message}", extra={"file_name": file_name})
            return ImportResult.failure(e.message)

        data = content.read() if hasattr(content, "read") else content
        try:
            text = self.decoders.decode(file_name, data)
        except DocumentDecodingError as e:
            LOGGER.error(f"Could not decode contract file: {e.message}", extra={"file_name": file_name})
            return ImportResult.failure(e.message)

        return await self.import_text(text, created_by)

    async def import_from_storage(
        self,
        storage_path: str,
        created_by: Optional[UUID] = None,
        bucket: Optional[str] = None,
    ) -> ImportResult:
        """Import a contract file that was already uploaded to object storage.

        Args:
            storage_path: Object path; its base name is used as the file name
            created_by: User who started the import
            bucket: Storage bucket; the configured one by default

        Returns:
            ImportResult describing what was created
        """
        file_name = posixpath.basename(storage_path)
        try:
            self.decoders.decoder_for(file_name)
        except DocumentDecodingError as e:
            return ImportResult.failure(e.message)

        try:
            content = await self.storage.download_file(storage_path, bucket=bucket)
        except (ConfigurationError, StorageError) as e:
            return ImportResult.failure(e.message)

        return await self.import_document(file_name, content, created_by)

    async def import_text(self, text: str, created_by: Optional[UUID] = None) -> ImportResult:
        """Import a contract from already decoded text.

        Args:
            text: Plain document text
            created_by: User who started the import

        Returns:
            ImportResult describing what was created
        """
        warnings: List[str] = []
        if not text or not text.strip():
            return ImportResult.failure("No text could be extracted from the document")

        # Stage 1: extraction, no writes
        extraction = extract_contract(text)
        if not extraction.customer_name:
            LOGGER.warning("Customer name not found, aborting import")
            return ImportResult.failure(
                "Customer name could not be extracted from the document",
                warnings=warnings,
                raw_text=text,
                contract_number=extraction.contract_number,
            )

        plan = self._plan(extraction, warnings)
        account = await self._provision_account(extraction, warnings)
        coordinates = None
        if extraction.guards_required > 0:
            coordinates = await self._geocode(plan.location_address, warnings)
        else:
            warnings.append("No guard count found in the document; no location was created")

        # Stage 2: one transaction
        try:
            graph = await self._persist(extraction, plan, account, coordinates, created_by, warnings)
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            LOGGER.error(
                f"Contract import rolled back: {str(e)}",
                exc_info=True,
                extra={"contract_number": plan.contract_number},
            )
            return ImportResult.failure(
                f"Contract import failed: {str(e)}",
                warnings=warnings,
                raw_text=text,
                contract_number=plan.contract_number,
                customer_name=extraction.customer_name,
            )

        # Stage 3: after commit, best effort
        if account is not None:
            await self._send_login_email(extraction.customer_name, account, plan.contract_number, warnings)

        score = confidence_score(
            contract_number=extraction.contract_number,
            customer_name=extraction.customer_name,
            start_date=extraction.start_date,
            end_date=extraction.end_date,
            guards_required=extraction.guards_required,
            schedule_count=len(graph.schedule_ids),
        )
        LOGGER.info(
            "Contract imported",
            extra={
                "contract_id": str(graph.contract_id),
                "contract_number": plan.contract_number,
                "confidence_score": score,
                "warning_count": len(warnings),
            },
        )
        return ImportResult(
            success=True,
            contract_id=graph.contract_id,
            customer_id=graph.customer_id,
            location_ids=graph.location_ids,
            shift_schedule_ids=graph.schedule_ids,
            contract_number=plan.contract_number,
            customer_name=extraction.customer_name,
            locations_created=len(graph.location_ids),
            schedules_created=len(graph.schedule_ids),
            raw_text=text,
            warnings=warnings,
            confidence_score=score,
        )

    def _plan(self, extraction: ExtractionResult, warnings: List[str]) -> ContractPlan:
        """Apply soft defaults for missing fields."""
        today = date.today()

        contract_number = extraction.contract_number
        if not contract_number:
            contract_number = generate_code("CTR", today)
            warnings.append(f"Contract number not found; generated {contract_number}")

        start_date, end_date = extraction.start_date, extraction.end_date
        if start_date is None or end_date is None:
            start_date = start_date or today
            end_date = end_date or add_months(start_date, self.config.default_duration_months)
            warnings.append(
                f"Contract dates not found; using {start_date:%d/%m/%Y} to {end_date:%d/%m/%Y}"
            )

        return ContractPlan(
            contract_number=contract_number,
            start_date=start_date,
            end_date=end_date,
            classification=classify_contract(extraction.raw_text, extraction.start_date, extraction.end_date),
            location_address=extraction.location.address or extraction.customer_address,
        )

    async def _provision_account(
        self, extraction: ExtractionResult, warnings: List[str]
    ) -> Optional[ProvisionedAccount]:
        if not extraction.customer_email:
            warnings.append("No customer email found; login account was not created")
            return None

        password = generate_password()
        request = self.identity_client.build_request(
            email=extraction.customer_email,
            password=password,
            full_name=extraction.contact_person_name or extraction.customer_name,
            phone=extraction.customer_phone,
            address=extraction.customer_address,
        )
        try:
            response = await self.identity_client.create_user(request)
        except Exception as e:
            LOGGER.warning(
                f"Login account provisioning failed: {str(e)}",
                extra={"email": extraction.customer_email},
            )
            warnings.append(f"Login account could not be created: {str(e)}")
            return None

        if not response.success or response.user_id is None:
            reason = response.error_message or "identity service returned no user id"
            warnings.append(f"Login account could not be created: {reason}")
            return None

        LOGGER.info("Login account provisioned", extra={"user_id": str(response.user_id)})
        return ProvisionedAccount(user_id=response.user_id, email=extraction.customer_email, password=password)

    async def _geocode(self, address: Optional[str], warnings: List[str]) -> Optional[Coordinates]:
        if not address:
            warnings.append("No location address found; coordinates were not resolved")
            return None
        try:
            coordinates = await self.geocoder.resolve(address)
        except Exception as e:
            LOGGER.warning(f"Geocoding raised: {str(e)}", extra={"address": address})
            warnings.append(f"Could not resolve coordinates for '{address}': {str(e)}")
            return None
        if coordinates is None:
            warnings.append(f"Could not resolve coordinates for '{address}'")
        return coordinates

    async def _find_or_create_customer(
        self, extraction: ExtractionResult, user_id: Optional[UUID]
    ) -> Tuple[Customer, bool]:
        """Return the customer and whether a new account link was made."""
        customer = None
        if user_id is not None:
            customer = await self.customers.get_by_user_id(user_id)
            if customer is not None:
                return customer, False

        customer = await self.customers.get_by_company_name(extraction.customer_name)
        if customer is not None:
            if customer.user_id is None and user_id is not None:
                await self.customers.link_user(customer, user_id)
                return customer, True
            return customer, False

        customer = await self.customers.create(
            customer_code=generate_code("CUST", date.today()),
            company_name=extraction.customer_name,
            contact_person_name=extraction.contact_person_name,
            contact_person_title=extraction.contact_person_title,
            address=extraction.customer_address,
            phone=extraction.customer_phone,
            email=extraction.customer_email,
            tax_code=extraction.tax_code,
            user_id=user_id,
            status="active",
            customer_since=date.today(),
            is_deleted=False,
        )
        return customer, user_id is not None

    async def _persist(
        self,
        extraction: ExtractionResult,
        plan: ContractPlan,
        account: Optional[ProvisionedAccount],
        coordinates: Optional[Coordinates],
        created_by: Optional[UUID],
        warnings: List[str],
    ) -> PersistedGraph:
        user_id = account.user_id if account is not None else None
        customer, linked = await self._find_or_create_customer(extraction, user_id)
        if linked:
            await self.sync_logs.log_created(
                user_id=user_id,
                customer_id=customer.id,
                new_values={
                    "company_name": customer.company_name,
                    "address": customer.address,
                    "phone": customer.phone,
                    "email": customer.email,
                    "contact_person_name": customer.contact_person_name,
                    "contact_person_title": customer.contact_person_title,
                },
                initiated_by=SYNC_INITIATED_BY,
            )

        if await self.contracts.get_by_contract_number(plan.contract_number) is not None:
            raise ValidationError(f"Contract number {plan.contract_number} already exists")

        contract = await self._create_contract(extraction, plan, customer, created_by)

        await self.periods.create_or_update(
            contract.id,
            extraction.period.start_date or plan.start_date,
            extraction.period.end_date or plan.end_date,
            duration=extraction.period.duration,
        )

        location = None
        if extraction.guards_required > 0:
            location = await self._create_location(extraction, plan, customer, contract, coordinates)

        schedule_ids = []
        for shift in extraction.complete_shifts:
            schedule = await self._create_schedule(extraction, plan, contract, location, shift, created_by)
            schedule_ids.append(schedule.id)
        if not schedule_ids:
            warnings.append("No shift schedules found in the document")

        await self._create_working_conditions(extraction, plan, contract, created_by)

        return PersistedGraph(
            customer_id=customer.id,
            contract_id=contract.id,
            location_ids=[location.id] if location is not None else [],
            schedule_ids=schedule_ids,
        )

    async def _create_contract(
        self,
        extraction: ExtractionResult,
        plan: ContractPlan,
        customer: Customer,
        created_by: Optional[UUID],
    ) -> Contract:
        classification = plan.classification
        return await self.contracts.create(
            customer_id=customer.id,
            contract_number=plan.contract_number,
            contract_title=f"Hợp đồng bảo vệ - {extraction.customer_name}",
            contract_type=classification.contract_type,
            service_scope=classification.service_scope,
            start_date=plan.start_date,
            end_date=plan.end_date,
            duration_months=classification.duration_months,
            coverage_model="fixed_schedule",
            follows_customer_calendar=True,
            work_on_public_holidays=bool(extraction.works_on_holidays),
            work_on_customer_closed_days=bool(extraction.working_conditions.work_when_customer_closed),
            auto_generate_shifts=classification.auto_generate_shifts,
            generate_shifts_advance_days=classification.generate_advance_days,
            is_renewable=classification.is_renewable,
            auto_renewal=classification.auto_renewal,
            renewal_notice_days=self.config.renewal_notice_days,
            renewal_count=0,
            status="draft",
            created_by=created_by,
        )

    async def _create_location(
        self,
        extraction: ExtractionResult,
        plan: ContractPlan,
        customer: Customer,
        contract: Contract,
        coordinates: Optional[Coordinates],
    ) -> CustomerLocation:
        coverage_type = extraction.coverage_type or self.config.default_coverage_type
        parsed = parse_address(plan.location_address) if plan.location_address else None
        location = await self.locations.create(
            customer_id=customer.id,
            location_code=f"LOC-{date.today():%Y%m%d}-001",
            location_name=extraction.location.name or f"Địa điểm mặc định - {extraction.customer_name}",
            location_type="office",
            address=plan.location_address,
            ward=parsed.ward if parsed else None,
            district=parsed.district if parsed else None,
            city=parsed.city if parsed else None,
            latitude=coordinates.latitude if coordinates else None,
            longitude=coordinates.longitude if coordinates else None,
            geofence_radius_meters=self.config.geofence_radius_meters,
            minimum_guards_required=extraction.guards_required,
            requires_24h_coverage=coverage_type == "24x7",
            is_active=True,
        )
        await self.contract_locations.create(
            contract_id=contract.id,
            location_id=location.id,
            guards_required=extraction.guards_required,
            coverage_type=coverage_type,
            service_start_date=plan.start_date,
            service_end_date=plan.end_date,
            is_primary_location=True,
            priority_level=1,
            auto_generate_shifts=plan.classification.auto_generate_shifts,
            is_active=True,
        )
        return location

    async def _create_schedule(
        self,
        extraction: ExtractionResult,
        plan: ContractPlan,
        contract: Contract,
        location: Optional[CustomerLocation],
        shift,
        created_by: Optional[UUID],
    ) -> ContractShiftSchedule:
        works_weekends = bool(extraction.works_on_weekends)
        return await self.schedules.create(
            contract_id=contract.id,
            location_id=location.id if location is not None else None,
            schedule_name=shift.name,
            schedule_type="regular",
            shift_start_time=shift.start_time,
            shift_end_time=shift.end_time,
            crosses_midnight=shift.crosses_midnight,
            duration_hours=shift.duration_hours,
            break_minutes=self.config.shift_break_minutes,
            guards_per_shift=max(extraction.guards_required, 1),
            recurrence_type="weekly",
            applies_monday=True,
            applies_tuesday=True,
            applies_wednesday=True,
            applies_thursday=True,
            applies_friday=True,
            applies_saturday=works_weekends,
            applies_sunday=works_weekends,
            applies_on_public_holidays=bool(extraction.works_on_holidays),
            auto_generate_enabled=plan.classification.auto_generate_shifts,
            effective_from=plan.start_date,
            effective_to=plan.end_date,
            is_active=True,
            created_by=created_by,
        )

    async def _create_working_conditions(
        self,
        extraction: ExtractionResult,
        plan: ContractPlan,
        contract: Contract,
        created_by: Optional[UUID],
    ) -> None:
        wc = extraction.working_conditions
        await self.working_conditions.create(
            contract_id=contract.id,
            standard_hours_per_day=8,
            standard_hours_per_week=40,
            standard_hours_per_month=160,
            allow_overtime=wc.allows_overtime,
            max_overtime_hours_per_day=wc.max_overtime_hours_per_day,
            max_overtime_hours_per_month=wc.max_overtime_hours_per_month,
            max_overtime_hours_per_year=wc.max_overtime_hours_per_year,
            overtime_rate_weekday=wc.overtime_rate_weekday,
            overtime_rate_weekend=wc.overtime_rate_weekend,
            overtime_rate_holiday=wc.overtime_rate_holiday,
            require_overtime_approval=wc.requires_overtime_approval,
            allow_compensatory_time_off=wc.allows_compensatory_time_off,
            compensatory_time_off_ratio=wc.compensatory_time_off_ratio,
            max_compensatory_days_per_month=wc.max_compensatory_days_per_month,
            public_holiday_rate=wc.public_holiday_rate,
            holiday_compensation_day=wc.holiday_compensation_day,
            weekend_rate=wc.weekend_rate,
            saturday_rate=wc.saturday_rate,
            sunday_rate=wc.sunday_rate,
            saturday_as_regular_workday=wc.saturday_as_regular_workday,
            holiday_weekend_calculation_method=wc.holiday_weekend_calculation_method,
            night_shift_rate=wc.night_shift_rate,
            night_shift_start_time=wc.night_shift_start_time,
            night_shift_end_time=wc.night_shift_end_time,
            minimum_night_shift_hours=2,
            night_shift_allowance=wc.night_shift_allowance,
            overtime_night_weekday_rate=wc.overtime_night_weekday_rate,
            overtime_night_weekend_rate=wc.overtime_night_weekend_rate,
            overtime_night_holiday_rate=wc.overtime_night_holiday_rate,
            allow_continuous_24h_shift=True if wc.continuous_24h_rate is not None else None,
            allow_continuous_48h_shift=True if wc.continuous_48h_rate is not None else None,
            continuous_24h_rate=wc.continuous_24h_rate,
            continuous_48h_rate=wc.continuous_48h_rate,
            count_sleep_time_in_continuous_shift=wc.count_sleep_time,
            sleep_time_calculation_ratio=wc.sleep_time_ratio,
            minimum_rest_hours_between_shifts=wc.minimum_rest_hours,
            consecutive_shift_rate=wc.consecutive_shift_rate,
            paid_leave_days_per_month=wc.paid_leave_days_per_month,
            annual_leave_days=wc.paid_leave_days_per_year,
            sick_leave_days_per_year=wc.sick_leave_days_per_year,
            follows_customer_schedule=wc.follows_customer_schedule,
            work_when_customer_closed=wc.work_when_customer_closed,
            tet_holiday_rate=wc.tet_holiday_rate,
            tet_continuous_shift_rate=wc.tet_continuous_shift_rate,
            tet_allowance=wc.tet_allowance,
            event_shift_rate=wc.event_shift_rate,
            emergency_call_rate=wc.emergency_call_rate,
            replacement_shift_rate=wc.replacement_shift_rate,
            allow_event_shift=True,
            allow_emergency_call=True,
            allow_replacement_shift=True,
            minimum_emergency_notice_minutes=60,
            overtime_limit_violation_policy=wc.overtime_limit_violation_policy,
            overtime_limit_violation_rate=wc.overtime_limit_violation_rate,
            unapproved_overtime_policy=wc.unapproved_overtime_policy,
            insufficient_rest_policy="compensate",
            meal_allowance=wc.meal_allowance,
            transport_allowance=wc.transport_allowance,
            phone_allowance=wc.phone_allowance,
            supervisor_allowance=wc.supervisor_allowance,
            special_terms=wc.special_requirements,
            penalty_terms=wc.penalty_terms,
            bonus_terms=wc.bonus_terms,
            general_notes=f"Imported from contract document {plan.contract_number}",
            effective_from=plan.start_date,
            effective_to=plan.end_date,
            is_active=True,
            created_by=created_by,
        )

    async def _send_login_email(
        self,
        customer_name: str,
        account: ProvisionedAccount,
        contract_number: str,
        warnings: List[str],
    ) -> None:
        try:
            await self.notifier.send_login_credentials(
                customer_name=customer_name,
                email=account.email,
                password=account.password,
                contract_number=contract_number,
            )
        except Exception as e:
            LOGGER.warning(
                f"Login email failed after commit: {str(e)}",
                extra={"email": account.email},
            )
            warnings.append(f"Login email could not be sent to {account.email}: {str(e)}")


async def import_contract_document(
    file_name: str,
    content: Union[bytes, BinaryIO],
    created_by: Optional[UUID] = None,
) -> ImportResult:
    """Import a contract file in a fresh database session.

    Args:
        file_name: Original file name; its extension selects the decoder
        content: File bytes or a binary stream
        created_by: User who started the import

    Returns:
        ImportResult describing what was created
    """
    async with async_session_maker() as session:
        return await ContractImportService(session).execute(file_name, content, created_by)
