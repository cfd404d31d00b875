"""Deterministic field extraction from Vietnamese service contracts.

Every ``extract_*`` function is pure: it only reads the text it is given
and can be called in any order. :func:`extract_contract` runs all of them
and freezes the outcome into an :class:`ExtractionResult`.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from contract_import.services.extraction.models import (
    ContractPeriodInfo,
    ExtractionResult,
    LocationDetails,
    ShiftBlock,
)
from contract_import.services.extraction.patterns import (
    DATE,
    EMAIL,
    FieldRule,
    PatternRule,
    Scope,
    Section,
    as_date_range,
    as_int,
    constant,
    first_group,
    parse_clock,
    stripped,
)
from contract_import.services.extraction.working_conditions_extractor import (
    extract_working_conditions,
)
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

# A person's name: two to six words of letters.
PERSON_NAME = r"[^\W\d_]+(?:[ \t]+[^\W\d_]+){1,5}"

COUNTERPARTY_SECTION = Section(markers=(r"BÊN\s*B\b", r"PARTY\s*B\b"), window=600)
COUNTERPARTY_PHONE_SECTION = Section(markers=(r"BÊN\s*B\b", r"PARTY\s*B\b"), window=500)
COUNTERPARTY_TAIL = Section(markers=(r"BÊN\s*B\b", r"PARTY\s*B\b"))
SUBJECT_ARTICLE = Section(
    markers=(r"ĐIỀU\s*1(?!\d)\s*[:：.]?\s*(?:ĐỐI\s*TƯỢNG\s*VÀ\s*PHẠM\s*VI\s*HỢP\s*ĐỒNG)?",),
    window=800,
    end_marker=r"ĐIỀU\s*2(?!\d)",
)
TERM_ARTICLE = Section(markers=(r"ĐIỀU\s*2(?!\d)",), window=1000)

CONTRACT_NUMBER = FieldRule(
    name="contract_number",
    patterns=(
        PatternRule(r"(?:Số\s*HĐ|Hợp\s*đồng\s*số|Contract\s*No\.?)\s*[:：]?\s*(\d{3,4}/\d{4}/[A-Z\-]+/[A-Z]+/[A-Z]+)"),
        PatternRule(r"(\d{3,4}/\d{4}/HĐDV-BV/[A-Z]+/[A-Z]+)"),
        PatternRule(r"(?:Số\s*HĐ|Hợp\s*đồng\s*số|Contract\s*No\.?)\s*[:：]\s*([A-Z0-9Đ\-/]+)"),
        PatternRule(r"\bHĐ\s*[-:]?\s*(?=[A-Z\-/]*\d)([A-Z0-9\-/]{5,})"),
        PatternRule(
            r"\bCTR[-\s]?(\d{4})[-\s]?(\d{3})\b",
            lambda m: f"CTR-{m.group(1)}-{m.group(2)}",
        ),
    ),
)

CONTRACT_DATES = FieldRule(
    name="contract_dates",
    patterns=(
        PatternRule(rf"(?:có\s+hiệu\s+lực\s+)?từ\s+ngày\s+({DATE})\s+đến\s+(?:hết\s+)?ngày\s+({DATE})", as_date_range),
        PatternRule(rf"\bfrom\s+({DATE})\s+(?:to|until)\s+({DATE})", as_date_range),
        PatternRule(rf"bắt\s+đầu\s+từ\s+(?:ngày\s+)?({DATE})\s+(?:kết\s+thúc|đến)\s+(?:ngày\s+)?({DATE})", as_date_range),
    ),
)

PERIOD_DATES = FieldRule(
    name="period_dates",
    scope=Scope.SECTION_OR_WHOLE_TEXT,
    section=TERM_ARTICLE,
    patterns=(
        PatternRule(rf"(?:có\s+hiệu\s+lực\s+)?từ\s+ngày\s+({DATE})\s+đến\s+(?:hết\s+)?ngày\s+({DATE})", as_date_range),
        PatternRule(
            rf"kể\s*từ\s*(?:ngày\s*)?({DATE}).*?đến\s*(?:hết\s*)?(?:ngày\s*)?({DATE})",
            as_date_range,
            flags=re.IGNORECASE | re.DOTALL,
        ),
        PatternRule(rf"\bfrom\s+({DATE})\s+(?:to|until)\s+({DATE})", as_date_range),
        PatternRule(rf"bắt\s+đầu\s+từ\s+(?:ngày\s+)?({DATE})\s+(?:kết\s+thúc|đến)\s+(?:ngày\s+)?({DATE})", as_date_range),
    ),
)

PERIOD_DURATION = FieldRule(
    name="period_duration",
    scope=Scope.SECTION_OR_WHOLE_TEXT,
    section=TERM_ARTICLE,
    patterns=(
        PatternRule(
            r"(?:thời\s*hạn|hiệu\s*lực|thời\s*gian)[:\s]*(\d+)\s*(tháng|năm|ngày)",
            lambda m: f"{m.group(1)} {m.group(2).lower()}",
        ),
    ),
)


def _long_enough(match: "re.Match[str]") -> Optional[str]:
    value = first_group(match)
    if value is None or len(value) <= 5:
        return None
    return value


CUSTOMER_NAME = FieldRule(
    name="customer_name",
    patterns=(
        PatternRule(r"(?:Bên\s*B\b|Khách\s*hàng|Party\s*B\b|Customer)[^\r\n]*?[:：]\s*([^\r\n]+?)\s*(?:\r|\n|Địa\s*chỉ|$)", _long_enough),
        PatternRule(r"(Công\s*ty\s+[^\r\n]{10,80})", _long_enough),
    ),
)

CUSTOMER_ADDRESS = FieldRule(
    name="customer_address",
    scope=Scope.SECTION_OR_WHOLE_TEXT,
    section=COUNTERPARTY_SECTION,
    patterns=(PatternRule(r"(?:Địa\s*chỉ|Address)[^\r\n]*?[:：]\s*([^\r\n]+)"),),
)


def normalize_phone(raw: str) -> Optional[str]:
    """Normalize a Vietnamese phone number to ``+84...`` form."""
    digits = re.sub(r"[^\d+]", "", raw)
    if not digits:
        return None
    if digits.startswith("+"):
        return digits
    if digits.startswith("0"):
        return "+84" + digits[1:]
    if digits.startswith("84") and len(digits) >= 11:
        return "+" + digits
    return "+84" + digits


CUSTOMER_PHONE = FieldRule(
    name="customer_phone",
    scope=Scope.SECTION,
    section=COUNTERPARTY_PHONE_SECTION,
    patterns=(
        PatternRule(
            r"(?:Điện\s*thoại|Phone|Tel|ĐT)[^\r\n]*?[:：]\s*([\d \-\(\)\+\.]{9,20})",
            lambda m: normalize_phone(m.group(1)),
        ),
    ),
)

CUSTOMER_EMAIL = FieldRule(
    name="customer_email",
    scope=Scope.SECTION,
    section=COUNTERPARTY_TAIL,
    patterns=(
        PatternRule(rf"Email\s*[:：]\s*({EMAIL})"),
        PatternRule(rf"({EMAIL})"),
    ),
)

TAX_CODE = FieldRule(
    name="tax_code",
    scope=Scope.SECTION_OR_WHOLE_TEXT,
    section=COUNTERPARTY_SECTION,
    patterns=(PatternRule(r"(?:Mã\s*số\s*thuế|MST)[^\r\n]*?[:：]\s*(\d{10}(?:-\d{3})?)"),),
)

CONTACT_PERSON_NAME = FieldRule(
    name="contact_person_name",
    scope=Scope.SECTION,
    section=COUNTERPARTY_SECTION,
    patterns=(
        PatternRule(rf"(?:Đại\s*diện|Đ/D)[^\r\n]*?[:：]\s*(?:Ông|Bà)\s+({PERSON_NAME})(?:\s*[-–]|[ \t]*\r?\n|[ \t]*$)"),
        PatternRule(rf"\b(?:Ông|Bà)\s+({PERSON_NAME})\s*[-–]"),
    ),
)

CONTACT_PERSON_TITLE = FieldRule(
    name="contact_person_title",
    scope=Scope.SECTION,
    section=COUNTERPARTY_SECTION,
    patterns=(
        PatternRule(rf"\b(?:Ông|Bà)\s+{PERSON_NAME}\s*[-–]\s*([^\r\n]+)"),
        PatternRule(r"Chức\s*vụ\s*[:：]\s*([^\r\n]+)"),
    ),
)

GUARDS_REQUIRED = FieldRule(
    name="guards_required",
    patterns=(
        PatternRule(r"\b(\d+)[ \t]*(?:nhân[ \t]*viên[ \t]*)?(?:bảo[ \t]*vệ|guards?)\b", as_int),
        PatternRule(r"Số\s*lượng[^\r\n]*?[:：]\s*(\d+)", as_int),
        PatternRule(r"guards?\s*required\s*[:：]?\s*(\d+)", as_int),
    ),
)

COVERAGE_TYPE = FieldRule(
    name="coverage_type",
    patterns=(
        PatternRule(r"24\s*[/x]\s*7", constant("24x7")),
        PatternRule(r"ban\s*ngày", constant("day_only")),
        PatternRule(r"ban\s*đêm", constant("night_only")),
    ),
)

WORKS_ON_HOLIDAYS = FieldRule(
    name="works_on_holidays",
    patterns=(
        PatternRule(r"không\s*làm\s*việc[^\r\n]*?ngày\s*lễ", constant(False)),
        PatternRule(r"làm\s*việc[^\r\n]*?ngày\s*lễ", constant(True)),
        PatternRule(r"nghỉ[^\r\n]*?ngày\s*lễ", constant(False)),
    ),
)

WORKS_ON_WEEKENDS = FieldRule(
    name="works_on_weekends",
    patterns=(
        PatternRule(r"không\s*làm\s*việc[^\r\n]*?cuối\s*tuần", constant(False)),
        PatternRule(r"làm\s*việc[^\r\n]*?cuối\s*tuần", constant(True)),
        PatternRule(r"nghỉ[^\r\n]*?cuối\s*tuần", constant(False)),
    ),
)

LOCATION_NAME = FieldRule(
    name="location_name",
    scope=Scope.SECTION,
    section=SUBJECT_ARTICLE,
    patterns=(
        PatternRule(r"Tên\s*địa\s*điểm\s*[:：]\s*([^\r\n]+)", stripped(r"\s*[-–]\s*Địa\s*chỉ.*")),
        PatternRule(r"(?:tại|ở)\s*địa\s*điểm\s*[:：]?\s*([^\r\n]{10,100})", stripped(r"\s*[-–]\s*Địa\s*chỉ.*")),
    ),
)

LOCATION_ADDRESS = FieldRule(
    name="location_address",
    scope=Scope.SECTION,
    section=SUBJECT_ARTICLE,
    patterns=(
        PatternRule(r"Địa\s*chỉ\s*[:：]\s*([^\r\n]+)", stripped(r"\s*[-–]\s*Số\s*lượng.*")),
        PatternRule(
            r"(?:tại|ở)\s*[:：]?\s*(\d+\s+[^,\r\n]+(?:,\s*[^,\r\n]+){1,3})",
            stripped(r"\s*[-–]\s*Số\s*lượng.*"),
        ),
    ),
)

# Shift lines. Named shifts accept the Vietnamese and English day-part words.
_SHIFT_TIMES = r"(\d{1,2})[h:](\d{2})?\s*[-–—]\s*(\d{1,2})[h:](\d{2})?"
_NAMED_SHIFT = re.compile(
    r"\bCa\s+(sáng|chiều|tối|đêm|cuối\s+tuần|khuya|trưa|morning|afternoon|evening|night|noon|weekend)"
    r"[^\d\r\n]*?" + _SHIFT_TIMES,
    re.IGNORECASE,
)
_ENGLISH_SHIFT = re.compile(
    r"\b(morning|afternoon|evening|night|noon|weekend)(?:\s+shift)?\s*[:：]?\s*" + _SHIFT_TIMES,
    re.IGNORECASE,
)
_NUMBERED_SHIFT = re.compile(
    r"\b[Cc]a\s+([IVX]+|\d{1,2})\b[^\d\r\n]*?" + _SHIFT_TIMES,
)

# Containment checks, most specific first.
_DAY_PART_LABELS: Tuple[Tuple[str, str], ...] = (
    ("cuối tuần", "weekend"),
    ("weekend", "weekend"),
    ("sáng", "morning"),
    ("morning", "morning"),
    ("chiều", "afternoon"),
    ("afternoon", "afternoon"),
    ("trưa", "noon"),
    ("noon", "noon"),
    ("tối", "evening"),
    ("evening", "evening"),
    ("đêm", "night"),
    ("khuya", "night"),
    ("night", "night"),
)

SHIFT_DISPLAY_NAMES = {
    "morning": "Ca sáng",
    "afternoon": "Ca chiều",
    "evening": "Ca tối",
    "night": "Ca đêm",
    "noon": "Ca trưa",
    "weekend": "Ca cuối tuần",
}


def normalize_day_part(raw: str) -> Optional[str]:
    """Map a day-part word onto morning/afternoon/evening/night/noon/weekend."""
    value = " ".join(raw.split()).lower()
    for needle, label in _DAY_PART_LABELS:
        if needle in value:
            return label
    return None


def extract_contract_number(text: str) -> Optional[str]:
    return CONTRACT_NUMBER.extract(text)


def extract_contract_dates(text: str) -> Tuple[Optional[date], Optional[date]]:
    """Extract the contract's start and end dates.

    Args:
        text: Full document text

    Returns:
        (start, end); both None when no date range was recognized
    """
    found = CONTRACT_DATES.extract(text)
    if found is None:
        return None, None
    return found


def extract_contract_period(text: str) -> ContractPeriodInfo:
    """Extract dates and duration wording from the contract-term article."""
    dates = PERIOD_DATES.extract(text)
    start, end = dates if dates is not None else (None, None)
    return ContractPeriodInfo(
        start_date=start,
        end_date=end,
        duration=PERIOD_DURATION.extract(text),
    )


def extract_customer_name(text: str) -> Optional[str]:
    return CUSTOMER_NAME.extract(text)


def extract_customer_address(text: str) -> Optional[str]:
    return CUSTOMER_ADDRESS.extract(text)


def extract_customer_phone(text: str) -> Optional[str]:
    return CUSTOMER_PHONE.extract(text)


def extract_customer_email(text: str) -> Optional[str]:
    return CUSTOMER_EMAIL.extract(text)


def extract_tax_code(text: str) -> Optional[str]:
    return TAX_CODE.extract(text)


def extract_contact_person_name(text: str) -> Optional[str]:
    return CONTACT_PERSON_NAME.extract(text)


def extract_contact_person_title(text: str) -> Optional[str]:
    return CONTACT_PERSON_TITLE.extract(text)


def extract_guards_required(text: str) -> int:
    """Number of guards the contract asks for; 0 when not stated."""
    return GUARDS_REQUIRED.extract(text) or 0


def extract_coverage_type(text: str) -> Optional[str]:
    return COVERAGE_TYPE.extract(text)


def extract_works_on_holidays(text: str) -> Optional[bool]:
    return WORKS_ON_HOLIDAYS.extract(text)


def extract_works_on_weekends(text: str) -> Optional[bool]:
    return WORKS_ON_WEEKENDS.extract(text)


def extract_location_details(text: str) -> LocationDetails:
    """Extract the guarded site's name and address from the subject article."""
    return LocationDetails(
        name=LOCATION_NAME.extract(text),
        address=LOCATION_ADDRESS.extract(text),
    )


def _shift_from_match(match: "re.Match[str]", label: str, name: str) -> ShiftBlock:
    return ShiftBlock(
        name=name,
        label=label,
        start_time=parse_clock(match.group(2), match.group(3)),
        end_time=parse_clock(match.group(4), match.group(5)),
    )


def extract_shift_blocks(text: str) -> Tuple[ShiftBlock, ...]:
    """Extract every shift-time line, deduplicated in document order.

    Args:
        text: Full document text

    Returns:
        Shift blocks; a block whose clock values are out of range keeps
        None for that time and is skipped by the importer.
    """
    if not text:
        return ()

    blocks: List[ShiftBlock] = []
    seen = set()

    def _add(block: ShiftBlock) -> None:
        key = (block.label, block.start_time, block.end_time)
        if key not in seen:
            seen.add(key)
            blocks.append(block)

    for regex in (_NAMED_SHIFT, _ENGLISH_SHIFT):
        for match in regex.finditer(text):
            label = normalize_day_part(match.group(1))
            if label is None:
                continue
            _add(_shift_from_match(match, label, SHIFT_DISPLAY_NAMES[label]))

    for match in _NUMBERED_SHIFT.finditer(text):
        numeral = match.group(1).upper()
        _add(_shift_from_match(match, numeral, f"Ca {numeral}"))

    LOGGER.debug(f"Extracted {len(blocks)} shift blocks", extra={"shift_count": len(blocks)})
    return tuple(blocks)


def extract_contract(text: str) -> ExtractionResult:
    """Run every field extractor over the document text.

    Args:
        text: Plain text produced by a document decoder

    Returns:
        Frozen extraction result
    """
    start_date, end_date = extract_contract_dates(text)
    result = ExtractionResult(
        raw_text=text,
        contract_number=extract_contract_number(text),
        start_date=start_date,
        end_date=end_date,
        customer_name=extract_customer_name(text),
        customer_address=extract_customer_address(text),
        customer_phone=extract_customer_phone(text),
        customer_email=extract_customer_email(text),
        tax_code=extract_tax_code(text),
        contact_person_name=extract_contact_person_name(text),
        contact_person_title=extract_contact_person_title(text),
        guards_required=extract_guards_required(text),
        coverage_type=extract_coverage_type(text),
        shifts=extract_shift_blocks(text),
        works_on_holidays=extract_works_on_holidays(text),
        works_on_weekends=extract_works_on_weekends(text),
        location=extract_location_details(text),
        period=extract_contract_period(text),
        working_conditions=extract_working_conditions(text),
    )
    LOGGER.info(
        "Contract fields extracted",
        extra={
            "contract_number": result.contract_number,
            "customer_name": result.customer_name,
            "guards_required": result.guards_required,
            "shift_count": len(result.shifts),
        },
    )
    return result
