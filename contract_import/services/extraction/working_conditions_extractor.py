"""Extraction of the labor-policy clauses of a contract.

Each clause is a :class:`FieldRule`; the rule table maps the rule onto a
:class:`WorkingConditionsInfo` attribute. A handful of rates fall back to
the statutory multiplier when the clause mentions the work type without
naming a number.
"""

import re
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from contract_import.services.extraction.models import WorkingConditionsInfo
from contract_import.services.extraction.patterns import (
    RATE,
    FieldRule,
    PatternRule,
    Scope,
    Section,
    amount_rules,
    as_int,
    as_percent_ratio,
    constant,
    parse_clock,
    parse_decimal,
    rate_rules,
)
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

OVERTIME = r"(?:tăng\s*ca|làm\s*thêm\s*giờ|làm\s*thêm)"
NIGHT = r"(?:ca\s*đêm|ban\s*đêm|night)"

DEFAULT_OVERTIME_WEEKDAY_RATE = Decimal("1.5")
DEFAULT_OVERTIME_WEEKEND_RATE = Decimal("2.0")
DEFAULT_OVERTIME_HOLIDAY_RATE = Decimal("3.0")
DEFAULT_NIGHT_SHIFT_RATE = Decimal("1.3")
DEFAULT_TET_RATE = Decimal("4.0")
DEFAULT_MINIMUM_REST_HOURS = Decimal("11")
SPECIAL_TERMS_MAX_LENGTH = 500

_OVERTIME_CUE = re.compile(r"tăng\s*ca|làm\s*thêm\s*giờ|over\s*time", re.IGNORECASE)
_NIGHT_CUE = re.compile(r"ca\s*đêm|22\s*[h:]\s*00|\bnight\b|ban\s*đêm", re.IGNORECASE)
_TET_CUE = re.compile(r"\btết\b", re.IGNORECASE)
_NIGHT_WINDOW = re.compile(
    NIGHT + r"[^\d\n]*?(\d{1,2})[h:](\d{2})?\s*[-–]\s*(\d{1,2})[h:](\d{2})?",
    re.IGNORECASE,
)


def _ratio(match: "re.Match[str]") -> Optional[Decimal]:
    """``1:1.5`` (hours worked : hours off) becomes ``1.5``."""
    worked, off = parse_decimal(match.group(1)), parse_decimal(match.group(2))
    if not worked or off is None:
        return None
    return off / worked


def _hours(match: "re.Match[str]") -> Optional[Decimal]:
    return parse_decimal(match.group(1))


def _free_text(match: "re.Match[str]") -> Optional[str]:
    value = " ".join(match.group(1).split())
    return value[:SPECIAL_TERMS_MAX_LENGTH] or None


_VIOLATION_POLICIES = {"phép": "not_allowed", "duyệt": "requires_approval", "phạt": "penalty"}


def _violation_policy(match: "re.Match[str]") -> Optional[str]:
    keyword = match.group(1).lower()
    for needle, policy in _VIOLATION_POLICIES.items():
        if needle in keyword:
            return policy
    return None


def _unapproved_policy(match: "re.Match[str]") -> str:
    return "accept_with_penalty" if "phạt" in match.group(1).lower() else "reject"


RULES: Tuple[Tuple[str, FieldRule], ...] = (
    # Compensatory time off
    ("allows_compensatory_time_off", FieldRule(
        "compensatory_time_off",
        (PatternRule(r"nghỉ\s*bù", constant(True)),),
    )),
    ("compensatory_time_off_ratio", FieldRule(
        "compensatory_ratio",
        (PatternRule(r"nghỉ\s*bù[^\n]*?" + RATE + r"\s*[:/]\s*" + RATE, _ratio),),
    )),
    ("max_compensatory_days_per_month", FieldRule(
        "compensatory_max_days",
        (PatternRule(r"nghỉ\s*bù[^\n]*?(?:tối\s*đa|không\s*quá)\s*(\d+)\s*ngày", as_int),),
    )),
    # Overtime
    ("overtime_rate_weekday", FieldRule("overtime_weekday", rate_rules(OVERTIME + r"[^\n]*?ngày\s*thường"))),
    ("overtime_rate_weekend", FieldRule(
        "overtime_weekend", rate_rules(OVERTIME + r"[^\n]*?(?:cuối\s*tuần|ngày\s*nghỉ\s*hằng\s*tuần)")
    )),
    ("overtime_rate_holiday", FieldRule("overtime_holiday", rate_rules(OVERTIME + r"[^\n]*?ngày\s*lễ"))),
    ("max_overtime_hours_per_day", FieldRule(
        "overtime_max_day",
        (
            PatternRule(r"(\d+)\s*giờ\s*(?:/|mỗi|một|trong\s*(?:một|1))\s*ngày", _hours),
            PatternRule(r"(?:tối\s*đa|không\s*quá)\s*(\d+)\s*giờ[^\d\n]*?ngày", _hours),
        ),
    )),
    ("max_overtime_hours_per_month", FieldRule(
        "overtime_max_month",
        (
            PatternRule(r"(\d+)\s*giờ\s*(?:/|mỗi|một|trong\s*(?:một|1))\s*tháng", _hours),
            PatternRule(r"(?:tối\s*đa|không\s*quá)\s*(\d+)\s*giờ[^\d\n]*?tháng", _hours),
        ),
    )),
    ("requires_overtime_approval", FieldRule(
        "overtime_approval",
        (
            PatternRule(r"không\s*cần\s*(?:được\s*)?phê\s*duyệt", constant(False)),
            PatternRule(r"phải\s*(?:được\s*)?phê\s*duyệt|cần\s*(?:sự\s*)?đồng\s*ý", constant(True)),
        ),
    )),
    # Holidays and leave
    ("public_holiday_rate", FieldRule("public_holiday", rate_rules(r"(?<!thêm\s)ngày\s*lễ"))),
    ("holiday_compensation_day", FieldRule(
        "holiday_compensation",
        (PatternRule(r"ngày\s*lễ[^\n]*?nghỉ\s*bù|nghỉ\s*bù[^\n]*?ngày\s*lễ", constant(True)),),
    )),
    ("paid_leave_days_per_month", FieldRule(
        "paid_leave_month",
        (PatternRule(r"(\d+)\s*ngày\s*(?:nghỉ\s*)?phép\s*(?:/|mỗi|một|trong\s*(?:một|1))\s*tháng", as_int),),
    )),
    ("paid_leave_days_per_year", FieldRule(
        "paid_leave_year",
        (
            PatternRule(r"(\d+)\s*ngày\s*(?:nghỉ\s*)?phép\s*(?:/|mỗi|một|trong\s*(?:một|1))?\s*năm", as_int),
            PatternRule(r"phép\s*năm[^\d\n]*?(\d+)\s*ngày", as_int),
        ),
    )),
    ("sick_leave_days_per_year", FieldRule(
        "sick_leave",
        (PatternRule(r"(?:nghỉ\s*)?(?:ốm|bệnh)[^\d\n]*?(\d+)\s*ngày", as_int),),
    )),
    ("follows_customer_schedule", FieldRule(
        "follows_customer_schedule",
        (PatternRule(r"theo\s*lịch\s*(?:làm\s*việc\s*)?(?:của\s*)?(?:bên\s*b\b|khách\s*hàng)", constant(True)),),
    )),
    ("work_when_customer_closed", FieldRule(
        "work_when_customer_closed",
        (PatternRule(
            r"(?:bên\s*b\b|khách\s*hàng)\s*(?:nghỉ|đóng\s*cửa)[^\n]*?(?:vẫn|có)\s*(?:làm\s*việc|trực)",
            constant(True),
        ),),
    )),
    # Weekends
    ("weekend_rate", FieldRule("weekend", rate_rules(r"(?<!thêm\s)cuối\s*tuần"))),
    ("saturday_rate", FieldRule("saturday", rate_rules(r"thứ\s*(?:7|bảy)"))),
    ("sunday_rate", FieldRule("sunday", rate_rules(r"chủ\s*nhật"))),
    ("saturday_as_regular_workday", FieldRule(
        "saturday_regular",
        (PatternRule(r"thứ\s*(?:7|bảy)[^\n]*?(?:làm\s*việc\s*bình\s*thường|ngày\s*làm\s*việc)", constant(True)),),
    )),
    # Night shift
    ("night_shift_rate", FieldRule("night_shift", rate_rules(NIGHT))),
    ("night_shift_allowance", FieldRule(
        "night_shift_allowance", amount_rules(r"(?:phụ\s*cấp|trợ\s*cấp)\s*(?:làm\s*)?" + NIGHT)
    )),
    # Continuous shifts
    ("continuous_24h_rate", FieldRule("continuous_24h", rate_rules(r"(?:liên\s*tục\s*)?24\s*(?:giờ|h)\b"))),
    ("continuous_48h_rate", FieldRule("continuous_48h", rate_rules(r"(?:liên\s*tục\s*)?48\s*(?:giờ|h)\b"))),
    ("count_sleep_time", FieldRule(
        "count_sleep_time",
        (
            PatternRule(r"không\s*tính[^\n]*?giờ\s*ngủ", constant(False)),
            PatternRule(r"(?:giờ\s*ngủ|thời\s*gian\s*ngủ)[^\n]*?\d{1,3}\s*%", constant(True)),
        ),
    )),
    ("sleep_time_ratio", FieldRule(
        "sleep_time_ratio",
        (PatternRule(r"(?:giờ\s*ngủ|thời\s*gian\s*ngủ|thời\s*gian\s*nghỉ)[^\n]*?(\d{1,3})\s*%", as_percent_ratio),),
    )),
    ("minimum_rest_hours", FieldRule(
        "minimum_rest_hours",
        (PatternRule(r"(?:nghỉ\s*giữa\s*(?:các\s*|hai\s*)?ca|nghỉ\s*ngơi)[^\d\n]*?(\d+)\s*giờ", _hours),),
    )),
    ("consecutive_shift_rate", FieldRule(
        "consecutive_shift", rate_rules(r"(?:ca\s*liên\s*tiếp|nhiều\s*ca\s*liên\s*tục)")
    )),
    # Tet
    ("tet_continuous_shift_rate", FieldRule(
        "tet_continuous", rate_rules(r"\btết\b[^\n]*?(?:liên\s*tục|24\s*(?:giờ|h))")
    )),
    ("tet_holiday_rate", FieldRule("tet", rate_rules(r"\btết\b"))),
    ("tet_allowance", FieldRule("tet_allowance", amount_rules(r"(?:thưởng|phụ\s*cấp|trợ\s*cấp)\s*tết\b"))),
    ("holiday_weekend_calculation_method", FieldRule(
        "holiday_weekend_method",
        (
            PatternRule(r"cộng\s*dồn|cumulative", constant("cumulative")),
            PatternRule(r"lấy\s*(?:mức\s*|hệ\s*số\s*)?(?:cao|lớn)\s*nhất", constant("max")),
        ),
    )),
    # Special shifts
    ("event_shift_rate", FieldRule("event_shift", rate_rules(r"(?:ca\s*)?sự\s*kiện"))),
    ("emergency_call_rate", FieldRule("emergency_call", rate_rules(r"(?:khẩn\s*cấp|gọi\s*đột\s*xuất)"))),
    ("replacement_shift_rate", FieldRule("replacement_shift", rate_rules(r"(?:thay\s*thế|thay\s*ca)"))),
    # Violation policies
    ("overtime_limit_violation_policy", FieldRule(
        "overtime_violation_policy",
        (PatternRule(
            r"vượt[^\n]*?" + OVERTIME + r"[^\n]*?(không\s*(?:được\s*)?(?:cho\s*)?phép|phê\s*duyệt|phạt)",
            _violation_policy,
        ),),
    )),
    ("overtime_limit_violation_rate", FieldRule(
        "overtime_violation_rate", rate_rules(r"vượt[^\n]*?" + OVERTIME)
    )),
    ("unapproved_overtime_policy", FieldRule(
        "unapproved_overtime_policy",
        (PatternRule(
            OVERTIME + r"[^\n]*?(?:không\s*(?:được\s*)?(?:phê\s*)?duyệt|chưa\s*(?:được\s*)?(?:phê\s*)?duyệt)"
            r"[^\n]*?(không\s*(?:được\s*)?(?:tính|thanh\s*toán|chấp\s*nhận)|phạt)",
            _unapproved_policy,
        ),),
    )),
    # Allowances
    ("meal_allowance", FieldRule(
        "meal_allowance", amount_rules(r"(?:phụ\s*cấp|trợ\s*cấp)\s*(?:ăn\s*ca|ăn\s*trưa|tiền\s*ăn|ăn|cơm)")
    )),
    ("transport_allowance", FieldRule(
        "transport_allowance", amount_rules(r"(?:phụ\s*cấp|trợ\s*cấp)\s*(?:đi\s*lại|xăng\s*xe|di\s*chuyển)")
    )),
    ("phone_allowance", FieldRule(
        "phone_allowance", amount_rules(r"(?:phụ\s*cấp|trợ\s*cấp)\s*điện\s*thoại")
    )),
    ("supervisor_allowance", FieldRule(
        "supervisor_allowance",
        amount_rules(r"(?:phụ\s*cấp|trợ\s*cấp)\s*(?:trách\s*nhiệm\s*)?(?:trưởng\s*ca|giám\s*sát|đội\s*trưởng)"),
    )),
    # Free text
    ("special_requirements", FieldRule(
        "special_requirements",
        (PatternRule(r"([\s\S]+)", _free_text),),
        scope=Scope.SECTION,
        section=Section(markers=(r"ĐIỀU\s*4(?!\d)\s*[:：.]?",), window=SPECIAL_TERMS_MAX_LENGTH,
                        end_marker=r"ĐIỀU\s*5(?!\d)"),
    )),
    ("penalty_terms", FieldRule(
        "penalty_terms",
        (PatternRule(r"([^\n]*(?:phạt\s*vi\s*phạm|bồi\s*thường\s*thiệt\s*hại)[^\n]*)", _free_text),),
    )),
    ("bonus_terms", FieldRule(
        "bonus_terms",
        (PatternRule(r"([^\n]*(?:khen\s*thưởng|tiền\s*thưởng|thưởng\s*hoàn\s*thành)[^\n]*)", _free_text),),
    )),
)


def _apply_defaults(values: Dict[str, Any], text: str) -> None:
    if _OVERTIME_CUE.search(text):
        values["allows_overtime"] = True
        if values.get("overtime_rate_weekday") is None:
            values["overtime_rate_weekday"] = DEFAULT_OVERTIME_WEEKDAY_RATE
        if values.get("overtime_rate_weekend") is None:
            values["overtime_rate_weekend"] = DEFAULT_OVERTIME_WEEKEND_RATE
        if values.get("overtime_rate_holiday") is None:
            values["overtime_rate_holiday"] = DEFAULT_OVERTIME_HOLIDAY_RATE

    if _NIGHT_CUE.search(text) and values.get("night_shift_rate") is None:
        values["night_shift_rate"] = DEFAULT_NIGHT_SHIFT_RATE

    if _TET_CUE.search(text) and values.get("tet_holiday_rate") is None:
        values["tet_holiday_rate"] = DEFAULT_TET_RATE

    if values.get("minimum_rest_hours") is None:
        values["minimum_rest_hours"] = DEFAULT_MINIMUM_REST_HOURS


def _apply_night_window(values: Dict[str, Any], text: str) -> None:
    match = _NIGHT_WINDOW.search(text)
    if match is None:
        return
    values["night_shift_start_time"] = parse_clock(match.group(1), match.group(2))
    values["night_shift_end_time"] = parse_clock(match.group(3), match.group(4))


def _apply_overtime_night_rates(values: Dict[str, Any]) -> None:
    night_rate = values.get("night_shift_rate")
    if night_rate is None:
        return
    for overtime_key, night_key in (
        ("overtime_rate_weekday", "overtime_night_weekday_rate"),
        ("overtime_rate_weekend", "overtime_night_weekend_rate"),
        ("overtime_rate_holiday", "overtime_night_holiday_rate"),
    ):
        overtime_rate = values.get(overtime_key)
        if overtime_rate is not None:
            values[night_key] = (night_rate * overtime_rate).quantize(Decimal("0.01"))


def extract_working_conditions(text: str) -> WorkingConditionsInfo:
    """Extract the labor-policy bundle of a contract.

    Args:
        text: Full document text

    Returns:
        WorkingConditionsInfo with None for every clause not found
    """
    if not text:
        return WorkingConditionsInfo()

    values: Dict[str, Any] = {}
    for attribute, rule in RULES:
        value = rule.extract(text)
        if value is not None:
            values[attribute] = value

    _apply_night_window(values, text)
    _apply_defaults(values, text)
    _apply_overtime_night_rates(values)

    LOGGER.debug(
        f"Working conditions extracted: {len(values)} fields",
        extra={"fields": sorted(values)},
    )
    return WorkingConditionsInfo(**values)
