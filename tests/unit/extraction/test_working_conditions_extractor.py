"""Unit tests for working-conditions extraction."""

from datetime import time
from decimal import Decimal

from contract_import.services.extraction.patterns import parse_amount
from contract_import.services.extraction.working_conditions_extractor import (
    extract_working_conditions,
)

OVERTIME_CLAUSES = """ĐIỀU 3: CHẾ ĐỘ LÀM VIỆC
Làm thêm giờ vào ngày thường được trả lương hệ số 1.5
Làm thêm giờ vào ngày lễ được trả 300%
Không quá 4 giờ/ngày và 40 giờ/tháng
Làm thêm giờ phải được phê duyệt bằng văn bản
Ca đêm từ 22h00 - 6h00 hưởng hệ số 1.3
Phụ cấp ăn ca: 30.000 đồng/ca
Phụ cấp trách nhiệm trưởng ca: 1,5 triệu
Nghỉ bù theo tỷ lệ 1:1
"""


class TestOvertimeAndNight:
    """Tests for overtime, night work and allowances."""

    def test_explicit_rates(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.allows_overtime is True
        assert wc.overtime_rate_weekday == Decimal("1.5")
        assert wc.overtime_rate_holiday == Decimal("3")
        assert wc.requires_overtime_approval is True

    def test_percentage_after_salary_word_is_a_ratio(self):
        wc = extract_working_conditions(
            "Tăng ca ngày thường được trả lương bằng 150% lương cơ bản.\n"
            "Làm thêm giờ vào cuối tuần hưởng mức lương 200% lương ngày thường.\n"
        )
        assert wc.overtime_rate_weekday == Decimal("1.5")
        assert wc.overtime_rate_weekend == Decimal("2")

    def test_bare_multiplier_after_salary_word(self):
        wc = extract_working_conditions("Tăng ca ngày thường được trả lương bằng 1.5 lần lương cơ bản.")
        assert wc.overtime_rate_weekday == Decimal("1.5")

    def test_missing_weekend_rate_gets_statutory_default(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.overtime_rate_weekend == Decimal("2.0")

    def test_overtime_limits(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.max_overtime_hours_per_day == Decimal("4")
        assert wc.max_overtime_hours_per_month == Decimal("40")
        assert wc.max_overtime_hours_per_year == Decimal("480")

    def test_night_window_and_combined_rates(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.night_shift_rate == Decimal("1.3")
        assert wc.night_shift_start_time == time(22, 0)
        assert wc.night_shift_end_time == time(6, 0)
        assert wc.overtime_night_weekday_rate == Decimal("1.95")
        assert wc.overtime_night_weekend_rate == Decimal("2.60")
        assert wc.overtime_night_holiday_rate == Decimal("3.90")

    def test_allowances(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.meal_allowance == Decimal("30000")
        assert wc.supervisor_allowance == Decimal("1500000")
        assert wc.transport_allowance is None

    def test_compensatory_time_off(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.allows_compensatory_time_off is True
        assert wc.compensatory_time_off_ratio == Decimal("1")

    def test_rest_hours_default(self):
        wc = extract_working_conditions(OVERTIME_CLAUSES)
        assert wc.minimum_rest_hours == Decimal("11")


class TestFreeTextAndTet:
    """Tests for free-text clauses and Tet rates."""

    def test_special_requirements_and_penalties(self):
        text = (
            "ĐIỀU 4: YÊU CẦU ĐẶC BIỆT\n"
            "Bảo vệ phải mặc đồng phục và   kiểm tra xe ra vào.\n"
            "ĐIỀU 5: XỬ LÝ VI PHẠM\n"
            "Bên A chịu phạt vi phạm 8% giá trị hợp đồng.\n"
        )
        wc = extract_working_conditions(text)
        assert wc.special_requirements == "YÊU CẦU ĐẶC BIỆT Bảo vệ phải mặc đồng phục và kiểm tra xe ra vào."
        assert wc.penalty_terms == "Bên A chịu phạt vi phạm 8% giá trị hợp đồng."
        assert wc.allows_overtime is None
        assert wc.night_shift_rate is None

    def test_tet_mention_without_rate_uses_default(self):
        wc = extract_working_conditions("Làm việc dịp Tết được hưởng lương\nThưởng Tết: 2 triệu\n")
        assert wc.tet_holiday_rate == Decimal("4.0")
        assert wc.tet_allowance == Decimal("2000000")

    def test_empty_text_has_no_values(self):
        wc = extract_working_conditions("")
        assert wc.allows_overtime is None
        assert wc.minimum_rest_hours is None
        assert wc.max_overtime_hours_per_year is None


class TestParseAmount:
    """Tests for money parsing."""

    def test_thousands_separators(self):
        assert parse_amount("50.000") == Decimal("50000")
        assert parse_amount("1,200,000") == Decimal("1200000")

    def test_units(self):
        assert parse_amount("30", "k") == Decimal("30000")
        assert parse_amount("1,5", "triệu") == Decimal("1500000")
        assert parse_amount("200", "đồng") == Decimal("200")

    def test_garbage(self):
        assert parse_amount("") is None
        assert parse_amount("..") is None
