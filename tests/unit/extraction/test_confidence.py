"""Unit tests for the extraction confidence score."""

from datetime import date

from contract_import.services.extraction.confidence import MAX_SCORE, confidence_score


def test_complete_extraction_scores_max():
    score = confidence_score(
        contract_number="001/2025/HĐDV-BV/HCM/ABC",
        customer_name="CÔNG TY ABC",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
        guards_required=3,
        schedule_count=2,
    )
    assert score == MAX_SCORE


def test_nothing_extracted_scores_zero():
    assert confidence_score(None, None, None, None, 0, 0) == 0


def test_weights_are_additive():
    assert confidence_score("HD-01", "CÔNG TY ABC", None, None, 0, 0) == 35
    assert confidence_score(None, None, date(2025, 1, 1), date(2025, 2, 1), 0, 0) == 30
    assert confidence_score(None, None, None, None, 2, 1) == 35


def test_score_grows_with_each_field():
    fields = [
        dict(contract_number="HD-01"),
        dict(customer_name="CÔNG TY ABC"),
        dict(start_date=date(2025, 1, 1)),
        dict(end_date=date(2025, 2, 1)),
        dict(guards_required=1),
        dict(schedule_count=1),
    ]
    kwargs = dict(
        contract_number=None,
        customer_name=None,
        start_date=None,
        end_date=None,
        guards_required=0,
        schedule_count=0,
    )
    previous = confidence_score(**kwargs)
    for field in fields:
        kwargs.update(field)
        current = confidence_score(**kwargs)
        assert current > previous
        previous = current
    assert previous == MAX_SCORE
