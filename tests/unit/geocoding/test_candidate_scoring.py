"""Unit tests for geocoding candidate ranking."""

from decimal import Decimal

from contract_import.services.geocoding.candidate_scoring import (
    BUILDING_BONUS,
    HOUSE_NUMBER_BONUS,
    POINT_BONUS,
    ROAD_PENALTY,
    GeoCandidate,
    parse_candidates,
    score_candidate,
    select_best_candidate,
)


def _candidate(**kwargs) -> GeoCandidate:
    values = dict(latitude=Decimal("10.77"), longitude=Decimal("106.70"))
    values.update(kwargs)
    return GeoCandidate(**values)


class TestScoreCandidate:
    """Tests for score_candidate."""

    def test_house_number_and_building(self):
        candidate = _candidate(
            importance=0.5,
            place_type="house",
            address={"house_number": "123"},
        )
        assert score_candidate(candidate, True) == 50 + HOUSE_NUMBER_BONUS + BUILDING_BONUS

    def test_road_penalized_only_for_house_number_input(self):
        road = _candidate(importance=0.75, place_type="road")
        assert score_candidate(road, True) == 75 - ROAD_PENALTY
        assert score_candidate(road, False) == 75

    def test_osm_class_does_not_affect_score(self):
        payload = [
            {"lat": "10.77", "lon": "106.70", "importance": 0.5, "type": "residential", "class": "highway"},
            {"lat": "10.77", "lon": "106.70", "importance": 0.5, "type": "yes", "class": "amenity"},
        ]
        street, venue = parse_candidates(payload)
        assert score_candidate(street, True) == 50
        assert score_candidate(venue, True) == 50

    def test_point_bonus(self):
        node = _candidate(osm_type="node")
        assert score_candidate(node, False) == POINT_BONUS


class TestSelectBestCandidate:
    """Tests for select_best_candidate."""

    def test_building_outranks_more_important_road(self):
        road = _candidate(importance=0.9, place_type="road", latitude=Decimal("1"))
        building = _candidate(importance=0.1, place_type="building", latitude=Decimal("2"))
        assert select_best_candidate([road, building], True) is building

    def test_tie_keeps_first(self):
        first = _candidate(importance=0.2, latitude=Decimal("1"))
        second = _candidate(importance=0.2, latitude=Decimal("2"))
        assert select_best_candidate([first, second], False) is first

    def test_negative_scores_still_pick_a_candidate(self):
        road = _candidate(place_type="road")
        assert select_best_candidate([road], True) is road

    def test_empty(self):
        assert select_best_candidate([], True) is None


class TestParseCandidates:
    """Tests for provider payload parsing."""

    def test_reads_nominatim_fields(self):
        payload = [
            {
                "lat": "10.7769",
                "lon": "106.7009",
                "importance": 0.45,
                "type": "office",
                "class": "amenity",
                "osm_type": "way",
                "address": {"road": "Nguyễn Huệ"},
                "display_name": "Nguyễn Huệ, Quận 1",
            }
        ]
        [candidate] = parse_candidates(payload)
        assert candidate.latitude == Decimal("10.7769")
        assert candidate.longitude == Decimal("106.7009")
        assert candidate.place_type == "office"
        assert not hasattr(candidate, "category")

    def test_drops_items_without_coordinates(self):
        payload = [{"lat": "x", "lon": "1"}, {"display_name": "no coords"}, "junk"]
        assert parse_candidates(payload) == []

    def test_non_list_payload(self):
        assert parse_candidates({"error": "rate limited"}) == []
