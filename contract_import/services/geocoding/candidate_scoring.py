"""Ranking of place-search candidates."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

RELEVANCE_MULTIPLIER = 100
HOUSE_NUMBER_BONUS = 300
BUILDING_BONUS = 150
OFFICE_BONUS = 120
POINT_BONUS = 50
ROAD_PENALTY = 100

BUILDING_TYPES = frozenset({"house", "building"})
OFFICE_TYPES = frozenset({"office", "amenity"})
ROAD_TYPES = frozenset({"road", "highway"})


@dataclass(frozen=True)
class GeoCandidate:
    """One place returned by the geocoding provider."""

    latitude: Decimal
    longitude: Decimal
    importance: float = 0.0
    place_type: Optional[str] = None
    osm_type: Optional[str] = None
    address: Dict[str, Any] = field(default_factory=dict)
    display_name: Optional[str] = None

    @classmethod
    def from_search_result(cls, item: Dict[str, Any]) -> Optional["GeoCandidate"]:
        """Build a candidate from a Nominatim ``/search`` JSON item.

        Returns:
            None when the item has no usable coordinates
        """
        try:
            latitude = Decimal(str(item["lat"]))
            longitude = Decimal(str(item["lon"]))
        except (KeyError, InvalidOperation, TypeError):
            return None
        return cls(
            latitude=latitude,
            longitude=longitude,
            importance=float(item.get("importance") or 0.0),
            place_type=item.get("type"),
            osm_type=item.get("osm_type"),
            address=item.get("address") or {},
            display_name=item.get("display_name"),
        )


def score_candidate(candidate: GeoCandidate, input_has_house_number: bool) -> float:
    """Score a candidate; higher means a more precise match.

    Args:
        candidate: Provider result
        input_has_house_number: Whether the searched address carried a house number

    Returns:
        Heuristic score
    """
    score = candidate.importance * RELEVANCE_MULTIPLIER
    if candidate.address.get("house_number"):
        score += HOUSE_NUMBER_BONUS

    kinds = {candidate.place_type} if candidate.place_type else set()
    if kinds & BUILDING_TYPES:
        score += BUILDING_BONUS
    elif kinds & OFFICE_TYPES:
        score += OFFICE_BONUS

    if candidate.osm_type == "node":
        score += POINT_BONUS

    if input_has_house_number and kinds & ROAD_TYPES:
        score -= ROAD_PENALTY
    return score


def select_best_candidate(
    candidates: Sequence[GeoCandidate], input_has_house_number: bool
) -> Optional[GeoCandidate]:
    """Return the highest scoring candidate; ties go to the earliest one."""
    best: Optional[GeoCandidate] = None
    best_score = 0.0
    for candidate in candidates:
        score = score_candidate(candidate, input_has_house_number)
        if best is None or score > best_score:
            best, best_score = candidate, score
    return best


def parse_candidates(payload: Any) -> List[GeoCandidate]:
    """Turn a provider response body into candidates, dropping unusable items."""
    if not isinstance(payload, list):
        return []
    candidates = []
    for item in payload:
        if isinstance(item, dict):
            candidate = GeoCandidate.from_search_result(item)
            if candidate is not None:
                candidates.append(candidate)
    return candidates
