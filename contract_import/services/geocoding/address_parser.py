"""Splits Vietnamese street addresses into their administrative parts."""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_CITY = "Ho Chi Minh City"

_HOUSE_NUMBER = re.compile(r"^(\d+[A-Z]?(?:/\d+[A-Z]?)*)\s+(.+)$", re.IGNORECASE)
_WARD = re.compile(r"^(?:phường|phuong|p\.|p\s+\d)", re.IGNORECASE)
_DISTRICT = re.compile(r"^(?:quận|quan|huyện|huyen|thành\s*phố|thị\s*xã|q\.)", re.IGNORECASE)

# Alias (lowercase, as contained in the segment) -> canonical city name.
_CITY_ALIASES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("hồ chí minh", "ho chi minh", "tp.hcm", "tp hcm", "tphcm", "hcm", "sài gòn", "saigon"), DEFAULT_CITY),
    (("hà nội", "ha noi", "hanoi"), "Hanoi"),
    (("đà nẵng", "da nang"), "Da Nang"),
    (("cần thơ", "can tho"), "Can Tho"),
    (("hải phòng", "hai phong"), "Hai Phong"),
)


@dataclass(frozen=True)
class ParsedAddress:
    """Administrative components of an address."""

    house_number: Optional[str]
    street: Optional[str]
    ward: Optional[str]
    district: Optional[str]
    city: str

    @property
    def street_line(self) -> Optional[str]:
        """House number and street, e.g. ``123 Nguyễn Huệ``."""
        if not self.street:
            return None
        if self.house_number:
            return f"{self.house_number} {self.street}"
        return self.street


def _known_city(value: str) -> Optional[str]:
    lowered = value.strip().lower()
    for aliases, canonical in _CITY_ALIASES:
        if any(alias in lowered for alias in aliases):
            return canonical
    return None


def normalize_city(value: Optional[str]) -> str:
    """Map known city spellings to a canonical name, passing others through."""
    if not value or not value.strip():
        return DEFAULT_CITY
    return _known_city(value) or value.strip()


def parse_address(address: Optional[str]) -> ParsedAddress:
    """Parse a comma separated address.

    Args:
        address: e.g. ``123 Nguyễn Huệ, Phường Bến Nghé, Quận 1, TP.HCM``

    Returns:
        ParsedAddress; the city is ``Ho Chi Minh City`` when no segment
        after the street names a city.
    """
    parts = [p.strip() for p in (address or "").split(",") if p.strip()]
    if not parts:
        return ParsedAddress(None, None, None, None, DEFAULT_CITY)

    house_number, street = None, parts[0]
    match = _HOUSE_NUMBER.match(parts[0])
    if match:
        house_number, street = match.group(1), match.group(2).strip()

    rest = parts[1:]
    ward = next((p for p in rest if _WARD.match(p)), None)
    district = next(
        (p for p in rest if p != ward and _DISTRICT.match(p) and _known_city(p) is None),
        None,
    )

    if not rest or rest[-1] in (ward, district):
        city = DEFAULT_CITY
    else:
        city = normalize_city(rest[-1])

    return ParsedAddress(
        house_number=house_number,
        street=street,
        ward=ward,
        district=district,
        city=city,
    )
