"""Address to coordinate resolution against a Nominatim-compatible service.

Three strategies are tried in order and the first one that yields a
candidate wins:

1. structured: street / city / state / country fields
2. bounded: free text restricted to a known district bounding box
3. simple: free text ``street, district, city, country``

Every HTTP call is followed by a fixed pause to stay within the provider's
one-request-per-second usage policy.
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from contract_import.core.config import GeocodingSettings, settings
from contract_import.services.geocoding.address_parser import ParsedAddress, parse_address
from contract_import.services.geocoding.candidate_scoring import (
    GeoCandidate,
    parse_candidates,
    select_best_candidate,
)
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)

HCMC_NAMES = ("ho chi minh", "hồ chí minh", "sài gòn", "saigon")

# minlon, minlat, maxlon, maxlat
HCMC_BOUNDS = "106.60,10.70,106.80,10.85"
DISTRICT_BOUNDS: Dict[str, str] = {
    "1": "106.690,10.760,106.710,10.785",
    "3": "106.665,10.765,106.695,10.795",
    "4": "106.695,10.745,106.720,10.770",
    "5": "106.655,10.745,106.685,10.770",
    "10": "106.655,10.765,106.685,10.795",
    "bình thạnh": "106.690,10.790,106.730,10.830",
    "binh thanh": "106.690,10.790,106.730,10.830",
    "phú nhuận": "106.670,10.790,106.705,10.820",
    "phu nhuan": "106.670,10.790,106.705,10.820",
    "tân bình": "106.620,10.775,106.670,10.825",
    "tan binh": "106.620,10.775,106.670,10.825",
}


@dataclass(frozen=True)
class Coordinates:
    """A resolved point."""

    latitude: Decimal
    longitude: Decimal
    strategy: str


def district_key(district: str) -> str:
    """``Quận 1`` and ``Q.1`` both become ``1``; named districts are lowercased."""
    value = district.strip().lower()
    for prefix in ("quận", "q."):
        if value.startswith(prefix):
            value = value[len(prefix):]
    return value.strip()


def district_bounds(parsed: ParsedAddress) -> Optional[str]:
    """Bounding box for the parsed district, or the whole city when unknown.

    Only Ho Chi Minh City districts are tabulated; other cities have no box.
    """
    if not parsed.district:
        return None
    if not any(name in parsed.city.lower() for name in HCMC_NAMES):
        return None
    return DISTRICT_BOUNDS.get(district_key(parsed.district), HCMC_BOUNDS)


class GeocodingResolver:
    """Resolves free-text addresses to coordinates.

    Args:
        client: Optional shared httpx client; one is opened per call otherwise.
        config: Geocoding settings; the application settings by default.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[GeocodingSettings] = None,
    ):
        self.client = client
        self.config = config or settings.geocoding
        self.search_url = f"{self.config.base_url.rstrip('/')}/search"
        self.headers = {"User-Agent": self.config.user_agent, "Accept": "application/json"}
        self._strategies: Tuple[Tuple[str, Callable[[ParsedAddress], Optional[Dict[str, Any]]]], ...] = (
            ("structured", self._structured_params),
            ("bounded", self._bounded_params),
            ("simple", self._simple_params),
        )

    def _structured_params(self, parsed: ParsedAddress) -> Optional[Dict[str, Any]]:
        if not parsed.street:
            return None
        params = {
            "street": parsed.street_line,
            "city": parsed.district,
            "state": parsed.city,
            "country": self.config.country,
            "format": "json",
            "addressdetails": 1,
            "limit": self.config.structured_limit,
        }
        return {k: v for k, v in params.items() if v}

    def _bounded_params(self, parsed: ParsedAddress) -> Optional[Dict[str, Any]]:
        bounds = district_bounds(parsed)
        if not parsed.street or bounds is None:
            return None
        return {
            "q": f"{parsed.street_line}, {parsed.district}, {parsed.city}",
            "format": "json",
            "addressdetails": 1,
            "limit": self.config.free_text_limit,
            "countrycodes": self.config.country_code,
            "viewbox": bounds,
            "bounded": 1,
        }

    def _simple_params(self, parsed: ParsedAddress) -> Optional[Dict[str, Any]]:
        if not parsed.street:
            return None
        parts = [parsed.street, parsed.district, parsed.city, self.config.country]
        return {
            "q": ", ".join(p for p in parts if p),
            "format": "json",
            "addressdetails": 1,
            "limit": self.config.free_text_limit,
            "countrycodes": self.config.country_code,
        }

    async def _search(self, client: httpx.AsyncClient, strategy: str, params: Dict[str, Any]) -> List[GeoCandidate]:
        """Issue one search request; provider failures yield no candidates."""
        try:
            response = await client.get(
                self.search_url,
                params=params,
                headers=self.headers,
                timeout=self.config.timeout_seconds,
            )
            if response.status_code != 200:
                LOGGER.warning(
                    f"Geocoding {strategy} search returned {response.status_code}",
                    extra={"strategy": strategy, "status_code": response.status_code},
                )
                return []
            return parse_candidates(response.json())
        except (httpx.HTTPError, ValueError) as e:
            LOGGER.warning(
                f"Geocoding {strategy} search failed: {str(e)}",
                extra={"strategy": strategy},
            )
            return []
        finally:
            await asyncio.sleep(self.config.pause_seconds)

    async def _run(self, client: httpx.AsyncClient, address: str) -> Optional[Coordinates]:
        parsed = parse_address(address)
        has_house_number = parsed.house_number is not None

        for strategy, build_params in self._strategies:
            params = build_params(parsed)
            if params is None:
                LOGGER.debug(f"Skipping {strategy} geocoding strategy", extra={"strategy": strategy})
                continue

            candidates = await self._search(client, strategy, params)
            if not candidates:
                LOGGER.info(f"No {strategy} geocoding candidates", extra={"address": address})
                continue

            best = select_best_candidate(candidates, has_house_number)
            LOGGER.info(
                f"Resolved address with {strategy} strategy",
                extra={"address": address, "candidates": len(candidates)},
            )
            return Coordinates(latitude=best.latitude, longitude=best.longitude, strategy=strategy)

        LOGGER.warning("All geocoding strategies exhausted", extra={"address": address})
        return None

    async def resolve(self, address: Optional[str]) -> Optional[Coordinates]:
        """Resolve an address to coordinates.

        Args:
            address: Free-text address

        Returns:
            Coordinates, or None when no strategy found a candidate
        """
        if not address or not address.strip():
            return None
        if self.client is not None:
            return await self._run(self.client, address)
        async with httpx.AsyncClient() as client:
            return await self._run(client, address)
