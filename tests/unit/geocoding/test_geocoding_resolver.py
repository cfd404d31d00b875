"""Unit tests for the multi-strategy geocoding resolver."""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from contract_import.core.config import GeocodingSettings
from contract_import.services.geocoding.address_parser import parse_address
from contract_import.services.geocoding.resolver import (
    DISTRICT_BOUNDS,
    HCMC_BOUNDS,
    GeocodingResolver,
    district_bounds,
)

ADDRESS = "123 Nguyễn Huệ, Phường Bến Nghé, Quận 1, TP.HCM"

HIT = [
    {
        "lat": "10.7769",
        "lon": "106.7009",
        "importance": 0.5,
        "type": "house",
        "address": {"house_number": "123"},
    }
]


def _strategy_of(request: httpx.Request) -> str:
    params = request.url.params
    if "street" in params:
        return "structured"
    if "bounded" in params:
        return "bounded"
    return "simple"


def _client(responses):
    """Mock provider answering per strategy; records the strategies called."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        strategy = _strategy_of(request)
        calls.append(strategy)
        status, body = responses.get(strategy, (200, []))
        return httpx.Response(status, json=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), calls


@pytest.fixture
def no_pause():
    with patch("contract_import.services.geocoding.resolver.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestGeocodingResolver:
    """Tests for GeocodingResolver.resolve."""

    @pytest.mark.asyncio
    async def test_structured_hit_stops_early(self, no_pause):
        client, calls = _client({"structured": (200, HIT)})
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        result = await resolver.resolve(ADDRESS)

        assert result is not None
        assert result.strategy == "structured"
        assert result.latitude == Decimal("10.7769")
        assert calls == ["structured"]
        assert no_pause.await_count == 1

    @pytest.mark.asyncio
    async def test_falls_back_in_order(self, no_pause):
        client, calls = _client({"simple": (200, HIT)})
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        result = await resolver.resolve(ADDRESS)

        assert result.strategy == "simple"
        assert calls == ["structured", "bounded", "simple"]
        assert no_pause.await_count == 3

    @pytest.mark.asyncio
    async def test_simple_query_leaves_out_house_number(self, no_pause):
        queries = []

        def handler(request: httpx.Request) -> httpx.Response:
            if _strategy_of(request) == "simple":
                queries.append(request.url.params["q"])
                return httpx.Response(200, json=HIT)
            return httpx.Response(200, json=[])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        await resolver.resolve(ADDRESS)

        assert queries == ["Nguyễn Huệ, Quận 1, Ho Chi Minh City, Vietnam"]

    @pytest.mark.asyncio
    async def test_provider_errors_exhaust_to_none(self, no_pause):
        client, calls = _client({
            "structured": (500, {"error": "boom"}),
            "bounded": (429, {"error": "slow down"}),
            "simple": (200, []),
        })
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        assert await resolver.resolve(ADDRESS) is None
        assert calls == ["structured", "bounded", "simple"]

    @pytest.mark.asyncio
    async def test_transport_error_is_not_raised(self, no_pause):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        assert await resolver.resolve(ADDRESS) is None
        assert no_pause.await_count == 3

    @pytest.mark.asyncio
    async def test_bounded_skipped_without_district(self, no_pause):
        client, calls = _client({})
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        assert await resolver.resolve("Khu công nghiệp Tân Tạo") is None
        assert calls == ["structured", "simple"]

    @pytest.mark.asyncio
    async def test_blank_address_makes_no_request(self, no_pause):
        client, calls = _client({})
        resolver = GeocodingResolver(client=client, config=GeocodingSettings())

        assert await resolver.resolve("   ") is None
        assert calls == []


class TestDistrictBounds:
    """Tests for district bounding boxes."""

    def test_known_district(self):
        assert district_bounds(parse_address(ADDRESS)) == DISTRICT_BOUNDS["1"]

    def test_unknown_hcmc_district_uses_city_box(self):
        parsed = parse_address("5 Nguyễn Văn Linh, Quận 7, Hồ Chí Minh")
        assert district_bounds(parsed) == HCMC_BOUNDS

    def test_other_city_has_no_box(self):
        parsed = parse_address("10 Trần Phú, Quận Hải Châu, Đà Nẵng")
        assert district_bounds(parsed) is None

    def test_pause_never_below_one_second(self):
        assert GeocodingSettings(GEOCODING_PAUSE_SECONDS=0.2).pause_seconds == 1.0
