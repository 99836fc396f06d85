from __future__ import annotations

import pytest

from regionsync.models.observation import GeoResolution
from regionsync.regions import COUNTRY_TO_REGION, Region, classify, determine_region


def test_every_table_code_classifies_to_its_region() -> None:
    for code, region in COUNTRY_TO_REGION.items():
        assert classify(GeoResolution(country_code=code)) == region


def test_table_never_maps_to_the_sentinel() -> None:
    assert Region.OVER_WATER not in set(COUNTRY_TO_REGION.values())
    assert set(COUNTRY_TO_REGION.values()) == set(Region.real_regions())


@pytest.mark.parametrize("code", ["XK", "AQ", "GL", "ZZ"])
def test_unmapped_country_is_sentinel(code: str) -> None:
    assert code not in COUNTRY_TO_REGION
    assert classify(GeoResolution(country_code=code, country="Somewhere")) == Region.OVER_WATER


def test_absent_geo_is_sentinel() -> None:
    assert classify(None) == Region.OVER_WATER
    assert classify(GeoResolution.unresolved()) == Region.OVER_WATER
    assert classify(GeoResolution(body_of_water="Bay of Bengal")) == Region.OVER_WATER


def test_lowercase_provider_codes_are_normalized() -> None:
    assert classify(GeoResolution(country_code="sg")) == Region.SEA
    assert determine_region(" gb ") == Region.EU


def test_code_collisions_follow_country_semantics() -> None:
    # Country codes that share a name with a region code map by country.
    assert determine_region("SA") == Region.ME  # Saudi Arabia
    assert determine_region("NA") == Region.AF  # Namibia
    assert determine_region("AF") == Region.SA  # Afghanistan


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        COUNTRY_TO_REGION["XX"] = Region.EU  # type: ignore[index]


def test_sentinel_flag() -> None:
    assert Region.OVER_WATER.is_sentinel
    assert Region.OVER_WATER.value == "OW"
    assert not any(r.is_sentinel for r in Region.real_regions())
    assert len(Region.real_regions()) == 9
