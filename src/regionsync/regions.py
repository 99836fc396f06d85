"""Region enumeration and the country -> region classifier.

The mapping is static configuration. Countries missing from
:data:`COUNTRY_TO_REGION` classify exactly like unresolved coordinates,
i.e. as :attr:`Region.OVER_WATER`; there is no nearest-region guess.
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from regionsync.models.observation import GeoResolution


class Region(StrEnum):
    """Geographic partitions, each backed by one Gateway list."""

    SEA = "SEA"  # Southeast Asia
    NEA = "NEA"  # Northeast Asia
    SA = "SA"  # South Asia
    OCE = "OCE"  # Oceania
    ME = "ME"  # Middle East
    EU = "EU"  # Europe
    AF = "AF"  # Africa
    NA = "NA"  # North America
    LATAM = "LATAM"  # Latin America
    OVER_WATER = "OW"
    """Sentinel: over water, unmapped country, or geocoding failed."""

    @property
    def is_sentinel(self) -> bool:
        return self is Region.OVER_WATER

    @classmethod
    def real_regions(cls) -> tuple[Region, ...]:
        return tuple(r for r in cls if not r.is_sentinel)


def _build_table() -> MappingProxyType[str, Region]:
    groups: dict[Region, str] = {
        Region.SEA: "SG MY TH VN PH ID MM KH LA BN TL",
        Region.NEA: "JP KR CN TW HK MO MN",
        Region.SA: "IN LK BD PK MV NP BT AF",
        Region.OCE: "AU NZ PG FJ WS TO VU SB NC PF GU MP PW FM MH",
        Region.ME: "AE QA SA OM BH KW IQ IR JO LB IL PS YE",
        Region.EU: (
            "GB FR DE IT ES PT NL BE CH AT SE NO DK FI IE PL CZ GR HU RO BG HR SK SI "
            "LT LV EE LU MT CY IS RS BA ME MK AL UA MD BY TR RU"
        ),
        Region.AF: "ZA KE EG NG ET TZ GH MA TN DZ SN CI MU MG MZ AO CM UG RW ZW BW NA LY SD",
        Region.NA: "US CA MX CU JM HT DO PR TT BS BB PA CR GT HN SV NI BZ",
        Region.LATAM: "BR AR CL CO PE EC VE BO PY UY GY SR",
    }
    table: dict[str, Region] = {}
    for region, codes in groups.items():
        for code in codes.split():
            table[code] = region
    return MappingProxyType(table)


COUNTRY_TO_REGION: MappingProxyType[str, Region] = _build_table()
"""ISO 3166-1 alpha-2 country code -> region. Read-only."""


def determine_region(country_code: str | None) -> Region:
    """Map a country code to its region, or the sentinel when unmapped."""
    if not country_code:
        return Region.OVER_WATER
    return COUNTRY_TO_REGION.get(country_code.strip().upper(), Region.OVER_WATER)


def classify(geo: GeoResolution | None) -> Region:
    """Classify a geocoding result. Pure and total."""
    if geo is None:
        return Region.OVER_WATER
    return determine_region(geo.country_code)
