"""Structured location codes for film/TV markets.

The `value` codes are the only location tokens the query parser may emit and the
only values stored in `profiles.primary_location_structured`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class LocationOption:
    value: str
    label: str
    market: str  # tier1 | tier2 | international
    state: Optional[str] = None
    country: Optional[str] = None
    aliases: tuple = field(default_factory=tuple)


def _loc(value: str, label: str, market: str, state: Optional[str], country: str, *aliases: str) -> LocationOption:
    return LocationOption(value=value, label=label, market=market, state=state, country=country, aliases=tuple(aliases))


# Major film/TV markets
TIER1_MARKETS: List[LocationOption] = [
    _loc("los-angeles-ca", "Los Angeles, CA", "tier1", "CA", "USA",
         "la", "los angeles", "hollywood", "west hollywood", "weho", "burbank", "studio city", "beverly hills", "santa monica"),
    _loc("new-york-ny", "New York, NY", "tier1", "NY", "USA",
         "nyc", "new york", "manhattan", "brooklyn", "queens", "bronx", "long island"),
    _loc("atlanta-ga", "Atlanta, GA", "tier1", "GA", "USA", "atlanta", "atl", "hotlanta", "georgia"),
    _loc("chicago-il", "Chicago, IL", "tier1", "IL", "USA", "chicago", "windy city", "illinois"),
    _loc("miami-fl", "Miami, FL", "tier1", "FL", "USA", "miami", "south beach", "florida"),
    _loc("las-vegas-nv", "Las Vegas, NV", "tier1", "NV", "USA", "las vegas", "vegas", "sin city", "nevada"),
    _loc("austin-tx", "Austin, TX", "tier1", "TX", "USA", "austin", "texas"),
    _loc("orlando-fl", "Orlando, FL", "tier1", "FL", "USA", "orlando", "florida"),
]

# Secondary markets
TIER2_MARKETS: List[LocationOption] = [
    _loc("san-francisco-ca", "San Francisco, CA", "tier2", "CA", "USA", "san francisco", "sf", "bay area", "california"),
    _loc("san-diego-ca", "San Diego, CA", "tier2", "CA", "USA", "san diego", "california"),
    _loc("dallas-tx", "Dallas, TX", "tier2", "TX", "USA", "dallas", "texas"),
    _loc("houston-tx", "Houston, TX", "tier2", "TX", "USA", "houston", "texas"),
    _loc("seattle-wa", "Seattle, WA", "tier2", "WA", "USA", "seattle", "washington"),
    _loc("portland-or", "Portland, OR", "tier2", "OR", "USA", "portland", "oregon"),
    _loc("denver-co", "Denver, CO", "tier2", "CO", "USA", "denver", "boulder", "colorado"),
    _loc("phoenix-az", "Phoenix, AZ", "tier2", "AZ", "USA", "phoenix", "scottsdale", "arizona"),
    _loc("boston-ma", "Boston, MA", "tier2", "MA", "USA", "boston", "cambridge", "massachusetts"),
    _loc("philadelphia-pa", "Philadelphia, PA", "tier2", "PA", "USA", "philadelphia", "philly", "pennsylvania"),
    _loc("nashville-tn", "Nashville, TN", "tier2", "TN", "USA", "nashville", "music city", "tennessee"),
    _loc("charlotte-nc", "Charlotte, NC", "tier2", "NC", "USA", "charlotte", "north carolina"),
    _loc("tampa-fl", "Tampa, FL", "tier2", "FL", "USA", "tampa", "florida"),
    _loc("jacksonville-fl", "Jacksonville, FL", "tier2", "FL", "USA", "jacksonville", "florida"),
    _loc("sacramento-ca", "Sacramento, CA", "tier2", "CA", "USA", "sacramento", "california"),
]

INTERNATIONAL_MARKETS: List[LocationOption] = [
    _loc("vancouver-bc", "Vancouver, BC", "international", "BC", "Canada", "vancouver", "british columbia", "canada"),
    _loc("toronto-on", "Toronto, ON", "international", "ON", "Canada", "toronto", "ontario", "canada"),
    _loc("london-uk", "London, UK", "international", None, "United Kingdom", "london", "england", "uk", "united kingdom"),
    _loc("dublin-ie", "Dublin, Ireland", "international", None, "Ireland", "dublin", "ireland"),
]

ALL_LOCATIONS: List[LocationOption] = [*TIER1_MARKETS, *TIER2_MARKETS, *INTERNATIONAL_MARKETS]

LOCATION_VALUES = frozenset(loc.value for loc in ALL_LOCATIONS)

_BY_VALUE = {loc.value: loc for loc in ALL_LOCATIONS}


def find_location_by_value(value: Optional[str]) -> Optional[LocationOption]:
    if not value:
        return None
    return _BY_VALUE.get(value)


def find_location_by_alias(term: str) -> Optional[LocationOption]:
    """First location whose alias or label contains the (lowercased) term."""
    needle = (term or "").lower().strip()
    if not needle:
        return None
    for loc in ALL_LOCATIONS:
        if any(needle in alias for alias in loc.aliases) or needle in loc.label.lower():
            return loc
    return None


def location_label(value: Optional[str]) -> Optional[str]:
    loc = find_location_by_value(value)
    return loc.label if loc else value
