# src/buybox/adapters/market_data.py
from __future__ import annotations

import copy
from dataclasses import dataclass, field

from buybox.domain.ports import MarketData, RentComparable

# Fixed comp set used until a licensed comps feed is connected.
_DEFAULT_RENT_COMPS: list[RentComparable] = [
    {
        "property_name": "Oak Street Commons",
        "address": "456 Oak Street",
        "rent_per_sqft": 1.85,
        "cap_rate": 5.8,
        "distance": 0.3,
    },
    {
        "property_name": "Riverside Place",
        "address": "789 River Road",
        "rent_per_sqft": 1.92,
        "cap_rate": 6.1,
        "distance": 0.7,
    },
    {
        "property_name": "Downtown Lofts",
        "address": "321 Main Avenue",
        "rent_per_sqft": 2.15,
        "cap_rate": 5.4,
        "distance": 1.2,
    },
]


@dataclass
class StaticMarketDataProvider:
    """
    Deterministic market data source. Comps are for display only and are
    never fed into the underwriting math.
    """

    rent_comps: list[RentComparable] = field(default_factory=lambda: copy.deepcopy(_DEFAULT_RENT_COMPS))
    source: str = "static"

    def fetch_market_data(self, address: str) -> MarketData:
        return MarketData(
            rent_comps=copy.deepcopy(self.rent_comps),
            area_insights=None,
            price_trends=[],
        )
