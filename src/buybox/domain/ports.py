# src/buybox/domain/ports.py
from __future__ import annotations

from typing import Any, Literal, Protocol, TypedDict

from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.property import Property

DealStatus = Literal["analyzing", "pass", "fail"]
DocumentType = Literal["t12", "rent_roll"]


# ----------------------------
# Document extraction
# ----------------------------

class ExtractedFinancials(TypedDict, total=False):
    gross_rental_income: float
    operating_expenses: float
    net_operating_income: float
    vacancy_rate: float
    total_units: int


class ExtractedRentRoll(TypedDict, total=False):
    unit_mix: dict[str, int]
    average_rent: float
    occupancy_rate: float
    total_units: int


class DocumentExtractor(Protocol):
    def extract_t12(self, content: bytes, filename: str) -> ExtractedFinancials:
        ...

    def extract_rent_roll(self, content: bytes, filename: str) -> ExtractedRentRoll:
        ...


# ----------------------------
# Market data
# ----------------------------

class RentComparable(TypedDict):
    property_name: str
    address: str
    rent_per_sqft: float
    cap_rate: float | None
    distance: float


class AreaInsights(TypedDict):
    neighborhood_score: int
    school_rating: int
    crime_index: Literal["Low", "Medium", "High"]
    walk_score: int
    unemployment_rate: float
    median_income: float


class PriceTrend(TypedDict):
    year: int
    average_price: float
    appreciation_rate: float


class MarketData(TypedDict):
    rent_comps: list[RentComparable]
    area_insights: AreaInsights | None
    price_trends: list[PriceTrend]


class MarketDataProvider(Protocol):
    def fetch_market_data(self, address: str) -> MarketData:
        ...


# ----------------------------
# Deal persistence
# ----------------------------

class DealRecord(TypedDict, total=False):
    deal_id: int
    property_id: int
    status: DealStatus
    ts: str
    inputs: dict[str, Any]
    result: dict[str, Any]
    cash_on_cash_return: float | None
    processing_time_seconds: float | None


class DocumentRecord(TypedDict, total=False):
    document_id: int
    deal_id: int
    file_name: str
    file_type: DocumentType
    file_size: int
    extracted_data: dict[str, Any]
    uploaded_at: str


class DealRepository(Protocol):
    def create_property(self, prop: Property) -> int:
        ...

    def get_property(self, property_id: int) -> Property | None:
        ...

    def create_deal(self, property_id: int) -> int:
        ...

    def get_deal(self, deal_id: int) -> DealRecord | None:
        ...

    def save_criteria(self, deal_id: int, criteria: BuyBoxCriteria) -> None:
        ...

    def get_criteria(self, deal_id: int) -> BuyBoxCriteria | None:
        ...

    def save_analysis(
        self,
        deal_id: int,
        *,
        status: DealStatus,
        inputs: dict[str, Any],
        result: dict[str, Any],
        processing_time_seconds: float,
    ) -> None:
        ...

    def add_document(self, deal_id: int, document: DocumentRecord) -> int:
        ...

    def list_documents(self, deal_id: int) -> list[DocumentRecord]:
        ...

    def add_comparables(self, deal_id: int, comps: list[RentComparable], source: str) -> int:
        ...

    def list_comparables(self, deal_id: int) -> list[dict[str, Any]]:
        ...

    def list_recent(self, limit: int = 50) -> list[DealRecord]:
        ...

    def dashboard_stats(self) -> dict[str, float]:
        ...
