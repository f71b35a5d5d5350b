# src/buybox/api/schemas.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.property import Property, PropertyType


# --------------------------------------------
# Analyze
# --------------------------------------------

class DealInputsPayload(BaseModel):
    """
    Raw underwriting inputs. Numbers may arrive as strings ("6.5%", "3,850,000");
    services/validation.py does the coercion so both the API and batch paths
    share one set of rules.
    """
    model_config = ConfigDict(extra="allow")

    purchase_price: float | str | None = None
    down_payment_pct: float | str | None = None
    gross_rental_income: float | str | None = None
    operating_expenses: float | str | None = None
    interest_rate: float | str | None = None
    loan_term_years: int | str | None = None


class AnalyzeRequest(BaseModel):
    """One-shot analysis: property, inputs and buy box in a single call."""
    property: Property
    inputs: DealInputsPayload
    buy_box: BuyBoxCriteria
    save: bool = True
    include_market_data: bool = True


class AnalyzeDealRequest(BaseModel):
    """Analysis of a deal created earlier via POST /deals."""
    inputs: DealInputsPayload
    buy_box: BuyBoxCriteria
    include_market_data: bool = True


class AnalyzeResponse(BaseModel):
    """
    Typed response for the analyze endpoints.

    The analyzer returns a rich dict; keep this permissive so new fields
    don't break clients.
    """
    model_config = ConfigDict(extra="allow")

    deal_id: int | None = None
    status: Literal["pass", "fail"]
    results: dict[str, Any]
    evaluation: dict[str, Any]
    recommendations: list[str]


# --------------------------------------------
# Properties / deals
# --------------------------------------------

class PropertyCreate(BaseModel):
    address: str
    property_type: PropertyType
    total_units: int | None = Field(default=None, ge=1)
    year_built: int | None = None


class PropertyCreated(BaseModel):
    property_id: int
    property: Property


class DealCreate(BaseModel):
    property_id: int


class DealItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    deal_id: int
    property_id: int
    status: Literal["analyzing", "pass", "fail"]
    ts: str
    cash_on_cash_return: float | None = None
    processing_time_seconds: float | None = None
    property: Property | None = None


class DealResults(BaseModel):
    model_config = ConfigDict(extra="allow")

    deal: DealItem
    property: Property | None = None
    buy_box: BuyBoxCriteria | None = None
    analysis: dict[str, Any] = Field(default_factory=dict)
    market_comps: list[dict[str, Any]] = Field(default_factory=list)
    documents: list[dict[str, Any]] = Field(default_factory=list)


# --------------------------------------------
# Documents
# --------------------------------------------

DocumentType = Literal["t12", "rent_roll"]


class DocumentUploaded(BaseModel):
    success: bool = True
    document_id: int
    extracted_data: dict[str, Any]


# --------------------------------------------
# Dashboard
# --------------------------------------------

class DashboardStats(BaseModel):
    deals_analyzed: int
    passed_deals: int
    avg_coc_return: float
    avg_processing_time: float
