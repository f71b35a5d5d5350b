from __future__ import annotations

import time
from dataclasses import asdict
from typing import Any

from buybox.adapters.logging_utils import bind, get_logger
from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.finance import calculate_metrics
from buybox.domain.ports import (
    DealRepository,
    DocumentRecord,
    ExtractedFinancials,
    MarketData,
    MarketDataProvider,
)
from buybox.domain.property import Property
from buybox.domain.recommendations import generate_recommendations
from buybox.domain.rules import evaluate
from buybox.domain.underwriting import DealInputs, EvaluationResult, UnderwritingResults
from buybox.services.validation import validate_and_prepare_payload

logger = get_logger(__name__)


class RecordNotFound(LookupError):
    """A deal or property id that the repository does not know about."""


def run_underwriting(
    inputs: DealInputs,
    criteria: BuyBoxCriteria,
    property: Property,
) -> tuple[UnderwritingResults, EvaluationResult, list[str]]:
    """
    The pure chain: metrics -> buy box verdict -> guidance.
    No I/O, safe to call from any thread.
    """
    results = calculate_metrics(inputs)
    evaluation = evaluate(results, criteria, property)
    recommendations = generate_recommendations(results, evaluation)
    return results, evaluation, recommendations


def latest_t12_extraction(documents: list[DocumentRecord]) -> ExtractedFinancials | None:
    """Most recent T-12 upload that actually yielded numbers."""
    for doc in reversed(documents):
        if doc.get("file_type") == "t12" and doc.get("extracted_data"):
            return ExtractedFinancials(**doc["extracted_data"])  # type: ignore[typeddict-item]
    return None


def analyze_deal(
    *,
    raw_inputs: dict[str, Any],
    criteria: BuyBoxCriteria,
    property: Property,
    market_data: MarketDataProvider | None = None,
    repo: DealRepository | None = None,
    deal_id: int | None = None,
    extracted: ExtractedFinancials | None = None,
    save: bool = True,
) -> dict[str, Any]:
    """
    Validate a raw payload, underwrite it against the buy box and (optionally)
    persist the outcome.

    Preview mode: pass repo=None or save=False and nothing is written.
    When saving without a deal_id, a property + deal pair is created first.
    """
    t0 = time.perf_counter()

    inputs = validate_and_prepare_payload(raw_inputs, extracted=extracted)
    results, evaluation, recommendations = run_underwriting(inputs, criteria, property)

    market: MarketData | None = None
    if market_data is not None:
        market = market_data.fetch_market_data(property.address)

    status = "pass" if evaluation.passed else "fail"
    elapsed = time.perf_counter() - t0

    analysis: dict[str, Any] = {
        "deal_id": deal_id,
        "status": status,
        "property": property.model_dump(),
        "inputs": asdict(inputs),
        "buy_box": criteria.model_dump(),
        "results": asdict(results),
        "evaluation": asdict(evaluation),
        "recommendations": recommendations,
        "market_data": market,
        "processing_time_seconds": elapsed,
    }

    if save and repo is not None:
        if deal_id is None:
            property_id = repo.create_property(property)
            deal_id = repo.create_deal(property_id)
            analysis["deal_id"] = deal_id
        repo.save_criteria(deal_id, criteria)
        if market is not None and market["rent_comps"]:
            repo.add_comparables(deal_id, market["rent_comps"], source=getattr(market_data, "source", "unknown"))
        repo.save_analysis(
            deal_id,
            status=status,
            inputs=analysis["inputs"],
            result=analysis,
            processing_time_seconds=elapsed,
        )

    bind(logger, deal_id=analysis["deal_id"], status=status).info(
        "deal analyzed",
        extra={
            "context": {
                "cap_rate": results.cap_rate,
                "coc": results.cash_on_cash_return,
                "dscr": results.dscr,
                "failed": len(evaluation.failed_criteria),
                "risk_flags": len(results.risk_flags),
                "saved": bool(save and repo is not None),
            }
        },
    )
    return analysis


def analyze_saved_deal(
    deal_id: int,
    *,
    raw_inputs: dict[str, Any],
    criteria: BuyBoxCriteria,
    repo: DealRepository,
    market_data: MarketDataProvider | None = None,
) -> dict[str, Any]:
    """
    Underwrite a deal that already exists in the repository, seeding missing
    income / expense figures from its most recent T-12 upload.
    """
    deal = repo.get_deal(deal_id)
    if deal is None:
        raise RecordNotFound(f"Deal {deal_id} not found")
    prop = repo.get_property(deal["property_id"])
    if prop is None:
        raise RecordNotFound(f"Property {deal['property_id']} not found")

    extracted = latest_t12_extraction(repo.list_documents(deal_id))

    return analyze_deal(
        raw_inputs=raw_inputs,
        criteria=criteria,
        property=prop,
        market_data=market_data,
        repo=repo,
        deal_id=deal_id,
        extracted=extracted,
        save=True,
    )
