from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.property import Property
from buybox.domain.underwriting import EvaluationResult, UnderwritingResults

RECOMMEND_RAISE_COC = "Consider reducing purchase price or increasing rents to improve cash-on-cash return"
RECOMMEND_RAISE_NOI = "Negotiate lower purchase price or identify value-add opportunities to increase NOI"
RECOMMEND_RESERVES = "Consider higher reserves for capital improvements due to property age"
RECOMMEND_ADDRESS_FLAGS = "Address identified risk flags to strengthen the investment thesis"


def evaluate(results: UnderwritingResults, criteria: BuyBoxCriteria, property: Property) -> EvaluationResult:
    """
    Check a deal's metrics against the investor's buy box.

    Each criterion is checked independently, in a fixed order; every miss adds
    one failure message and one recommendation. Risk flags only add guidance,
    they never fail the deal on their own.
    """
    failed: list[str] = []
    recommendations: list[str] = []

    # 1. Cash-on-cash
    if results.cash_on_cash_return < criteria.min_cash_on_cash_return:
        failed.append(
            f"Cash-on-Cash Return: {results.cash_on_cash_return:.2f}% "
            f"< {criteria.min_cash_on_cash_return:.2f}% (required)"
        )
        recommendations.append(RECOMMEND_RAISE_COC)

    # 2. Cap rate
    if results.cap_rate < criteria.min_cap_rate:
        failed.append(f"Cap Rate: {results.cap_rate:.2f}% < {criteria.min_cap_rate:.2f}% (required)")
        recommendations.append(RECOMMEND_RAISE_NOI)

    # 3. Vintage (only when we know it)
    if property.year_built is not None and property.year_built < criteria.year_built_threshold:
        failed.append(f"Year Built: {property.year_built} < {criteria.year_built_threshold} (minimum)")
        recommendations.append(RECOMMEND_RESERVES)

    if results.risk_flags:
        recommendations.append(RECOMMEND_ADDRESS_FLAGS)

    return EvaluationResult(
        passed=not failed,
        failed_criteria=failed,
        recommendations=recommendations,
    )
