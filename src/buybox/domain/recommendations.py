from buybox.domain.underwriting import EvaluationResult, UnderwritingResults

STRONG_DSCR = "Strong debt coverage allows for potential leverage optimization"
HIGH_CAP_RATE = "Above-market cap rate suggests good value opportunity"
HIGH_COC = "Excellent cash-on-cash return indicates strong cash flow potential"


def generate_recommendations(results: UnderwritingResults, evaluation: EvaluationResult) -> list[str]:
    recs = list(evaluation.recommendations)

    # Performance-based upside notes; thresholds may overlap, so each is independent
    if results.dscr > 1.5:
        recs.append(STRONG_DSCR)
    if results.cap_rate > 7:
        recs.append(HIGH_CAP_RATE)
    if results.cash_on_cash_return > 12:
        recs.append(HIGH_COC)

    return recs
