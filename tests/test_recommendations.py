from buybox.domain.recommendations import HIGH_CAP_RATE, HIGH_COC, STRONG_DSCR, generate_recommendations
from buybox.domain.rules import RECOMMEND_RAISE_COC, evaluate
from buybox.domain.underwriting import EvaluationResult
from fixtures.deals import property_1995, scenario_b_criteria, strong_results


def test_strong_deal_gets_all_upside_notes_in_order():
    results = strong_results()  # dscr 1.82, cap 10%, coc 15%
    ev = evaluate(results, scenario_b_criteria(), property_1995())

    recs = generate_recommendations(results, ev)

    assert recs == [STRONG_DSCR, HIGH_CAP_RATE, HIGH_COC]


def test_evaluation_recommendations_come_first():
    results = strong_results(cash_on_cash_return=4.0)
    ev = evaluate(results, scenario_b_criteria(), property_1995())

    recs = generate_recommendations(results, ev)

    assert recs[0] == RECOMMEND_RAISE_COC
    assert recs[1:] == [STRONG_DSCR, HIGH_CAP_RATE]


def test_thresholds_are_strict():
    results = strong_results(dscr=1.5, cap_rate=7.0, cash_on_cash_return=12.0)
    ev = EvaluationResult(passed=True)

    assert generate_recommendations(results, ev) == []


def test_does_not_mutate_evaluation():
    ev = EvaluationResult(passed=False, failed_criteria=["x"], recommendations=["keep me"])

    recs = generate_recommendations(strong_results(), ev)

    assert ev.recommendations == ["keep me"]
    assert recs[0] == "keep me"
    assert len(recs) == 4
