import pytest

from buybox.domain.finance import (
    HIGH_OPEX_FLAG,
    LOW_CAP_RATE_FLAG,
    LOW_COC_FLAG,
    LOW_DSCR_FLAG,
    annual_debt_service,
    annuity_payment,
    calculate_metrics,
)
from buybox.domain.underwriting import DealInputs
from fixtures.deals import scenario_a_inputs


def _inputs(**kw) -> DealInputs:
    base = dict(
        purchase_price=1_000_000.0,
        down_payment_pct=25.0,
        gross_rental_income=150_000.0,
        operating_expenses=50_000.0,
        interest_rate=6.0,
        loan_term_years=30,
    )
    base.update(kw)
    return DealInputs(**base)


def test_scenario_a_core_numbers():
    m = calculate_metrics(scenario_a_inputs())

    assert m.down_payment == pytest.approx(962_500.0)
    assert m.loan_amount == pytest.approx(2_887_500.0)
    assert m.net_operating_income == pytest.approx(264_600.0)
    assert m.cap_rate == pytest.approx(6.8727, abs=0.01)

    assert m.annual_debt_service == pytest.approx(219_000.0, abs=500.0)
    assert m.cash_flow_before_tax == pytest.approx(45_600.0, abs=500.0)
    assert m.cash_on_cash_return == pytest.approx(4.7, abs=0.5)
    assert m.dscr == pytest.approx(264_600.0 / m.annual_debt_service)


def test_scenario_a_only_low_coc_flag():
    m = calculate_metrics(scenario_a_inputs())

    # DSCR ~1.21, cap ~6.87%, opex ratio ~43%, CoC ~4.74%
    assert m.risk_flags == [LOW_COC_FLAG]


def test_annuity_payment_matches_textbook_value():
    # $100k, 6% APR, 30 years -> $599.55 / month
    pmt = annuity_payment(0.06 / 12, 360, 100_000.0)
    assert pmt == pytest.approx(599.55, abs=0.01)


def test_zero_interest_is_straight_line():
    m = calculate_metrics(_inputs(interest_rate=0.0, loan_term_years=25))

    assert m.annual_debt_service == pytest.approx(m.loan_amount / 25)
    assert m.dscr == pytest.approx(m.net_operating_income / m.annual_debt_service)


def test_all_cash_deal_has_no_debt_service():
    m = calculate_metrics(_inputs(down_payment_pct=100.0))

    assert m.loan_amount == pytest.approx(0.0)
    assert m.annual_debt_service == 0.0
    # no debt -> DSCR degrades to 0, which reads as "low"
    assert m.dscr == 0.0
    assert LOW_DSCR_FLAG in m.risk_flags
    assert m.cash_on_cash_return == pytest.approx(m.cash_flow_before_tax / m.down_payment * 100)


def test_zero_down_payment_coc_is_zero():
    m = calculate_metrics(_inputs(down_payment_pct=0.0))

    assert m.down_payment == 0.0
    assert m.cash_on_cash_return == 0.0
    assert LOW_COC_FLAG in m.risk_flags


def test_zero_income_no_division_error():
    # Scenario C: nothing coming in, nothing going out
    m = calculate_metrics(_inputs(gross_rental_income=0.0, operating_expenses=0.0))

    assert m.cap_rate == 0.0
    assert HIGH_OPEX_FLAG not in m.risk_flags


def test_zero_income_with_expenses_skips_opex_flag():
    m = calculate_metrics(_inputs(gross_rental_income=0.0, operating_expenses=40_000.0))

    assert m.net_operating_income == -40_000.0
    assert m.cap_rate < 0
    assert HIGH_OPEX_FLAG not in m.risk_flags


def test_zero_price_degrades_to_zeros():
    m = calculate_metrics(_inputs(purchase_price=0.0))

    assert m.cap_rate == 0.0
    assert m.cash_on_cash_return == 0.0
    assert m.dscr == 0.0
    assert m.annual_debt_service == 0.0


def test_flags_keep_fixed_order_when_all_fire():
    m = calculate_metrics(
        _inputs(
            purchase_price=5_000_000.0,
            gross_rental_income=200_000.0,
            operating_expenses=150_000.0,
            interest_rate=7.5,
        )
    )
    assert m.risk_flags == [LOW_DSCR_FLAG, LOW_CAP_RATE_FLAG, HIGH_OPEX_FLAG, LOW_COC_FLAG]


def test_opex_exactly_half_is_not_flagged():
    m = calculate_metrics(_inputs(gross_rental_income=100_000.0, operating_expenses=50_000.0))
    assert HIGH_OPEX_FLAG not in m.risk_flags


def test_very_long_term_tends_to_interest_only():
    # (1+r)^n would overflow a float here
    m = calculate_metrics(_inputs(purchase_price=1_000_000.0, interest_rate=6.5, loan_term_years=20_000))

    assert m.loan_amount == pytest.approx(750_000.0)
    assert m.annual_debt_service == pytest.approx(750_000.0 * 0.065)
    assert m.dscr == pytest.approx(m.net_operating_income / m.annual_debt_service)


def test_rate_below_float_resolution_is_straight_line():
    pmt = annuity_payment(1e-20, 360, 360_000.0)
    assert pmt == pytest.approx(1_000.0)


def test_annual_debt_service_uses_percent_units():
    assert annual_debt_service(100_000.0, 6.0, 30) == pytest.approx(599.55 * 12, abs=0.5)
    assert annual_debt_service(0.0, 6.0, 30) == 0.0


def test_inputs_are_not_mutated():
    inputs = scenario_a_inputs()
    calculate_metrics(inputs)
    assert inputs == scenario_a_inputs()
