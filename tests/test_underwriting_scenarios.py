# tests/test_underwriting_scenarios.py

import pytest
from hypothesis import given, strategies as st

from buybox.domain.finance import LOW_DSCR_FLAG, calculate_metrics
from buybox.domain.underwriting import DealInputs

prices = st.floats(min_value=10_000.0, max_value=100_000_000.0)
pcts = st.floats(min_value=0.0, max_value=100.0)
incomes = st.floats(min_value=0.0, max_value=10_000_000.0)
rates = st.floats(min_value=0.0, max_value=15.0)
terms = st.integers(min_value=1, max_value=40)


@st.composite
def deal_inputs(draw):
    return DealInputs(
        purchase_price=draw(prices),
        down_payment_pct=draw(pcts),
        gross_rental_income=draw(incomes),
        operating_expenses=draw(incomes),
        interest_rate=draw(rates),
        loan_term_years=draw(terms),
    )


@given(deal_inputs())
def test_capital_stack_adds_up(inputs):
    m = calculate_metrics(inputs)
    assert m.down_payment + m.loan_amount == pytest.approx(inputs.purchase_price, abs=1e-6)


@given(deal_inputs())
def test_noi_is_income_minus_expenses(inputs):
    m = calculate_metrics(inputs)
    assert m.net_operating_income == inputs.gross_rental_income - inputs.operating_expenses


@given(price=prices, dp=pcts, term=terms)
def test_zero_rate_debt_service_is_straight_line(price, dp, term):
    inputs = DealInputs(
        purchase_price=price,
        down_payment_pct=dp,
        gross_rental_income=100_000.0,
        operating_expenses=40_000.0,
        interest_rate=0.0,
        loan_term_years=term,
    )
    m = calculate_metrics(inputs)
    assert m.annual_debt_service == pytest.approx(m.loan_amount / term, rel=1e-9, abs=1e-9)


@given(price=prices, gross=incomes, opex=incomes, rate=rates, term=terms)
def test_no_down_payment_means_zero_coc(price, gross, opex, rate, term):
    m = calculate_metrics(
        DealInputs(
            purchase_price=price,
            down_payment_pct=0.0,
            gross_rental_income=gross,
            operating_expenses=opex,
            interest_rate=rate,
            loan_term_years=term,
        )
    )
    assert m.cash_on_cash_return == 0.0


@given(
    inputs=deal_inputs(),
    delta=st.floats(min_value=1.0, max_value=1_000_000.0),
)
def test_higher_expenses_never_improve_metrics(inputs, delta):
    m1 = calculate_metrics(inputs)
    worse = DealInputs(
        purchase_price=inputs.purchase_price,
        down_payment_pct=inputs.down_payment_pct,
        gross_rental_income=inputs.gross_rental_income,
        operating_expenses=inputs.operating_expenses + delta,
        interest_rate=inputs.interest_rate,
        loan_term_years=inputs.loan_term_years,
    )
    m2 = calculate_metrics(worse)

    assert m2.cash_flow_before_tax <= m1.cash_flow_before_tax
    assert m2.cap_rate <= m1.cap_rate
    assert m2.cash_on_cash_return <= m1.cash_on_cash_return
    assert m2.dscr <= m1.dscr


@given(deal_inputs())
def test_low_dscr_flag_iff_dscr_below_threshold(inputs):
    m = calculate_metrics(inputs)
    assert (LOW_DSCR_FLAG in m.risk_flags) == (m.dscr < 1.2)
