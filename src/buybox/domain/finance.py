from buybox.domain.underwriting import DealInputs, UnderwritingResults

LOW_DSCR_FLAG = "Low DSCR – debt service coverage below 1.2x"
LOW_CAP_RATE_FLAG = "Low Cap Rate – below market standards"
HIGH_OPEX_FLAG = "High Operating Expenses – above 50% of gross income"
LOW_COC_FLAG = "Low Cash-on-Cash Return – below 5%"

MIN_DSCR = 1.2
MIN_CAP_RATE = 4.0
MAX_EXPENSE_RATIO = 0.5
MIN_COC = 5.0


def annuity_payment(rate_monthly: float, n_months: int, principal: float) -> float:
    """
    Standard fixed-rate amortization formula:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ]

    Evaluated as P * r / (1 - (1+r)^-n), which cannot overflow for long
    terms; it tends to P * r (interest only) as n grows.

    At r == 0 the formula is 0/0, so the payment is straight-line principal.
    """
    if principal == 0 or n_months <= 0:
        return 0.0
    r = rate_monthly
    if r == 0:
        return principal / n_months
    denom = 1 - (1 + r) ** -n_months
    if denom == 0:
        # r below float resolution: 1 + r rounds to 1
        return principal / n_months
    return principal * r / denom


def annual_debt_service(loan_amount: float, interest_rate: float, loan_term_years: int) -> float:
    # interest_rate is a plain percent, e.g. 6.5
    m_rate = interest_rate / 100 / 12
    n_months = loan_term_years * 12
    return annuity_payment(m_rate, n_months, loan_amount) * 12


def risk_flags(
    *,
    dscr: float,
    cap_rate: float,
    cash_on_cash_return: float,
    gross_rental_income: float,
    operating_expenses: float,
) -> list[str]:
    flags: list[str] = []
    if dscr < MIN_DSCR:
        flags.append(LOW_DSCR_FLAG)
    if cap_rate < MIN_CAP_RATE:
        flags.append(LOW_CAP_RATE_FLAG)
    # expense ratio is undefined without income; skip rather than divide by zero
    if gross_rental_income != 0 and operating_expenses / gross_rental_income > MAX_EXPENSE_RATIO:
        flags.append(HIGH_OPEX_FLAG)
    if cash_on_cash_return < MIN_COC:
        flags.append(LOW_COC_FLAG)
    return flags


def calculate_metrics(inputs: DealInputs) -> UnderwritingResults:
    purchase_price = inputs.purchase_price
    down_payment = purchase_price * inputs.down_payment_pct / 100
    loan_amount = purchase_price - down_payment

    noi = inputs.gross_rental_income - inputs.operating_expenses

    annual_debt = annual_debt_service(loan_amount, inputs.interest_rate, inputs.loan_term_years)
    cash_flow = noi - annual_debt

    coc = cash_flow / down_payment * 100 if down_payment > 0 else 0.0
    cap_rate = noi / purchase_price * 100 if purchase_price > 0 else 0.0
    dscr = noi / annual_debt if annual_debt > 0 else 0.0

    return UnderwritingResults(
        purchase_price=purchase_price,
        down_payment=down_payment,
        loan_amount=loan_amount,
        gross_rental_income=inputs.gross_rental_income,
        operating_expenses=inputs.operating_expenses,
        net_operating_income=noi,
        annual_debt_service=annual_debt,
        cash_flow_before_tax=cash_flow,
        cash_on_cash_return=coc,
        cap_rate=cap_rate,
        dscr=dscr,
        risk_flags=risk_flags(
            dscr=dscr,
            cap_rate=cap_rate,
            cash_on_cash_return=coc,
            gross_rental_income=inputs.gross_rental_income,
            operating_expenses=inputs.operating_expenses,
        ),
    )
