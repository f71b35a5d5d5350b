from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class DealInputs:
    purchase_price: float          # total acquisition price
    down_payment_pct: float        # 25.0 means 25%
    gross_rental_income: float     # annual
    operating_expenses: float      # annual, excludes debt service
    interest_rate: float           # annual, 6.5 means 6.5%
    loan_term_years: int           # amortization period


@dataclass(frozen=True)
class UnderwritingResults:
    purchase_price: float
    down_payment: float
    loan_amount: float
    gross_rental_income: float
    operating_expenses: float
    net_operating_income: float
    annual_debt_service: float
    cash_flow_before_tax: float
    cash_on_cash_return: float     # percent
    cap_rate: float                # percent
    dscr: float                    # ratio
    risk_flags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EvaluationResult:
    passed: bool
    failed_criteria: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
