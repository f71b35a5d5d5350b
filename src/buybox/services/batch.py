# buybox/services/batch.py

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

import pandas as pd
from loguru import logger

from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.metrics import PortfolioMetrics, summarize_portfolio
from buybox.domain.property import Property
from buybox.services.deal_analyzer import run_underwriting
from buybox.services.validation import validate_and_prepare_payload

REQUIRED_COLUMNS = ("address", "purchase_price", "gross_rental_income", "operating_expenses")

_INPUT_COLUMNS = (
    "purchase_price",
    "down_payment_pct",
    "gross_rental_income",
    "operating_expenses",
    "interest_rate",
    "loan_term_years",
)

_RESULT_COLUMNS = (
    "status",
    "error",
    "net_operating_income",
    "annual_debt_service",
    "cash_flow_before_tax",
    "cash_on_cash_return",
    "cap_rate",
    "dscr",
    "risk_flags",
    "failed_criteria",
    "recommendations",
)


def _cell(row: pd.Series, col: str) -> Any:
    if col not in row or pd.isna(row[col]):
        return None
    val = row[col]
    # unwrap numpy scalars
    return val.item() if hasattr(val, "item") else val


def _row_to_payload(row: pd.Series) -> Dict[str, Any]:
    return {col: _cell(row, col) for col in _INPUT_COLUMNS if _cell(row, col) is not None}


def _int_cell(row: pd.Series, col: str) -> int | None:
    val = _cell(row, col)
    if val is None:
        return None
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Invalid integer for {col}: {val!r}") from None


def _row_to_property(row: pd.Series) -> Property:
    address = _cell(row, "address")
    if address is None or not str(address).strip():
        raise ValueError("Missing required field: address")
    return Property(
        address=str(address).strip(),
        property_type=_cell(row, "property_type") or "Multifamily",
        total_units=_int_cell(row, "total_units"),
        year_built=_int_cell(row, "year_built"),
    )


def screen_deals(
    deals_csv: Path,
    criteria: BuyBoxCriteria,
    output_path: Path | None = None,
) -> PortfolioMetrics:
    """
    Run every row of a deals CSV through the underwriting chain.

    deals_csv must contain at least:
      - address, purchase_price, gross_rental_income, operating_expenses
    Optional: down_payment_pct, interest_rate, loan_term_years,
              property_type, total_units, year_built

    Writes (when output_path is given):
      - <output_path>            per-deal metrics + verdicts (CSV)
      - <output_path>.summary.json  portfolio summary
    """
    logger.info("Starting deal screen", deals_csv=str(deals_csv))

    if not deals_csv.exists():
        raise FileNotFoundError(f"Deals CSV not found at {deals_csv}")

    df = pd.read_csv(deals_csv)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Deals CSV is missing required columns: {missing}")

    rows: list[dict[str, Any]] = []
    for idx, row in df.iterrows():
        try:
            inputs = validate_and_prepare_payload(_row_to_payload(row))
            prop = _row_to_property(row)
            results, evaluation, recommendations = run_underwriting(inputs, criteria, prop)
        except ValueError as exc:  # log and continue; one bad row shouldn't kill the screen
            logger.warning("Skipping invalid deal row", idx=idx, error=str(exc))
            rows.append({"status": "error", "error": str(exc)})
            continue

        rows.append(
            {
                "status": "pass" if evaluation.passed else "fail",
                "net_operating_income": results.net_operating_income,
                "annual_debt_service": results.annual_debt_service,
                "cash_flow_before_tax": results.cash_flow_before_tax,
                "cash_on_cash_return": results.cash_on_cash_return,
                "cap_rate": results.cap_rate,
                "dscr": results.dscr,
                "risk_flags": "; ".join(results.risk_flags),
                "failed_criteria": "; ".join(evaluation.failed_criteria),
                "recommendations": "; ".join(recommendations),
            }
        )

    results_df = pd.DataFrame(rows, columns=list(_RESULT_COLUMNS))
    out = pd.concat([df.reset_index(drop=True), results_df], axis=1)

    ok = out["status"] != "error"
    summary = summarize_portfolio(
        coc=out["cash_on_cash_return"].to_numpy(dtype=float),
        cap_rate=out["cap_rate"].to_numpy(dtype=float),
        dscr=out["dscr"].to_numpy(dtype=float),
        passed=(out["status"] == "pass").to_numpy(),
        mask=ok.to_numpy(),
    )

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        out.to_csv(output_path, index=False)
        summary_path = output_path.with_suffix(".summary.json")
        summary_path.write_text(json.dumps(asdict(summary), indent=2))
        logger.info("Deal screen written", details_path=str(output_path), summary_path=str(summary_path))

    logger.info(
        "Deal screen completed",
        n_deals=summary.n_deals,
        n_passed=summary.n_passed,
        n_errors=int((~ok).sum()),
    )
    return summary
