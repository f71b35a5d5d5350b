from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from buybox.adapters.config import config
from buybox.domain.criteria import BuyBoxCriteria
from buybox.domain.property import Property
from buybox.services.batch import screen_deals
from buybox.services.deal_analyzer import analyze_deal

app = typer.Typer(help="Buy box underwriting: single-deal analysis and CSV screening.")


def _criteria(min_coc: float, min_cap: float, year_built_threshold: int, hold: int) -> BuyBoxCriteria:
    return BuyBoxCriteria(
        min_cash_on_cash_return=min_coc,
        min_cap_rate=min_cap,
        year_built_threshold=year_built_threshold,
        target_hold_period=hold,
    )


@app.command("analyze")
def analyze_cmd(
    address: str = typer.Option(..., help="Property address"),
    purchase_price: float = typer.Option(..., help="Purchase price"),
    gross_rental_income: float = typer.Option(..., help="Annual gross rental income"),
    operating_expenses: float = typer.Option(..., help="Annual operating expenses"),
    property_type: str = typer.Option("Multifamily", help="Multifamily|Office|Retail|Industrial"),
    year_built: Optional[int] = typer.Option(None, help="Year built, if known"),
    total_units: Optional[int] = typer.Option(None, help="Unit count, if known"),
    down_payment_pct: float = typer.Option(config.DEFAULT_DOWN_PAYMENT_PCT, help="Percent down, 25 = 25%"),
    interest_rate: float = typer.Option(config.DEFAULT_INTEREST_RATE, help="Annual rate, 6.5 = 6.5%"),
    loan_term_years: int = typer.Option(config.DEFAULT_LOAN_TERM_YEARS, help="Amortization years"),
    min_coc: float = typer.Option(8.0, help="Buy box: minimum cash-on-cash return (%)"),
    min_cap: float = typer.Option(5.5, help="Buy box: minimum cap rate (%)"),
    year_built_threshold: int = typer.Option(1980, help="Buy box: oldest acceptable vintage"),
    hold: int = typer.Option(5, help="Buy box: target hold period (years)"),
) -> None:
    """
    Underwrite one deal and print the analysis as JSON. Nothing is saved.
    """
    try:
        prop = Property(
            address=address,
            property_type=property_type,  # type: ignore[arg-type]
            total_units=total_units,
            year_built=year_built,
        )
        result = analyze_deal(
            raw_inputs={
                "purchase_price": purchase_price,
                "down_payment_pct": down_payment_pct,
                "gross_rental_income": gross_rental_income,
                "operating_expenses": operating_expenses,
                "interest_rate": interest_rate,
                "loan_term_years": loan_term_years,
            },
            criteria=_criteria(min_coc, min_cap, year_built_threshold, hold),
            property=prop,
            save=False,
        )
    except ValueError as e:
        logger.error("Analysis rejected: {}", e)
        raise typer.Exit(code=2) from e

    typer.echo(json.dumps(result, indent=2))


@app.command("screen")
def screen_cmd(
    deals_csv: Path = typer.Argument(..., help="CSV of deals to screen"),
    output: Optional[Path] = typer.Option(None, help="Where to write per-deal results (CSV)"),
    min_coc: float = typer.Option(8.0, help="Buy box: minimum cash-on-cash return (%)"),
    min_cap: float = typer.Option(5.5, help="Buy box: minimum cap rate (%)"),
    year_built_threshold: int = typer.Option(1980, help="Buy box: oldest acceptable vintage"),
    hold: int = typer.Option(5, help="Buy box: target hold period (years)"),
) -> None:
    """
    Screen a CSV of deals against one buy box and print the portfolio summary.
    """
    summary = screen_deals(
        deals_csv,
        _criteria(min_coc, min_cap, year_built_threshold, hold),
        output_path=output,
    )
    typer.echo(json.dumps(asdict(summary), indent=2))


if __name__ == "__main__":
    app()
