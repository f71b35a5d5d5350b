from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from buybox.domain.ports import DealRecord


@dataclass
class PortfolioMetrics:
    """
    Aggregated CoC / cap rate / DSCR stats across a batch of screened deals.

    This is the 'reduction' result of a map-style per-deal underwriting run.
    """
    n_deals: int
    n_passed: int
    pass_rate: float
    mean_coc: float
    p50_coc: float
    mean_cap_rate: float
    mean_dscr: float


def summarize_portfolio(
    coc: np.ndarray,
    cap_rate: np.ndarray,
    dscr: np.ndarray,
    passed: np.ndarray,
    mask: Optional[np.ndarray] = None,
) -> PortfolioMetrics:
    """
    Reduction step: take per-deal metric arrays (percent units for CoC and
    cap rate) and collapse them into summary statistics.
    """
    coc = np.asarray(coc, dtype=float)
    cap_rate = np.asarray(cap_rate, dtype=float)
    dscr = np.asarray(dscr, dtype=float)
    passed = np.asarray(passed, dtype=bool)

    if mask is not None:
        mask = np.asarray(mask, dtype=bool)
        coc, cap_rate, dscr, passed = coc[mask], cap_rate[mask], dscr[mask], passed[mask]

    n = int(coc.shape[0])

    if n == 0:
        # Degenerate case: nothing screened.
        return PortfolioMetrics(
            n_deals=0,
            n_passed=0,
            pass_rate=float("nan"),
            mean_coc=float("nan"),
            p50_coc=float("nan"),
            mean_cap_rate=float("nan"),
            mean_dscr=float("nan"),
        )

    n_passed = int(passed.sum())
    return PortfolioMetrics(
        n_deals=n,
        n_passed=n_passed,
        pass_rate=n_passed / n,
        mean_coc=float(np.nanmean(coc)),
        p50_coc=float(np.nanquantile(coc, 0.50)),
        mean_cap_rate=float(np.nanmean(cap_rate)),
        mean_dscr=float(np.nanmean(dscr)),
    )


def dashboard_stats(deals: Iterable[DealRecord]) -> dict[str, float]:
    """
    Headline numbers for the dashboard. Averages only cover deals that
    finished analysis; missing values count as 0.
    """
    deals = list(deals)
    completed = [d for d in deals if d.get("status") != "analyzing"]
    passed = [d for d in deals if d.get("status") == "pass"]

    if completed:
        avg_coc = float(np.mean([d.get("cash_on_cash_return") or 0.0 for d in completed]))
        avg_time = float(np.mean([d.get("processing_time_seconds") or 0.0 for d in completed]))
    else:
        avg_coc = 0.0
        avg_time = 0.0

    return {
        "deals_analyzed": len(deals),
        "passed_deals": len(passed),
        "avg_coc_return": avg_coc,
        "avg_processing_time": avg_time,
    }
