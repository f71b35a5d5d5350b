# src/buybox/domain/criteria.py
from pydantic import BaseModel, ConfigDict


class BuyBoxCriteria(BaseModel):
    """
    Investor acceptance thresholds. Percentages are plain numbers (8.0 == 8%).
    """
    model_config = ConfigDict(frozen=True)

    min_cash_on_cash_return: float
    min_cap_rate: float
    year_built_threshold: int
    target_hold_period: int
