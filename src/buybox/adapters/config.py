# src/buybox/adapters/config.py
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # persistence
    DB_URI: str = Field(default="sqlite:///buybox.db")
    STORAGE_BACKEND: Literal["sql", "memory"] = Field(default="sql")

    # Underwriting defaults (plain percents: 25.0 means 25%)
    DEFAULT_DOWN_PAYMENT_PCT: float = Field(default=25.0)
    DEFAULT_INTEREST_RATE: float = Field(default=6.5)
    DEFAULT_LOAN_TERM_YEARS: int = Field(default=30)
    MAX_LOAN_TERM_YEARS: int = Field(default=100)

    # -----------------------------
    # Document uploads
    # -----------------------------
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024)

    # -----------------------------
    # Deals listing defaults
    # -----------------------------
    RECENT_DEALS_LIMIT: int = Field(default=10)

    model_config = SettingsConfigDict(
        env_prefix="BUYBOX_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "DEFAULT_DOWN_PAYMENT_PCT",
        "DEFAULT_INTEREST_RATE",
        mode="before",
    )
    @classmethod
    def _to_non_negative_percent(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except (TypeError, ValueError) as err:
            raise ValueError("rate must be numeric or percent-like") from err
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator("DEFAULT_LOAN_TERM_YEARS", "MAX_LOAN_TERM_YEARS", "MAX_UPLOAD_BYTES", mode="before")
    @classmethod
    def _positive_int(cls, v: Any) -> Any:
        i = int(v)
        if i <= 0:
            raise ValueError("must be > 0")
        return i


config = AppConfig()
