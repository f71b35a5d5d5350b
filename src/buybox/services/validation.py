# src/buybox/services/validation.py

import math
from typing import Any

from buybox.adapters.config import config
from buybox.domain.ports import ExtractedFinancials
from buybox.domain.underwriting import DealInputs

# Fields a T-12 statement can supply when the caller leaves them out
SEEDABLE_FIELDS = ("gross_rental_income", "operating_expenses")

ALLOWED_UPLOAD_TYPES = {
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}


def _to_num(val: Any, field_name: str) -> float:
    """
    Coerce values like:
      - 3850000
      - "3850000"
      - "3,850,000"
      - "6.5"
      - "6.5%"
    into float. Percentages stay plain numbers: "6.5%" -> 6.5.
    NaN and infinities are rejected, whatever form they arrive in.
    """
    if val is None:
        raise ValueError(f"Missing required numeric field: {field_name}")
    if isinstance(val, bool):
        raise ValueError(f"Invalid type for {field_name}: {type(val)}")
    if isinstance(val, str):
        s = val.strip().replace(",", "").replace("$", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            raise ValueError(f"Missing required numeric field: {field_name}")
    elif isinstance(val, (int, float)):
        s = val
    else:
        raise ValueError(f"Invalid type for {field_name}: {type(val)}")

    try:
        f = float(s)
    except (ValueError, OverflowError):
        raise ValueError(f"Invalid number for {field_name}: {val!r}") from None
    if not math.isfinite(f):
        raise ValueError(f"Invalid number for {field_name}: {val!r}")
    return f


def _non_negative(value: float, field_name: str) -> float:
    if value < 0:
        raise ValueError(f"{field_name} must be non-negative")
    return value


def seed_from_extraction(raw: dict[str, Any], extracted: ExtractedFinancials | None) -> dict[str, Any]:
    """
    Fill income / expense figures the caller omitted from a T-12 extraction.
    Values the caller supplied always win.
    """
    seeded = dict(raw)
    if not extracted:
        return seeded
    for field in SEEDABLE_FIELDS:
        if seeded.get(field) is None and extracted.get(field) is not None:
            seeded[field] = extracted[field]
    return seeded


def validate_and_prepare_payload(
    raw: dict[str, Any],
    extracted: ExtractedFinancials | None = None,
) -> DealInputs:
    """
    Normalize an incoming deal payload into DealInputs.

    Responsibilities:
      - Ensure purchase price and income/expense figures exist
        (optionally seeded from a T-12 extraction).
      - Normalize numeric/percent strings.
      - Apply financing defaults when values are omitted.
    """
    if "purchase_price" not in raw:
        raise ValueError("Missing required field: purchase_price")

    payload = seed_from_extraction(raw, extracted)

    purchase_price = _non_negative(_to_num(payload["purchase_price"], "purchase_price"), "purchase_price")
    gross = _non_negative(_to_num(payload.get("gross_rental_income"), "gross_rental_income"), "gross_rental_income")
    opex = _non_negative(_to_num(payload.get("operating_expenses"), "operating_expenses"), "operating_expenses")

    # Financing terms fall back to defaults only when absent; an explicit 0 is kept
    dp_raw = payload.get("down_payment_pct")
    dp = _to_num(config.DEFAULT_DOWN_PAYMENT_PCT if dp_raw is None else dp_raw, "down_payment_pct")
    if not (0.0 <= dp <= 100.0):
        raise ValueError("down_payment_pct must be between 0 and 100")

    ir_raw = payload.get("interest_rate")
    ir = _non_negative(
        _to_num(config.DEFAULT_INTEREST_RATE if ir_raw is None else ir_raw, "interest_rate"),
        "interest_rate",
    )

    lt_raw = payload.get("loan_term_years")
    if lt_raw is None:
        lt_raw = config.DEFAULT_LOAN_TERM_YEARS
    try:
        term = int(_to_num(lt_raw, "loan_term_years"))
    except ValueError:
        raise ValueError("Invalid loan_term_years") from None
    if term <= 0:
        raise ValueError("loan_term_years must be > 0")
    if term > config.MAX_LOAN_TERM_YEARS:
        raise ValueError(f"loan_term_years must be <= {config.MAX_LOAN_TERM_YEARS}")

    return DealInputs(
        purchase_price=purchase_price,
        down_payment_pct=dp,
        gross_rental_income=gross,
        operating_expenses=opex,
        interest_rate=ir,
        loan_term_years=term,
    )


def validate_upload(filename: str, content_type: str | None, size: int) -> None:
    """
    Accept PDF / Excel statements up to MAX_UPLOAD_BYTES. Raises ValueError.
    """
    if not filename:
        raise ValueError("No file uploaded")
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_UPLOAD_TYPES:
        raise ValueError("Invalid file type. Please upload PDF or Excel files only.")
    if size > config.MAX_UPLOAD_BYTES:
        mb = config.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise ValueError(f"File size too large. Maximum size is {mb:g}MB.")
