# tests/test_api_missing_required_fields.py
def _buy_box():
    return {
        "min_cash_on_cash_return": 8.0,
        "min_cap_rate": 5.5,
        "year_built_threshold": 1980,
        "target_hold_period": 5,
    }


def test_missing_purchase_price_returns_400(client):
    body = {
        "property": {"address": "789 Oak", "property_type": "Office"},
        "inputs": {"gross_rental_income": 100_000, "operating_expenses": 40_000},
        "buy_box": _buy_box(),
        "save": False,
    }
    r = client.post("/analyze", json=body)
    assert r.status_code == 400
    assert "Missing required field" in r.text


def test_bad_down_payment_returns_400(client):
    body = {
        "property": {"address": "789 Oak", "property_type": "Office"},
        "inputs": {
            "purchase_price": 1_000_000,
            "gross_rental_income": 100_000,
            "operating_expenses": 40_000,
            "down_payment_pct": 140,
        },
        "buy_box": _buy_box(),
        "save": False,
    }
    r = client.post("/analyze", json=body)
    assert r.status_code == 400
    assert "down_payment_pct" in r.text


def test_unknown_property_type_is_rejected(client):
    body = {
        "property": {"address": "789 Oak", "property_type": "Hotel"},
        "inputs": {"purchase_price": 1, "gross_rental_income": 1, "operating_expenses": 1},
        "buy_box": _buy_box(),
    }
    r = client.post("/analyze", json=body)
    assert r.status_code == 422


def test_nan_purchase_price_returns_400(client):
    body = {
        "property": {"address": "789 Oak", "property_type": "Office"},
        "inputs": {"purchase_price": "nan", "gross_rental_income": 100_000, "operating_expenses": 40_000},
        "buy_box": _buy_box(),
        "save": False,
    }
    r = client.post("/analyze", json=body)
    assert r.status_code == 400
    assert "Invalid number for purchase_price" in r.text


def test_infinite_loan_term_returns_400(client):
    body = {
        "property": {"address": "789 Oak", "property_type": "Office"},
        "inputs": {
            "purchase_price": 1_000_000,
            "gross_rental_income": 100_000,
            "operating_expenses": 40_000,
            "loan_term_years": "inf",
        },
        "buy_box": _buy_box(),
        "save": False,
    }
    r = client.post("/analyze", json=body)
    assert r.status_code == 400
    assert "loan_term_years" in r.text
