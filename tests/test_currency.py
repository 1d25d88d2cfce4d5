import pytest

from quote_engine.engine.currency import convert, get_rate, resolve_currency


@pytest.mark.parametrize("code,factor", [
    ("INR", 1),
    ("USD", 0.012),
    ("EUR", 0.011),
    ("GBP", 0.0095),
])
def test_static_rates(code, factor):
    assert convert(100000, code) == pytest.approx(100000 * factor)


def test_codes_are_case_insensitive():
    assert get_rate("usd") == 0.012
    assert resolve_currency(" gbp ") == "GBP"


@pytest.mark.parametrize("code", ["JPY", "", None, "dollars"])
def test_unknown_code_fails_open(code):
    assert convert(5000, code) == 5000
    assert resolve_currency(code) == "INR"


def test_configured_rate_table():
    rates = {"INR": 1, "USD": 0.5}
    assert convert(10, "USD", rates) == 5
    assert convert(10, "EUR", rates) == 10
    assert resolve_currency("EUR", rates) == "INR"
