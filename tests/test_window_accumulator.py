from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.clinica.services.window_accumulator import WindowTotals, accumulate, to_money

SINCE = datetime(2026, 3, 10, 14, 0)


def _sale(total, method, minute):
    return SimpleNamespace(total=Decimal(str(total)), payment_method=method, created_at=datetime(2026, 3, 10, 14, minute))


def test_empty_window_is_zero():
    totals = accumulate([], SINCE)
    assert totals == WindowTotals()
    assert totals.total == Decimal("0.00")
    assert totals.count == 0


def test_groups_by_payment_method_and_counts():
    sales = [
        _sale("200", "cash", 5),
        _sale("99.90", "card", 10),
        _sale("150.10", "transfer", 20),
        _sale("300", "cash", 30),
    ]
    totals = accumulate(sales, SINCE)
    assert totals.cash == Decimal("500.00")
    assert totals.card == Decimal("99.90")
    assert totals.transfer == Decimal("150.10")
    assert totals.total == Decimal("750.00")
    assert totals.count == 4
    assert totals.totals_by_method == {
        "cash": Decimal("500.00"),
        "card": Decimal("99.90"),
        "transfer": Decimal("150.10"),
    }


def test_lower_bound_is_inclusive():
    before = SimpleNamespace(total=Decimal("10"), payment_method="cash", created_at=datetime(2026, 3, 10, 13, 59))
    at_bound = _sale("20", "cash", 0)
    totals = accumulate([before, at_bound], SINCE)
    assert totals.cash == Decimal("20.00")
    assert totals.count == 1


def test_sums_are_decimal_exact():
    sales = [_sale("0.1", "cash", minute) for minute in range(10)]
    assert accumulate(sales, SINCE).cash == Decimal("1.00")


def test_unknown_payment_method_is_rejected():
    with pytest.raises(ValueError):
        accumulate([_sale("10", "voucher", 1)], SINCE)


def test_accumulate_is_repeatable():
    sales = [_sale("120.50", "cash", 1), _sale("80", "card", 2)]
    assert accumulate(sales, SINCE) == accumulate(sales, SINCE)


def test_expected_cash_adds_opening_balance():
    totals = accumulate([_sale("650", "cash", 1), _sale("100", "card", 2)], SINCE)
    assert totals.expected_cash(Decimal("1000")) == Decimal("1650.00")


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True])
def test_to_money_rejects_non_amounts(value):
    with pytest.raises(Exception):
        to_money(value)


def test_to_money_quantizes_floats_through_str():
    assert to_money(0.1) == Decimal("0.10")
    assert to_money("12.345") == Decimal("12.35")
