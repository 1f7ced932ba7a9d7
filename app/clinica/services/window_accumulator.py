from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

PAYMENT_METHODS = ("cash", "card", "transfer")
MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce a numeric value into a two-place Decimal.

    Floats go through ``str`` so that 0.1 becomes ``Decimal("0.10")`` rather
    than its binary expansion. Raises ``InvalidOperation`` for non-numbers.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool):
        raise InvalidOperation(f"not an amount: {value!r}")
    else:
        amount = Decimal(str(value).strip())
    if not amount.is_finite():
        raise InvalidOperation(f"not a finite amount: {value!r}")
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class WindowTotals:
    cash: Decimal = ZERO
    card: Decimal = ZERO
    transfer: Decimal = ZERO
    count: int = 0

    @property
    def total(self) -> Decimal:
        return self.cash + self.card + self.transfer

    @property
    def totals_by_method(self) -> dict[str, Decimal]:
        return {"cash": self.cash, "card": self.card, "transfer": self.transfer}

    def expected_cash(self, opening_balance: Decimal) -> Decimal:
        return to_money(opening_balance) + self.cash


def accumulate(sales: Iterable, since: datetime) -> WindowTotals:
    """Sum the sales made at or after ``since``, grouped by payment method.

    ``sales`` may be the whole collection or an already filtered query
    result; anything older than ``since`` is skipped either way. There is no
    upper bound. Nothing is written.
    """
    sums = dict.fromkeys(PAYMENT_METHODS, ZERO)
    count = 0
    for sale in sales:
        if sale.created_at < since:
            continue
        method = (sale.payment_method or "").strip().lower()
        if method not in sums:
            raise ValueError(f"unknown payment method {sale.payment_method!r}")
        sums[method] += to_money(sale.total)
        count += 1
    return WindowTotals(cash=sums["cash"], card=sums["card"], transfer=sums["transfer"], count=count)
