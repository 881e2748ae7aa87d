"""
Summary Aggregator

Pure read-time totals for one month. Nothing here is stored or cached.

    total_out      = sum of the month's outgoings
    transfer_to_b  = outgoings booked on account B
    transfer_to_n  = outgoings booked on account N
    transfer_to_c  = the month's float (not the outgoings booked on C)
    transfer_to_l  = starting point minus total_out (the leftover)
    total_transfers = B + N + C + L
"""

from decimal import Decimal
from typing import Iterable

from budget_tracker.models.ledger import Month, MonthSummary, Outgoing, Transfer


ZERO = Decimal("0")


def _sum_amounts(items: Iterable) -> Decimal:
    return sum((item.amount for item in items), ZERO)


def summarize_month(
    month: Month,
    outgoings: Iterable[Outgoing],
    transfers: Iterable[Transfer] = (),
) -> MonthSummary:
    """Compute the summary for a month from its loaded rows."""
    outgoings = list(outgoings)

    total_out = _sum_amounts(outgoings)
    to_b = _sum_amounts(o for o in outgoings if o.account_code == "B")
    to_n = _sum_amounts(o for o in outgoings if o.account_code == "N")
    to_c = month.float_amount
    to_l = month.starting_point - total_out

    return MonthSummary(
        month_id=month.id,
        total_out=total_out,
        starting_point=month.starting_point,
        transfer_to_b=to_b,
        transfer_to_n=to_n,
        transfer_to_c=to_c,
        transfer_to_l=to_l,
        total_transfers=to_b + to_n + to_c + to_l,
        recorded_transfers_total=_sum_amounts(transfers),
    )
