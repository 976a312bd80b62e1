"""
Expense ledger: pure computation over a trip's expenses and current members.

All money is integer minor units. Sums are exact; the only rounding is the
final half-even rounding of the average and of the settlement balance, which
are computed from the exact rational average.

The settlement balance is deliberately simple: how much more than the
average share a user has paid, floored at zero. It is not a pairwise debt
graph.
"""

import logging
from collections.abc import Iterable, Sequence
from fractions import Fraction
from typing import Protocol

from core.models.expense import UNCATEGORIZED, ExpenseStats

logger = logging.getLogger(__name__)


class ExpenseLike(Protocol):
    user_id: str
    amount_cents: int
    category: str | None


def total_expenses(expenses: Iterable[ExpenseLike]) -> int:
    return sum(e.amount_cents for e in expenses)


def per_user_totals(expenses: Iterable[ExpenseLike]) -> dict[str, int]:
    """Totals by payer, including payers who have since left the trip."""
    totals: dict[str, int] = {}
    for e in expenses:
        totals[e.user_id] = totals.get(e.user_id, 0) + e.amount_cents
    return totals


def total_by_category(expenses: Iterable[ExpenseLike]) -> dict[str, int]:
    totals: dict[str, int] = {}
    for e in expenses:
        category = e.category or UNCATEGORIZED
        totals[category] = totals.get(category, 0) + e.amount_cents
    return totals


def exact_average(total: int, participant_count: int) -> Fraction:
    if participant_count <= 0:
        # Every trip has at least its owner; reaching this means the membership data is broken.
        logger.error("Ledger invoked with %d participants for a total of %d", participant_count, total)
        return Fraction(0)
    return Fraction(total, participant_count)


def amount_owed(user_total: int, average: Fraction) -> int:
    """max(0, paid - average share), rounded half-even to minor units."""
    return round(max(Fraction(0), user_total - average))


def compute_stats(expenses: Sequence[ExpenseLike], member_ids: Iterable[str], user_id: str) -> ExpenseStats:
    """Stats for one trip as seen by ``user_id``.

    ``member_ids`` must come from the same snapshot as ``expenses``.
    """
    participant_count = len(set(member_ids))
    totals = per_user_totals(expenses)
    total = sum(totals.values())
    average = exact_average(total, participant_count)
    user_total = totals.get(user_id, 0)

    return ExpenseStats(
        total_expenses=total,
        user_total_expenses=user_total,
        amount_owed_to_user=amount_owed(user_total, average),
        total_expense_count=len(expenses),
        participant_count=participant_count,
        average_per_participant=round(average),
        per_user_totals=totals,
        total_by_category=total_by_category(expenses),
    )
