"""Expense persistence and trip statistics.

Permissions:
    - Any member can add expenses and see every expense of the trip.
    - The payer can edit or delete their own expenses.
    - The trip owner can edit or delete any expense.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.auth.interface import AuthUser
from core.db.database import Database
from core.db.schemas.expense import Expense
from core.models.expense import UNCATEGORIZED, ExpenseCreate, ExpenseRead, ExpenseStats, ExpenseUpdate, to_minor_units
from core.services.ledger import compute_stats, total_by_category
from core.services.membership import list_member_ids
from core.services.permissions import (
    ResourceKind,
    TripFacts,
    can_act_as_member,
    can_mutate_resource,
    load_trip_facts,
    resource_not_found,
)

logger = logging.getLogger(__name__)


def _require_member(session: Session, principal: AuthUser, trip_id: uuid.UUID) -> TripFacts:
    facts = load_trip_facts(session, trip_id, principal.user_id)
    can_act_as_member(facts).enforce(f"{principal.user_id} has no access to trip {trip_id}")
    return facts


def _get_expense_for_change(session: Session, principal: AuthUser, expense_id: uuid.UUID) -> Expense:
    expense = session.get(Expense, expense_id, with_for_update=True)
    if expense is None:
        resource_not_found(ResourceKind.EXPENSE).enforce(f"Expense {expense_id} not found")
    facts = load_trip_facts(session, expense.trip_id, principal.user_id)
    can_mutate_resource(facts, ResourceKind.EXPENSE, expense.user_id).enforce(
        f"{principal.user_id} cannot change expense {expense_id}"
    )
    return expense


def create_expense(db: Database, principal: AuthUser, trip_id: uuid.UUID, data: ExpenseCreate) -> ExpenseRead:
    """Record an expense paid by the caller."""

    def work(session: Session) -> ExpenseRead:
        _require_member(session, principal, trip_id)
        expense = Expense(
            trip_id=trip_id,
            user_id=principal.user_id,
            title=data.title,
            amount_cents=data.amount_cents,
            category=data.category,
        )
        session.add(expense)
        session.flush()
        return ExpenseRead.model_validate(expense)

    expense = db.run_in_transaction(work)
    logger.info("Expense %s (%d) added to trip %s by %s", expense.id, expense.amount_cents, trip_id, principal.user_id)
    return expense


def update_expense(db: Database, principal: AuthUser, expense_id: uuid.UUID, data: ExpenseUpdate) -> ExpenseRead:
    def work(session: Session) -> ExpenseRead:
        expense = _get_expense_for_change(session, principal, expense_id)
        fields = data.model_fields_set
        if "title" in fields and data.title is not None:
            expense.title = data.title
        if "amount" in fields and data.amount is not None:
            expense.amount_cents = to_minor_units(data.amount)
        if "category" in fields:
            expense.category = data.category
        session.flush()
        return ExpenseRead.model_validate(expense)

    return db.run_in_transaction(work)


def delete_expense(db: Database, principal: AuthUser, expense_id: uuid.UUID) -> None:
    def work(session: Session) -> None:
        session.delete(_get_expense_for_change(session, principal, expense_id))

    db.run_in_transaction(work)
    logger.info("Expense %s deleted by %s", expense_id, principal.user_id)


def list_expenses(
    db: Database,
    principal: AuthUser,
    trip_id: uuid.UUID,
    category: str | None = None,
) -> list[ExpenseRead]:
    """Newest first. ``category`` filters; the uncategorized label matches expenses without one."""

    def work(session: Session) -> list[ExpenseRead]:
        _require_member(session, principal, trip_id)
        stmt = select(Expense).where(Expense.trip_id == trip_id)
        if category == UNCATEGORIZED:
            stmt = stmt.where(Expense.category.is_(None))
        elif category is not None:
            stmt = stmt.where(Expense.category == category)
        stmt = stmt.order_by(Expense.created_at.desc())
        return [ExpenseRead.model_validate(e) for e in session.execute(stmt).scalars()]

    return db.run_in_transaction(work)


def _load_expenses(session: Session, trip_id: uuid.UUID) -> list[Expense]:
    return list(session.execute(select(Expense).where(Expense.trip_id == trip_id)).scalars().all())


def get_stats(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> ExpenseStats:
    """Ledger stats for the caller. Members and expenses come from one snapshot."""

    def work(session: Session) -> ExpenseStats:
        _require_member(session, principal, trip_id)
        expenses = _load_expenses(session, trip_id)
        member_ids = list_member_ids(session, trip_id)
        return compute_stats(expenses, member_ids, principal.user_id)

    return db.run_in_transaction(work, snapshot=True)


def get_totals_by_category(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> dict[str, int]:
    def work(session: Session) -> dict[str, int]:
        _require_member(session, principal, trip_id)
        return total_by_category(_load_expenses(session, trip_id))

    return db.run_in_transaction(work)
