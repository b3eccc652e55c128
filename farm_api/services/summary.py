"""Dashboard rollups. Pure functions over already-fetched rows."""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional, Sequence

from .. import schemas


def _latest_weight(animal, records_by_animal: dict) -> Optional[float]:
    records = records_by_animal.get(animal.id, [])
    if records:
        latest = sorted(records, key=lambda r: r.date, reverse=True)[0]
        return latest.weight
    return animal.current_weight


def summarize(animals: Sequence, weight_records: Iterable) -> schemas.AnimalSummary:
    """
    Build the animal dashboard summary.

    Each animal contributes its most recent weight record, or its
    ``current_weight`` when it has none. Animals with neither, or with a
    non-positive weight, are left out of the average rather than counted
    as zero.
    """
    records_by_animal: dict[int, list] = defaultdict(list)
    for r in weight_records:
        records_by_animal[r.animal_id].append(r)

    weights = []
    for a in animals:
        w = _latest_weight(a, records_by_animal)
        if w is not None and w > 0:
            weights.append(w)

    average_weight = (sum(weights) / len(weights)) if weights else 0.0

    total_investment = sum(a.purchase_price or 0 for a in animals)
    total_revenue = sum(a.sale_price or 0 for a in animals if a.status == "sold")

    return schemas.AnimalSummary(
        total_animals=len(animals),
        total_goats=sum(1 for a in animals if a.type == "goat"),
        total_sheep=sum(1 for a in animals if a.type == "sheep"),
        total_males=sum(1 for a in animals if a.gender == "male"),
        total_females=sum(1 for a in animals if a.gender == "female"),
        active_animals=sum(1 for a in animals if a.status == "active"),
        sold_animals=sum(1 for a in animals if a.status == "sold"),
        ready_to_sell=sum(1 for a in animals if a.status == "ready_to_sell"),
        dead_animals=sum(1 for a in animals if a.status == "dead"),
        average_weight=average_weight,
        total_investment=total_investment,
        total_revenue=total_revenue,
        profit_loss=total_revenue - total_investment,
    )


def summarize_expenses(expenses: Sequence) -> schemas.ExpenseSummary:
    total_income = sum(e.amount or 0 for e in expenses if e.type == "Income")
    total_expenses = sum(e.amount or 0 for e in expenses if e.type == "Expense")
    return schemas.ExpenseSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        transaction_count=len(expenses),
    )
