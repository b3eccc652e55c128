from datetime import date
from types import SimpleNamespace

from farm_api.services.summary import summarize, summarize_expenses


def _animal(id, **overrides):
    fields = dict(
        id=id,
        type="goat",
        gender="female",
        status="active",
        current_weight=None,
        purchase_price=None,
        sale_price=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _weight(animal_id, weight, day):
    return SimpleNamespace(animal_id=animal_id, weight=weight, date=date(2026, 1, day))


def test_average_uses_latest_record_then_current_weight():
    animals = [
        _animal(1, current_weight=99),
        _animal(2, current_weight=45),
    ]
    records = [_weight(1, 40, 1), _weight(1, 55, 20), _weight(1, 50, 10)]

    summary = summarize(animals, records)

    assert summary.average_weight == 50.0


def test_animals_without_weight_are_left_out_of_average():
    animals = [
        _animal(1, current_weight=60),
        _animal(2),
        _animal(3, current_weight=0),
    ]
    assert summarize(animals, []).average_weight == 60.0


def test_average_is_zero_without_any_weight():
    assert summarize([_animal(1)], []).average_weight == 0.0
    assert summarize([], []).average_weight == 0.0


def test_counts_and_profit():
    animals = [
        _animal(1, purchase_price=100),
        _animal(2, type="sheep", gender="male", status="sold", purchase_price=200, sale_price=350),
        _animal(3, status="ready_to_sell", sale_price=500),
        _animal(4, type="sheep", status="dead"),
    ]

    summary = summarize(animals, [])

    assert summary.total_animals == 4
    assert summary.total_goats == 2
    assert summary.total_sheep == 2
    assert summary.total_males == 1
    assert summary.total_females == 3
    assert summary.active_animals == 1
    assert summary.sold_animals == 1
    assert summary.ready_to_sell == 1
    assert summary.dead_animals == 1
    assert summary.total_investment == 300
    # asking price on unsold animals is not revenue
    assert summary.total_revenue == 350
    assert summary.profit_loss == 50


def test_summarize_expenses():
    rows = [
        SimpleNamespace(type="Expense", amount=40.0),
        SimpleNamespace(type="Expense", amount=10.5),
        SimpleNamespace(type="Income", amount=100.0),
    ]

    summary = summarize_expenses(rows)

    assert summary.total_income == 100.0
    assert summary.total_expenses == 50.5
    assert summary.balance == 49.5
    assert summary.transaction_count == 3
