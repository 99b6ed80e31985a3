from decimal import Decimal

import pytest

from budget_tracker.core.aggregator import aggregate, default_categories
from budget_tracker.core.models import BudgetCategory, Transaction


def tx(description, amount, date="2024-12-02T10:00:00+11:00"):
    return Transaction(date=date, description=description, amount=Decimal(amount))


def test_default_catalog():
    catalog = default_categories()
    assert [(c.name, c.allocated_amount) for c in catalog] == [
        ("Groceries", Decimal("500")),
        ("Transportation", Decimal("200")),
        ("Entertainment", Decimal("150")),
        ("Utilities", Decimal("300")),
        ("Dining Out", Decimal("250")),
    ]
    assert all(c.spent_amount == 0 and c.transactions == [] for c in catalog)


def test_default_catalog_is_fresh_each_call():
    first = default_categories()
    first[0].transactions.append(tx("coles", "-1"))
    assert default_categories()[0].transactions == []


def test_custom_allocations():
    catalog = default_categories({"Rent": 1200, "Fun": "99.50"})
    assert [(c.name, c.allocated_amount) for c in catalog] == [
        ("Rent", Decimal("1200")), ("Fun", Decimal("99.50")),
    ]


def test_negative_allocation_rejected():
    with pytest.raises(ValueError):
        default_categories({"Rent": -1})


@pytest.mark.parametrize("amount", ["lots", None, float("nan"), "Infinity"])
def test_non_numeric_allocation_rejected(amount):
    with pytest.raises(ValueError, match="Rent"):
        default_categories({"Rent": amount})


def test_spent_uses_absolute_amounts_in_arrival_order():
    txs = [tx("Woolworths", "-20.50"), tx("Coles", "-9.50"), tx("Aldi refund", "5.00")]
    result = aggregate(txs, default_categories())
    groceries = result[0]
    assert groceries.spent_amount == Decimal("35.00")
    assert groceries.transactions == txs
    assert groceries.remaining_amount == Decimal("465.00")


def test_overflow_category_created_once_and_last():
    txs = [tx("Transfer", "-10"), tx("Uber", "-5"), tx("ATM", "-40")]
    result = aggregate(txs, default_categories())
    assert [c.name for c in result][-1] == "Other"
    assert [c.name for c in result].count("Other") == 1
    other = result[-1]
    assert other.allocated_amount == 0
    assert other.spent_amount == Decimal("50")
    assert [t.description for t in other.transactions] == ["Transfer", "ATM"]
    assert other.over_budget


def test_existing_other_category_is_reused():
    catalog = default_categories() + [BudgetCategory(name="Other", allocated_amount=Decimal("100"))]
    result = aggregate([tx("Misc", "-30")], catalog)
    assert len(result) == 6
    assert result[-1].allocated_amount == Decimal("100")
    assert result[-1].spent_amount == Decimal("30")


def test_category_missing_from_catalog_goes_to_other():
    catalog = [BudgetCategory(name="Groceries", allocated_amount=Decimal("500"))]
    result = aggregate([tx("Netflix", "-15.99")], catalog)
    assert [c.name for c in result] == ["Groceries", "Other"]
    assert result[1].spent_amount == Decimal("15.99")


def test_input_catalog_not_mutated():
    catalog = default_categories()
    aggregate([tx("Coles", "-10")], catalog)
    assert catalog[0].spent_amount == 0
    assert catalog[0].transactions == []


def test_over_budget_is_not_clamped():
    result = aggregate([tx("Netflix", "-200")], default_categories())
    entertainment = result[2]
    assert entertainment.remaining_amount == Decimal("-50")
    assert entertainment.over_budget


@pytest.mark.parametrize("amounts", [
    [],
    ["-1.10"],
    ["-20", "30.25", "-0.01", "0"],
    ["100", "-100", "-3.33", "-3.33", "-3.34"],
])
def test_conservation(amounts):
    descriptions = ["coles", "uber", "rent", "cafe", "phone", "???"]
    txs = [tx(descriptions[i % len(descriptions)], a) for i, a in enumerate(amounts)]
    result = aggregate(txs, default_categories())
    assert sum((c.spent_amount for c in result), Decimal("0")) == sum(
        (abs(t.amount) for t in txs), Decimal("0")
    )
    assert sum(len(c.transactions) for c in result) == len(txs)
