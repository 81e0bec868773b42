"""Tests for the 50/30/20 allocation engine."""

from __future__ import annotations

from datetime import date

import pytest

from analytics.allocation import (
    CategoryKeywords,
    InvalidAllocationError,
    calculate_503020_allocation,
    calculate_custom_allocation,
    calculate_zero_based_budget,
    classify_category,
    generate_budget_summary,
)
from core.models import Category, PlannedExpense, Transaction

PERIOD_START = date(2024, 3, 1)
PERIOD_END = date(2024, 3, 31)


def _expense(txn_id: str, category_id: str | None, amount: float, day: date = date(2024, 3, 10)) -> Transaction:
    return Transaction(id=txn_id, type="expense", category_id=category_id, amount=amount, date=day)


@pytest.mark.parametrize("income", [0.0, 1.0, 4321.17, 5000.0, 123456.78])
def test_503020_allocation_partitions_income(income):
    allocation = calculate_503020_allocation(income)

    assert allocation.needs + allocation.wants + allocation.savings == pytest.approx(income)
    assert allocation.needs == pytest.approx(income * 0.5)
    assert allocation.wants == pytest.approx(income * 0.3)
    assert allocation.savings == pytest.approx(income * 0.2)


def test_custom_allocation_accepts_percentages_within_tolerance():
    allocation = calculate_custom_allocation(4000, 60, 25, 15.005)

    assert allocation.needs == pytest.approx(2400)
    assert allocation.wants == pytest.approx(1000)
    assert allocation.savings == pytest.approx(600.2)


@pytest.mark.parametrize("percentages", [(50, 30, 19.98), (60, 30, 20), (0, 0, 0)])
def test_custom_allocation_rejects_bad_totals(percentages):
    with pytest.raises(InvalidAllocationError, match="100%"):
        calculate_custom_allocation(5000, *percentages)


def test_invalid_allocation_is_a_value_error():
    with pytest.raises(ValueError):
        calculate_custom_allocation(1000, 10, 10, 10)


@pytest.mark.parametrize(
    ("name", "bucket"),
    [
        ("Rent", "needs"),
        ("Groceries", "needs"),
        ("Car Loan", "needs"),
        ("Emergency Fund", "savings"),
        ("Retirement 401k", "savings"),
        ("Dining Out", "wants"),
        ("Entertainment", "wants"),
    ],
)
def test_classify_category_uses_keyword_order(name, bucket):
    category = Category(id="c", name=name)

    assert classify_category(category) == bucket
    assert classify_category(category) == bucket


def test_classify_category_accepts_alternate_vocabulary():
    keywords = CategoryKeywords(needs=("pets",), savings=("piggy",))

    assert classify_category(Category(id="a", name="Pets & Vet"), keywords) == "needs"
    assert classify_category(Category(id="b", name="Piggy Bank"), keywords) == "savings"
    assert classify_category(Category(id="c", name="Rent"), keywords) == "wants"


def test_budget_summary_flags_needs_overspend():
    categories = [Category(id="rent", name="Rent")]
    transactions = [_expense("t1", "rent", 3000)]

    summary = generate_budget_summary(transactions, categories, 5000, PERIOD_START, PERIOD_END)

    assert summary.needs_utilization == pytest.approx(120)
    assert summary.is_balanced is False
    assert any("500" in rec and rec.startswith("Needs spending is 120%") for rec in summary.recommendations)
    assert summary.category_breakdown[0].type == "needs"
    assert summary.category_breakdown[0].allocated_budget == pytest.approx(2500)


def test_budget_summary_filters_period_type_and_unknown_categories():
    categories = [Category(id="food", name="Groceries"), Category(id="fun", name="Movies")]
    transactions = [
        _expense("in-period", "food", 200),
        _expense("boundary", "fun", 50, day=PERIOD_END),
        _expense("before", "food", 999, day=date(2024, 2, 29)),
        _expense("unknown", "missing", 400),
        _expense("uncategorised", None, 400),
        Transaction(id="salary", type="income", category_id="food", amount=5000, date=date(2024, 3, 1)),
    ]

    summary = generate_budget_summary(transactions, categories, 1000, PERIOD_START, PERIOD_END)
    spend = {row.category_id: row.current_spending for row in summary.category_breakdown}

    assert spend == {"food": pytest.approx(200), "fun": pytest.approx(50)}
    assert summary.needs_utilization == pytest.approx(40)
    assert summary.wants_utilization == pytest.approx(50 / 300 * 100)


def test_budget_summary_balanced_when_spend_matches_split():
    categories = [
        Category(id="rent", name="Rent"),
        Category(id="fun", name="Shopping"),
        Category(id="save", name="Savings Transfer"),
    ]
    transactions = [
        _expense("a", "rent", 2500),
        _expense("b", "fun", 1450),
        _expense("c", "save", 1000),
    ]

    summary = generate_budget_summary(transactions, categories, 5000, PERIOD_START, PERIOD_END)

    assert summary.is_balanced is True
    assert "Savings on track at 100% of target." in summary.recommendations


def test_budget_summary_with_zero_income_has_no_utilization():
    categories = [Category(id="rent", name="Rent")]

    summary = generate_budget_summary([_expense("a", "rent", 100)], categories, 0, PERIOD_START, PERIOD_END)

    assert summary.needs_utilization == 0
    assert summary.category_breakdown[0].utilization_percentage == 0
    assert not any("Overall spending" in rec for rec in summary.recommendations)


def test_budget_summary_reports_savings_shortfall_and_underspend():
    categories = [Category(id="rent", name="Rent")]

    summary = generate_budget_summary([_expense("a", "rent", 500)], categories, 5000, PERIOD_START, PERIOD_END)

    assert "Needs spending is well under control at 20%." in summary.recommendations
    assert any("save an additional $1,000.00" in rec for rec in summary.recommendations)
    assert any(rec.startswith("You're spending only 10% of budget") for rec in summary.recommendations)


def test_zero_based_budget_reports_unallocated_income():
    planned = [PlannedExpense("Rent", 1500), PlannedExpense("Food", 600)]

    budget = calculate_zero_based_budget(2500, planned)

    assert budget.allocated == pytest.approx(2100)
    assert budget.unallocated == pytest.approx(400)
    assert budget.categories == planned
