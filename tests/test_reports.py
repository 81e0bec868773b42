"""Tests for the period income statement, cash flow and category comparisons."""

from __future__ import annotations

from datetime import date

import pytest

from analytics.reports import (
    calculate_cash_flow,
    calculate_category_comparisons,
    calculate_income_statement,
)
from core.models import Category, Transaction

CATEGORIES = [
    Category(id="salary", name="Salary", type="income"),
    Category(id="home", name="Housing"),
    Category(id="food", name="Food"),
    Category(id="fun", name="Movies"),
    Category(id="gifts", name="Gifts"),
]


def _txn(txn_id: str, kind: str, category_id: str | None, amount: float, day: date) -> Transaction:
    return Transaction(id=txn_id, type=kind, category_id=category_id, amount=amount, date=day)  # type: ignore[arg-type]


@pytest.fixture()
def current_month() -> list[Transaction]:
    day = date(2024, 4, 10)
    return [
        _txn("c1", "income", "salary", 4000, day),
        _txn("c2", "expense", "home", 1500, day),
        _txn("c3", "expense", "food", 500, day),
        _txn("c4", "expense", "fun", 200, day),
        _txn("c5", "expense", None, 100, day),
    ]


@pytest.fixture()
def previous_month() -> list[Transaction]:
    day = date(2024, 3, 10)
    return [
        _txn("p1", "income", "salary", 3200, day),
        _txn("p2", "expense", "home", 1500, day),
        _txn("p3", "expense", "food", 400, day),
        _txn("p4", "expense", "fun", 350, day),
        _txn("p5", "expense", "gifts", 50, day),
    ]


def test_income_statement_totals_and_growth(current_month, previous_month):
    statement = calculate_income_statement(current_month, previous_month, CATEGORIES)

    assert statement["revenue"]["total"] == pytest.approx(4000)
    assert statement["revenue"]["by_category"] == {"Salary": 4000}
    assert statement["revenue"]["growth"] == pytest.approx(25)

    expenses = statement["expenses"]
    assert expenses["total"] == pytest.approx(2300)
    assert expenses["by_category"] == {"Housing": 1500, "Food": 500, "Movies": 200, "Uncategorized": 100}
    assert expenses["operating"] == pytest.approx(2000)
    assert expenses["non_operating"] == pytest.approx(300)
    assert expenses["growth"] == pytest.approx(0)

    assert statement["net_income"] == pytest.approx({"gross": 1700, "operating": 2000, "net": 1700, "margin": 42.5})
    assert statement["comparison"] == pytest.approx(
        {"previous_revenue": 3200, "previous_expenses": 2300, "previous_net": 900}
    )


def test_income_statement_without_history_or_revenue():
    statement = calculate_income_statement([_txn("x", "expense", "food", 80, date(2024, 4, 1))], categories=CATEGORIES)

    assert statement["revenue"]["growth"] == 0
    assert statement["expenses"]["growth"] == 0
    assert statement["net_income"]["margin"] == 0
    assert statement["net_income"]["gross"] == pytest.approx(-80)


def test_operating_categories_are_configurable(current_month):
    statement = calculate_income_statement(current_month, categories=CATEGORIES, operating_categories=["Movies"])

    assert statement["expenses"]["operating"] == pytest.approx(200)


def test_cash_flow_rolls_balance_forward(current_month):
    statement = calculate_cash_flow(current_month, beginning_balance=1000)

    assert statement["operating"] == pytest.approx({"net_income": 1700, "adjustments": 0, "total": 1700})
    assert statement["net_cash_flow"] == pytest.approx(1700)
    assert statement["ending_balance"] == pytest.approx(2700)


def test_category_comparisons_sorted_with_trends(current_month, previous_month):
    comparisons = calculate_category_comparisons(current_month, previous_month, CATEGORIES)

    assert [(row["category"], row["trend"]) for row in comparisons] == [
        ("Salary", "up"),
        ("Housing", "stable"),
        ("Food", "up"),
        ("Movies", "down"),
        ("Uncategorized", "stable"),
        ("Gifts", "down"),
    ]
    gifts = comparisons[-1]
    assert gifts["current_amount"] == 0
    assert gifts["change"] == pytest.approx(-50)
    assert gifts["change_percent"] == pytest.approx(-100)
    assert comparisons[4]["change_percent"] == 0


def test_small_moves_are_stable():
    previous = [_txn("p", "expense", "food", 100, date(2024, 3, 1))]

    within = calculate_category_comparisons([_txn("c", "expense", "food", 104, date(2024, 4, 1))], previous)
    beyond = calculate_category_comparisons([_txn("c", "expense", "food", 94, date(2024, 4, 1))], previous)

    assert within[0]["trend"] == "stable"
    assert beyond[0]["trend"] == "down"
