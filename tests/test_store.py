"""Unit tests for budget_tracker.store."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from budget_tracker.config import DEFAULT_CATEGORIES
from budget_tracker.errors import (
    InvalidAmount,
    InvalidFormat,
    MissingCategory,
    PersistenceFailure,
    UnknownCategory,
    UnknownCurrency,
)
from budget_tracker.models import BudgetState, WarningLevel
from budget_tracker.storage import StateStorage
from budget_tracker.store import BudgetStore

from conftest import Clock

PRIOR_MONTH_EXPENSE = {
    'id': 1733000000000,
    'amount': 30.0,
    'category': 'Food',
    'description': 'Old groceries',
    'date': '2024-12-31T23:00:00.000Z',
}


class FailingStorage(StateStorage):
    def save(self, payload):
        raise PersistenceFailure("Error saving data: disk full")


def test_defaults_when_nothing_is_stored(store: BudgetStore) -> None:
    assert store.state == BudgetState()
    assert store.state.monthly_budget == 0
    assert store.state.expenses == []
    assert store.state.categories == DEFAULT_CATEGORIES
    assert store.state.selected_currency == 'USD'


@pytest.mark.parametrize('amount', [0.01, 1, 100, 2500.75, '300'])
def test_set_budget_then_remaining_equals_budget(store: BudgetStore, amount) -> None:
    store.set_budget(amount)
    assert store.remaining_budget() == float(amount)


@pytest.mark.parametrize('amount', [0, -5, float('nan'), float('inf'), 'abc', '', None, True])
def test_set_budget_rejects_invalid_amounts(store: BudgetStore, amount) -> None:
    store.set_budget(200)
    with pytest.raises(InvalidAmount):
        store.set_budget(amount)
    assert store.state.monthly_budget == 200


def test_add_expense_inserts_newest_first_and_persists(store: BudgetStore, storage, clock) -> None:
    first = store.add_expense(10, 'Food', 'Breakfast').expense
    second = store.add_expense(20, 'Housing', '  Rent share  ').expense

    assert [e.id for e in store.state.expenses] == [second.id, first.id]
    assert second.description == 'Rent share'
    assert second.date == clock.now
    assert first.id != second.id

    reloaded = BudgetStore(storage, clock=clock)
    assert reloaded.state == store.state


def test_add_expense_rejects_invalid_input(store: BudgetStore) -> None:
    with pytest.raises(InvalidAmount):
        store.add_expense(-1, 'Food')
    with pytest.raises(MissingCategory):
        store.add_expense(5, '')
    with pytest.raises(MissingCategory):
        store.add_expense(5, None)
    with pytest.raises(UnknownCategory):
        store.add_expense(5, 'Travel')
    assert store.state.expenses == []


def test_total_spent_is_independent_of_order(storage, tmp_path, clock) -> None:
    amounts = [12.5, 3.25, 40.0, 7.75]
    forward = BudgetStore(storage, clock=clock)
    backward = BudgetStore(StateStorage(tmp_path / 'other'), clock=clock)
    for value in amounts:
        forward.add_expense(value, 'Food')
    for value in reversed(amounts):
        backward.add_expense(value, 'Food')
    assert forward.total_spent() == pytest.approx(sum(amounts))
    assert backward.total_spent() == pytest.approx(sum(amounts))


def test_budget_scenario(store: BudgetStore) -> None:
    store.set_budget(100)
    store.add_expense(45.50, 'Food')
    store.add_expense(12.75, 'Transportation')

    assert store.total_spent() == pytest.approx(58.25)
    assert store.remaining_budget() == pytest.approx(41.75)
    assert store.budget_used_percentage() == pytest.approx(58.25)
    assert store.budget_warning_level() is WarningLevel.NORMAL


def test_zero_budget_percentage_is_guarded(store: BudgetStore) -> None:
    store.add_expense(10, 'Food')
    assert store.budget_used_percentage() == 0


def test_exceeding_the_budget(store: BudgetStore) -> None:
    store.set_budget(50)
    result = store.add_expense(60, 'Shopping')
    assert store.remaining_budget() == pytest.approx(-10)
    assert store.budget_warning_level() is WarningLevel.EXCEEDED
    assert result.warning_level is WarningLevel.EXCEEDED


@pytest.mark.parametrize(
    'spent, expected',
    [
        (74.99, WarningLevel.NORMAL),
        (75, WarningLevel.ELEVATED),
        (89.99, WarningLevel.ELEVATED),
        (90, WarningLevel.CRITICAL),
        (100, WarningLevel.CRITICAL),
        (100.01, WarningLevel.EXCEEDED),
    ],
)
def test_warning_tiers(store: BudgetStore, spent, expected) -> None:
    store.set_budget(100)
    assert store.add_expense(spent, 'Other').warning_level is expected


def test_delete_missing_id_is_a_noop(store: BudgetStore) -> None:
    store.add_expense(10, 'Food')
    before = list(store.state.expenses)
    result = store.delete_expense('does-not-exist')
    assert result.changed is False
    assert store.state.expenses == before


def test_delete_matches_ids_by_string_form(store: BudgetStore) -> None:
    store.import_data({'expenses': [dict(PRIOR_MONTH_EXPENSE, id=17)]})
    result = store.delete_expense('17')
    assert result.changed is True
    assert store.state.expenses == []


def test_clear_current_month_keeps_prior_months(store: BudgetStore) -> None:
    store.import_data({'expenses': [PRIOR_MONTH_EXPENSE]})
    store.add_expense(10, 'Food')
    store.add_expense(20, 'Utilities')

    result = store.clear_current_month_expenses()

    assert result.changed is True
    assert len(result.removed) == 2
    assert [e.id for e in store.state.expenses] == [PRIOR_MONTH_EXPENSE['id']]
    assert store.total_spent() == 0


def test_clear_with_nothing_in_month_is_a_noop(store: BudgetStore) -> None:
    store.import_data({'expenses': [PRIOR_MONTH_EXPENSE]})
    result = store.clear_current_month_expenses()
    assert result.changed is False
    assert result.removed == []
    assert len(store.state.expenses) == 1


def test_current_month_is_evaluated_per_call(store: BudgetStore, clock: Clock) -> None:
    store.add_expense(10, 'Food')
    assert store.total_spent() == 10
    clock.now = datetime(2025, 2, 1, 0, 0, tzinfo=timezone.utc)
    assert store.current_month_expenses() == []
    assert store.total_spent() == 0


def test_category_totals_sorted_descending_with_stable_ties(store: BudgetStore) -> None:
    store.add_expense(5, 'Shopping')
    store.add_expense(20, 'Housing')
    store.add_expense(5, 'Food')
    store.add_expense(15, 'Housing')
    store.add_expense(10, 'Shopping')
    store.import_data({'expenses': [PRIOR_MONTH_EXPENSE] + [e.to_dict() for e in store.state.expenses]})

    totals = store.category_totals()

    # The December expense is outside the current month and not counted
    assert totals == [('Housing', 35.0), ('Shopping', 15.0), ('Food', 5.0)]
    assert sum(total for _, total in totals) == pytest.approx(store.total_spent())


def test_category_totals_tie_keeps_first_encountered(store: BudgetStore) -> None:
    store.add_expense(8, 'Food')
    store.add_expense(8, 'Utilities')
    assert store.category_totals() == [('Utilities', 8.0), ('Food', 8.0)]


def test_change_currency(store: BudgetStore, storage) -> None:
    store.change_currency('PLN')
    assert store.state.selected_currency == 'PLN'
    assert storage.load()['selectedCurrency'] == 'PLN'
    with pytest.raises(UnknownCurrency):
        store.change_currency('GBP')
    assert store.state.selected_currency == 'PLN'


def test_import_export_round_trip(store: BudgetStore, tmp_path, clock) -> None:
    store.set_budget(1200)
    store.change_currency('MAD')
    store.add_expense(45.5, 'Food', 'Grocery shopping')
    store.add_expense(12.75, 'Transportation', 'Bus fare')
    exported = store.export_data()

    other = BudgetStore(StateStorage(tmp_path / 'elsewhere'), clock=clock)
    other.import_data(exported)
    assert other.state == store.state

    before = BudgetState(**vars(store.state))
    store.import_data(store.export_data())
    assert store.state == before


def test_export_layout(store: BudgetStore) -> None:
    store.add_expense(9.99, 'Other', 'Snacks')
    data = json.loads(store.export_data())
    assert set(data) == {'monthlyBudget', 'expenses', 'categories', 'selectedCurrency'}
    assert data['expenses'][0]['date'] == '2025-01-15T10:00:00.000Z'
    assert store.export_filename() == 'budget-data-2025-01-15.json'


def test_import_merges_shallowly(store: BudgetStore) -> None:
    store.add_expense(10, 'Food')
    store.import_data('{"monthlyBudget": 300}')
    assert store.state.monthly_budget == 300
    assert len(store.state.expenses) == 1


@pytest.mark.parametrize(
    'payload',
    [
        'not json',
        b'\xff\xfe',
        '[1, 2, 3]',
        {'monthlyBudget': 'lots'},
        {'selectedCurrency': 'GBP'},
        {'expenses': [{'amount': 5, 'category': 'Food'}]},
        {'categories': 'Food'},
        {'selectedCurrency': []},
        {'selectedCurrency': {'code': 'USD'}},
        '{"selectedCurrency": {}}',
    ],
)
def test_import_rejects_invalid_data(store: BudgetStore, payload) -> None:
    store.set_budget(100)
    before = BudgetState(**vars(store.state))
    with pytest.raises(InvalidFormat):
        store.import_data(payload)
    assert store.state == before


def test_persistence_failure_keeps_the_mutation(tmp_path, clock) -> None:
    store = BudgetStore(FailingStorage(tmp_path), clock=clock)
    result = store.add_expense(25, 'Entertainment')
    assert result.persisted is False
    assert isinstance(result.persistence_error, PersistenceFailure)
    assert store.total_spent() == 25


def test_load_merges_stored_fields_over_defaults(storage, clock) -> None:
    storage.save({'monthlyBudget': 450, 'unknownKey': True})
    store = BudgetStore(storage, clock=clock)
    assert store.state.monthly_budget == 450
    assert store.state.categories == DEFAULT_CATEGORIES
    assert store.state.selected_currency == 'USD'


def test_load_skips_invalid_fields(storage, clock) -> None:
    storage.save({'monthlyBudget': 80, 'selectedCurrency': 'GBP'})
    store = BudgetStore(storage, clock=clock)
    assert store.state.monthly_budget == 80
    assert store.state.selected_currency == 'USD'


def test_load_falls_back_to_defaults_for_corrupt_file(storage, clock) -> None:
    storage.path.parent.mkdir(parents=True, exist_ok=True)
    storage.path.write_text('{not valid json', encoding='utf-8')
    store = BudgetStore(storage, clock=clock)
    assert store.state == BudgetState()


def test_load_ignores_unhashable_currency(storage, clock) -> None:
    storage.save({'monthlyBudget': 80, 'selectedCurrency': ['USD']})
    store = BudgetStore(storage, clock=clock)
    assert store.state.monthly_budget == 80
    assert store.state.selected_currency == 'USD'


def test_load_skips_only_the_malformed_expense(storage, clock) -> None:
    storage.save({
        'expenses': [
            dict(PRIOR_MONTH_EXPENSE, id=1, amount=10),
            dict(PRIOR_MONTH_EXPENSE, id=2, amount=0),
        ],
    })
    store = BudgetStore(storage, clock=clock)
    assert [e.id for e in store.state.expenses] == [1]

    store.set_budget(100)
    assert [e['id'] for e in storage.load()['expenses']] == [1]


def test_round_trip_with_microsecond_timestamp(store: BudgetStore) -> None:
    store.import_data({'expenses': [dict(PRIOR_MONTH_EXPENSE, date='2025-01-03T10:00:00.123456Z')]})
    before = BudgetState(**vars(store.state))
    store.import_data(store.export_data())
    assert store.state == before
    assert store.state.expenses[0].date.microsecond == 123000


def test_import_accepts_mapping_with_non_string_keys(store: BudgetStore) -> None:
    result = store.import_data({'monthlyBudget': 300, 1: 'ignored'})
    assert result.changed is True
    assert store.state.monthly_budget == 300
