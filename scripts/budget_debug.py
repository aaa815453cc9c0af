#!/usr/bin/env python3
"""Development helpers for inspecting and resetting the stored budget state."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_tracker.storage import StateStorage
from budget_tracker.store import BudgetStore

SAMPLE_EXPENSES = [
    ('Food', 45.50, 'Grocery shopping'),
    ('Transportation', 12.75, 'Bus fare'),
    ('Entertainment', 25.00, 'Movie tickets'),
    ('Food', 18.25, 'Lunch'),
]


def view(storage: StateStorage) -> int:
    if not storage.exists():
        print(f"No stored state at {storage.path}")
        return 0
    data = storage.load()
    if data is None:
        print(f"Stored state at {storage.path} is unreadable")
        return 1
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


def clear(storage: StateStorage) -> int:
    if storage.clear():
        print(f"Removed {storage.path}")
    else:
        print("Nothing to clear.")
    return 0


def seed(storage: StateStorage) -> int:
    store = BudgetStore(storage)
    for category, amount, description in SAMPLE_EXPENSES:
        result = store.add_expense(amount, category, description)
        if not result.persisted:
            print(f"Failed to save: {result.persistence_error}")
            return 1
    print(f"Test data added! Current month total: {store.total_spent():.2f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Inspect or reset the stored budget state.')
    parser.add_argument('command', choices=['view', 'clear', 'seed'], help='What to do with the stored state')
    parser.add_argument('--data-dir', type=Path, default=None, help='Override the data directory')
    args = parser.parse_args(argv)

    storage = StateStorage(args.data_dir)
    commands = {'view': view, 'clear': clear, 'seed': seed}
    return commands[args.command](storage)


if __name__ == "__main__":
    raise SystemExit(main())
