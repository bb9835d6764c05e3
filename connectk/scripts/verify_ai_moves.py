#!/usr/bin/env python3
"""
AI Move Verification Script - Parallel Version

Plays a set of tactical positions (immediate wins, forced blocks) against every
evaluator / difficulty combination and checks that the AI picks an expected column.

Exit Codes:
  0: All combinations passed
  1: One or more combinations failed
"""

import asyncio
import logging
import os
import sys
import time
from typing import List, Tuple

# Add project root to path so we can import connectk without installing it
sys.path.append(os.path.join(os.path.dirname(__file__), '../../'))

from connectk.core.settings import GameSettings
from connectk.engine.ai import ConnectKAI
from connectk.engine.board import Board
from connectk.models.enums import Difficulty, EvaluatorKind

# --- Configuration ---
CONCURRENCY_LIMIT = 4  # Searches are CPU bound; keep the thread pool small

# Matrices are top row first. 1 = human, 2 = AI.
SCENARIOS = [
    {
        "name": "Horizontal block",
        "rows": [[0] * 7] * 5 + [[2, 1, 1, 1, 0, 0, 0]],
        "expected": [4],
    },
    {
        "name": "Vertical win",
        "rows": [[0] * 7] * 3 + [[2, 1, 0, 0, 0, 0, 0]] * 2 + [[2, 1, 0, 0, 1, 0, 0]],
        "expected": [0],
    },
    {
        "name": "Win beats block",
        "rows": [[0] * 7] * 5 + [[1, 1, 1, 0, 2, 2, 2]],
        "expected": [3],
    },
    {
        "name": "Prevent open three",
        "rows": [[0] * 7] * 5 + [[0, 0, 1, 1, 0, 0, 0]],
        "expected": [1, 4],
    },
    {
        "name": "Block a lost position",
        "rows": [
            [0] * 7,
            [0, 0, 0, 0, 0, 1, 0],
            [0, 0, 0, 0, 0, 2, 0],
            [2, 2, 1, 0, 0, 2, 2],
            [2, 1, 1, 0, 0, 2, 1],
            [1, 2, 2, 0, 1, 1, 1],
        ],
        "expected": [3],
    },
    {
        "name": "Block despite follow-up threat",
        "rows": [
            [0] * 7,
            [0] * 7,
            [0, 0, 0, 0, 2, 0, 0],
            [2, 0, 0, 0, 1, 2, 0],
            [1, 0, 2, 0, 2, 2, 1],
            [2, 1, 1, 0, 1, 1, 1],
        ],
        "expected": [3],
    },
]


async def run_scenario(evaluator: EvaluatorKind, difficulty: Difficulty, scenario: dict) -> Tuple[str, bool, str]:
    label = f"{evaluator.value}/{difficulty.name.lower()}/{scenario['name']}"
    try:
        ai = ConnectKAI(GameSettings(evaluator=evaluator, difficulty=difficulty))
        board = Board.from_rows(scenario["rows"])

        start = time.time()
        column = await ai.get_move_async(board)
        duration = time.time() - start

        if column not in scenario["expected"]:
            return (label, False, f"Played {column}, expected {scenario['expected']}")
        return (label, True, f"Column {column} in {duration:.2f}s")

    except Exception as e:
        return (label, False, f"Exception: {str(e)[:80]}...")


async def main():
    print(f"Starting Parallel Verification (Limit: {CONCURRENCY_LIMIT} concurrent searches)...")
    print("-" * 80)
    print(f"{'CASE':<40} | {'STATUS':<6} | {'DETAILS'}")
    print("-" * 80)

    sem = asyncio.Semaphore(CONCURRENCY_LIMIT)

    async def protected_run(*args) -> Tuple[str, bool, str]:
        async with sem:
            return await run_scenario(*args)

    tasks = [
        protected_run(evaluator, difficulty, scenario)
        for evaluator in EvaluatorKind
        for difficulty in (Difficulty.EASY, Difficulty.MEDIUM)
        for scenario in SCENARIOS
    ]

    failed: List[str] = []
    for coro in asyncio.as_completed(tasks):
        label, success, msg = await coro
        if not success:
            failed.append(label)
        print(f"{label:<40} | {'PASS' if success else 'FAIL':<6} | {msg}")

    print("-" * 80)
    print(f"Summary: {len(tasks) - len(failed)}/{len(tasks)} Passed")

    if failed:
        print("\nFailed cases:")
        for label in failed:
            print(f"   - {label}")
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("CONNECTK_LOG_LEVEL", "WARNING").upper())
    asyncio.run(main())
