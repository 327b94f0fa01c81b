#!/usr/bin/env python3
"""
Tally where each card lands after many shuffles of a fresh deck.

Usage:
  python tools/shuffle_stats.py 8 20000
  python tools/shuffle_stats.py 16 50000 7   # with seed
"""
from __future__ import annotations
import random
import sys

sys.path.append('.')
from memory_core.deal import shuffle_cards  # noqa: E402


def main() -> int:
    if len(sys.argv) < 3:
        print("usage: shuffle_stats.py <cards> <trials> [seed]")
        return 2
    n = int(sys.argv[1])
    trials = int(sys.argv[2])
    seed = int(sys.argv[3]) if len(sys.argv) > 3 else None
    rng = random.Random(seed)
    counts = [[0] * n for _ in range(n)]
    for _ in range(trials):
        deck = list(range(n))
        shuffle_cards(deck, rng)
        for pos, card in enumerate(deck):
            counts[pos][card] += 1
    expected = trials / n
    chi2 = sum((c - expected) ** 2 / expected for row in counts for c in row)
    worst = max(abs(c - expected) / expected for row in counts for c in row)
    print(f"cards={n} trials={trials} expected={expected:.1f} chi2={chi2:.1f} dof={(n - 1) ** 2} worst_dev={worst:.2%}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
