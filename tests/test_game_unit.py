import random
import unittest
from collections import Counter

from game import (
    Board,
    BoardGenerator,
    BoardInvariantError,
    Card,
    CardSpec,
    StaticCardProvider,
    build_board,
    card_count_for_difficulty,
    grid_columns_for_difficulty,
    normalize_difficulty,
    placeholder_specs,
    shuffle_cards,
    validate_board,
)


class _ListProvider:
    def __init__(self, specs):
        self.specs = specs
        self.calls = []

    def fetch(self, difficulty):
        self.calls.append(difficulty)
        return list(self.specs)


class _BrokenProvider:
    def fetch(self, difficulty):
        raise ConnectionError("network down")


class TestGameUnit(unittest.TestCase):
    def _mk_board(self, names):
        return Board(cards=[Card(id=i, name=n, artwork_ref=f"{n}.png") for i, n in enumerate(names)])

    def test_given_difficulty_names_when_sizing_then_expected_counts(self):
        self.assertEqual(card_count_for_difficulty('easy'), 8)
        self.assertEqual(card_count_for_difficulty('medium'), 12)
        self.assertEqual(card_count_for_difficulty('hard'), 16)
        # Unknown or missing values fall back to medium
        self.assertEqual(card_count_for_difficulty('nightmare'), 12)
        self.assertEqual(card_count_for_difficulty(None), 12)
        self.assertEqual(normalize_difficulty(' HARD '), 'hard')
        self.assertEqual(grid_columns_for_difficulty('easy'), 2)
        self.assertEqual(grid_columns_for_difficulty('bogus'), 3)

    def test_given_board_with_duplicate_ids_when_validating_then_invariant_error(self):
        board = self._mk_board(['a', 'b', 'c'])
        board.cards[2].id = 0
        self.assertEqual(board.duplicate_ids(), [0])
        with self.assertRaises(BoardInvariantError):
            validate_board(board, 3)
        with self.assertRaises(BoardInvariantError):
            validate_board(self._mk_board(['a', 'b']), 3)

    def test_given_board_when_pretty_then_positions_and_names_rendered(self):
        board = self._mk_board(['pikachu', 'ekans', 'arbok', 'raichu', 'vulpix'])
        txt = board.pretty(columns=4)
        lines = txt.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertIn('pikachu', lines[0])
        self.assertIn(' 4 vulpix', lines[1])

    def test_given_sequence_when_shuffled_then_same_multiset(self):
        items = list(range(16))
        rng = random.Random(3)
        for _ in range(50):
            out = shuffle_cards(items, rng)
            self.assertIs(out, items)  # in place
            self.assertEqual(sorted(items), list(range(16)))

    def test_given_many_trials_when_shuffling_then_positions_uniform(self):
        rng = random.Random(12345)
        trials = 6000
        counts = [Counter() for _ in range(3)]
        for _ in range(trials):
            items = ['a', 'b', 'c']
            shuffle_cards(items, rng)
            for pos, item in enumerate(items):
                counts[pos][item] += 1
        # Each item lands in each position about a third of the time
        for pos in range(3):
            for item in 'abc':
                self.assertGreater(counts[pos][item], 1700)
                self.assertLess(counts[pos][item], 2300)

    def test_given_specs_when_building_board_then_sequential_ids_shuffled(self):
        specs = [CardSpec(name=f"card-{i}", artwork_ref=f"{i}.png") for i in range(12)]
        board = build_board(specs, random.Random(1))
        self.assertEqual(sorted(board.ids()), list(range(12)))
        # Ids follow source order before the shuffle
        by_id = {c.id: c.name for c in board}
        self.assertEqual(by_id[5], 'card-5')
        self.assertTrue(all(not c.revealed for c in board))

    def test_given_every_difficulty_when_generating_then_size_and_unique_ids(self):
        gen = BoardGenerator(StaticCardProvider(rng=random.Random(5)), seed=5)
        for level in ('easy', 'medium', 'hard', 'unknown'):
            board = gen.generate(level)
            self.assertEqual(len(board), card_count_for_difficulty(level))
            self.assertEqual(len(set(board.ids())), len(board))
            self.assertEqual(board.duplicate_ids(), [])

    def test_given_failing_provider_when_generating_then_placeholder_board(self):
        gen = BoardGenerator(_BrokenProvider(), seed=1)
        with self.assertLogs('memory_core.deal', level='WARNING'):
            board = gen.generate('easy')
        self.assertEqual(len(board), 8)
        self.assertEqual(sorted(c.name for c in board), sorted(s.name for s in placeholder_specs(8)))
        self.assertIn('pokemon-1', {c.name for c in board})

    def test_given_short_provider_when_generating_then_placeholders_used(self):
        provider = _ListProvider([CardSpec('only', 'only.png')] * 3)
        board = BoardGenerator(provider, seed=1).generate('easy')
        self.assertEqual(provider.calls, ['easy'])
        self.assertEqual(len(board), 8)
        self.assertNotIn('only', {c.name for c in board})

    def test_given_long_provider_when_generating_then_truncated_to_count(self):
        provider = _ListProvider([CardSpec(f"n{i}", f"{i}.png") for i in range(20)])
        board = BoardGenerator(provider, seed=1).generate('medium')
        self.assertEqual(len(board), 12)
        self.assertEqual(sorted(board.ids()), list(range(12)))

    def test_given_placeholders_when_requested_twice_then_stable(self):
        self.assertEqual(placeholder_specs(4), placeholder_specs(4))
        self.assertTrue(placeholder_specs(2)[1].artwork_ref.endswith('/2.png'))


if __name__ == '__main__':
    unittest.main()
