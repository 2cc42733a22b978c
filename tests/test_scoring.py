"""
Scoring model tests.
"""
import numpy as np
import pytest

from planarize.scoring import (balance_bonus, complexity_score, difficulty_multiplier,
                               planarity_percent, total_score)


class TestDifficulty:

    @pytest.mark.parametrize("label,mult", [
        ("Expert", 1.6),
        ("super-EXPERT-mode", 1.6),
        ("hard", 1.3),
        ("Hardcore", 1.3),
        ("Easy", 1.0),
        ("", 1.0),
        (None, 1.0),
    ])
    def test_multiplier(self, label, mult):
        assert difficulty_multiplier(label) == mult


class TestPlanarity:

    def test_always_in_range(self):
        for initial in range(1, 30):
            for current in range(0, 60):
                p = planarity_percent(initial, current)
                assert 0 <= p <= 100
                assert (p == 100) == (current == 0)

    def test_zero_initial_is_floored(self):
        assert planarity_percent(0, 0) == 100
        assert planarity_percent(0, 3) == 0

    def test_progress(self):
        assert planarity_percent(4, 1) == 75
        assert planarity_percent(4, 9) == 0


class TestComplexityAndBalance:

    def test_complexity(self):
        assert complexity_score(6, 5) == 42
        assert complexity_score(6, 5, 1.3) == 55
        assert complexity_score(10, 20, 1.6) == 224

    def test_balance_without_edges(self):
        assert balance_bonus(np.zeros((3, 2)), [], 800, 600) == 0

    def test_balance_uniform_lengths(self, square):
        pos, _ = square
        sides = [(0, 1), (1, 2), (2, 3), (3, 0)]
        assert balance_bonus(pos, sides, 800, 600) == 100

    def test_balance_floor(self):
        pos = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1000.0]])
        assert balance_bonus(pos, [(0, 1), (0, 2)], 1000, 1000) == 40


class TestTotalScore:

    def test_formula(self):
        assert total_score(100, 50, 100, 10, 5) == 1325

    def test_never_negative(self):
        assert total_score(0, 0, 0, 500, 900) == 0
