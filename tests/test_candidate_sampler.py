"""Unit tests for candidate hyperparameter sampling."""

import random
import unittest

from candidate_sampler import (
    GRACE_PERIODS,
    SPLIT_CONFIDENCES,
    TIE_THRESHOLDS,
    CandidateParameters,
    apply_hyperparameters,
    current_hyperparameters,
    sample_hyperparameters,
)


class Holder:
    grace_period = 0
    split_confidence = 0.0
    tie_threshold = 0.0


class TestGrids(unittest.TestCase):

    def test_grace_periods(self):
        self.assertEqual(len(GRACE_PERIODS), 20)
        self.assertEqual(GRACE_PERIODS[0], 10)
        self.assertEqual(GRACE_PERIODS[-1], 200)

    def test_confidence_grids(self):
        for grid in (SPLIT_CONFIDENCES, TIE_THRESHOLDS):
            self.assertEqual(len(grid), 21)
            self.assertEqual(grid[0], 0.0)
            self.assertEqual(grid[-1], 1.0)
            self.assertIn(0.35, grid)


class TestSampling(unittest.TestCase):

    def test_samples_stay_in_grids(self):
        rng = random.Random(0)
        for _ in range(2000):
            params = sample_hyperparameters(rng)
            self.assertIn(params.grace_period, GRACE_PERIODS)
            self.assertIn(params.split_confidence, SPLIT_CONFIDENCES)
            self.assertIn(params.tie_threshold, TIE_THRESHOLDS)

    def test_every_grace_period_reachable(self):
        rng = random.Random(1)
        seen = {sample_hyperparameters(rng).grace_period for _ in range(2000)}
        self.assertEqual(seen, set(GRACE_PERIODS))

    def test_seeded_sequence_is_reproducible(self):
        first = [sample_hyperparameters(random.Random(42)) for _ in range(3)]
        a, b = random.Random(9), random.Random(9)
        self.assertEqual(
            [sample_hyperparameters(a) for _ in range(50)],
            [sample_hyperparameters(b) for _ in range(50)],
        )
        self.assertEqual(first[0], first[1])

    def test_apply_and_read_back(self):
        holder = Holder()
        params = CandidateParameters(grace_period=30, split_confidence=0.15, tie_threshold=0.9)
        apply_hyperparameters(holder, params)
        self.assertEqual(current_hyperparameters(holder), params)


if __name__ == "__main__":
    unittest.main()
