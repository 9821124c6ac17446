"""Hyperparameter grids used to diversify the candidate learner."""

from __future__ import annotations

import logging
import random
import typing

logger = logging.getLogger(__name__)

# 10, 20, ..., 200
GRACE_PERIODS: tuple[int, ...] = tuple(range(10, 201, 10))
# 0.00, 0.05, ..., 1.00
SPLIT_CONFIDENCES: tuple[float, ...] = tuple(round(0.05 * i, 2) for i in range(21))
TIE_THRESHOLDS: tuple[float, ...] = tuple(round(0.05 * i, 2) for i in range(21))


class CandidateParameters(typing.NamedTuple):
    grace_period: int
    split_confidence: float
    tie_threshold: float


def sample_hyperparameters(rng: random.Random) -> CandidateParameters:
    """
    Draw one value from each grid, independently and uniformly.

    The draws happen in a fixed order (grace period, split confidence, tie
    threshold) so that a seeded generator always yields the same sequence of
    triples. Repeats across calls are allowed.
    """
    params = CandidateParameters(
        grace_period=GRACE_PERIODS[rng.randrange(len(GRACE_PERIODS))],
        split_confidence=SPLIT_CONFIDENCES[rng.randrange(len(SPLIT_CONFIDENCES))],
        tie_threshold=TIE_THRESHOLDS[rng.randrange(len(TIE_THRESHOLDS))],
    )
    logger.debug("Sampled candidate hyperparameters: %s", params)
    return params


def apply_hyperparameters(learner, params: CandidateParameters):
    learner.grace_period = params.grace_period
    learner.split_confidence = params.split_confidence
    learner.tie_threshold = params.tie_threshold


def current_hyperparameters(learner) -> CandidateParameters:
    return CandidateParameters(
        grace_period=learner.grace_period,
        split_confidence=learner.split_confidence,
        tie_threshold=learner.tie_threshold,
    )
