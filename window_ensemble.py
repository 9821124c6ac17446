from __future__ import annotations

import collections
import dataclasses
import logging
import random
import typing

from river import base, tree

from candidate_sampler import (
    CandidateParameters,
    apply_hyperparameters,
    current_hyperparameters,
    sample_hyperparameters,
)
from river_learner import LearnerHandle, RiverLearner

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when the ensemble is built with invalid settings."""


class NotInitializedError(RuntimeError):
    """Raised when scoring or training runs before `reset()`."""


@dataclasses.dataclass
class AccuracyCounter:
    seen: int = 0
    correct: int = 0

    def update(self, correct: bool):
        self.seen += 1
        if correct:
            self.correct += 1

    @property
    def accuracy(self) -> float:
        return self.correct / self.seen if self.seen else 0.0


class WindowReport(typing.NamedTuple):
    """What happened at one window boundary."""

    window: int
    weakest_index: int
    weakest_accuracy: float
    candidate_accuracy: float
    replaced: bool
    next_candidate_params: CandidateParameters


def weakest_index(accuracies: typing.Sequence[float]) -> int:
    """Index of the lowest accuracy; the first one wins on ties."""
    min_index = 0
    min_value = accuracies[0]
    for i, value in enumerate(accuracies):
        if value < min_value:
            min_value = value
            min_index = i
    return min_index


def weighted_vote(vote: dict, accuracy: float) -> dict:
    """
    Normalize a member's vote to sum 1 and scale it by the member's accuracy.

    A vote summing to zero (or less) yields an empty dict. An accuracy of
    exactly zero leaves the normalized vote unscaled.
    """
    total = sum(vote.values())
    if total <= 0.0:
        return {}
    weight = accuracy if accuracy > 0.0 else 1.0
    return {label: proba / total * weight for label, proba in vote.items()}


class WindowReplacementEnsemble(base.Classifier):
    """
    Fixed-size ensemble that periodically swaps its weakest member for a
    randomly-configured candidate.

    Every member and one extra "candidate" learner see every instance. The
    candidate is evaluated alongside the members but never votes. After each
    window of `window_length` scored instances the member with the lowest
    accuracy is replaced by the candidate if the candidate did strictly better.
    Either way a new candidate, reset and with freshly sampled grace period,
    split confidence and tie threshold, starts the next window.

    Members vote with their L1-normalized class probabilities weighted by their
    accuracy since they joined the pool.

    Parameters
    ----------
    model
        Template learner. A river classifier (wrapped in `RiverLearner`) or any
        object implementing `LearnerHandle`. Defaults to a Hoeffding tree with
        `grace_period=50` and `delta=0.01`.
    ensemble_size
        Number of voting members. Must be at least 1.
    window_length
        Number of scored instances between two replacement decisions. Must be
        at least 1.
    seed
        Seed of the random source used to sample candidate hyperparameters.
    rng
        Random source to use instead of one seeded with `seed`. It is shared,
        not copied, and it is not re-seeded by `reset()`.
    """

    def __init__(
        self,
        model: base.Classifier | LearnerHandle | None = None,
        ensemble_size: int = 10,
        window_length: int = 1000,
        seed: int | None = None,
        rng: random.Random | None = None,
    ):
        for name, value in (("ensemble_size", ensemble_size), ("window_length", window_length)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigurationError(f"{name} must be at least 1, got {value}")

        self.model = (
            model
            if model is not None
            else tree.HoeffdingTreeClassifier(grace_period=50, delta=0.01)
        )
        self.ensemble_size = ensemble_size
        self.window_length = window_length
        self.seed = seed
        self.rng = rng

        self._rng = rng if rng is not None else random.Random(seed)
        self._members: list[LearnerHandle] | None = None
        self._member_stats: list[AccuracyCounter] = []
        self._candidate: LearnerHandle | None = None
        self._candidate_stats = AccuracyCounter()
        self._window_counter = 0
        self._replacement_history: list[WindowReport] = []

    @classmethod
    def _unit_test_params(cls):
        yield {"ensemble_size": 3, "window_length": 50, "seed": 42}

    @property
    def _multiclass(self):
        return True

    # ------------------------------------------------------------------
    # Initialization

    def _new_template(self) -> LearnerHandle:
        if isinstance(self.model, base.Classifier):
            return RiverLearner(self.model.clone())
        if isinstance(self.model, LearnerHandle):
            return self.model.copy()
        raise TypeError(
            "model must be a river classifier or implement LearnerHandle, "
            f"got {type(self.model).__name__}"
        )

    def reset(self):
        """Build a fresh pool and candidate from the template learner."""
        template = self._new_template()
        template.reset()

        self._members = [template.copy() for _ in range(self.ensemble_size)]
        self._member_stats = [AccuracyCounter() for _ in range(self.ensemble_size)]
        self._candidate = template.copy()
        self._candidate_stats = AccuracyCounter()
        self._window_counter = 0
        self._replacement_history = []

        if self.rng is None:
            self._rng = random.Random(self.seed)
        apply_hyperparameters(self._candidate, sample_hyperparameters(self._rng))

    @property
    def initialized(self) -> bool:
        return self._members is not None

    def _check_initialized(self):
        if self._members is None:
            raise NotInitializedError(
                f"{type(self).__name__} must be reset() before scoring or training"
            )

    # ------------------------------------------------------------------
    # Read path

    def score_one(self, x: dict, y: base.typing.ClfTarget) -> dict[base.typing.ClfTarget, float]:
        """
        Score one labelled instance and return the combined member vote.

        Every member's and the candidate's accuracy counters are updated, then
        the window counter advances and, on a window boundary, the replacement
        decision runs. The returned vote is the raw accuracy-weighted sum, not
        normalized.
        """
        self._check_initialized()

        combined: typing.Counter = collections.Counter()
        for member, stats in zip(self._members, self._member_stats):
            stats.update(member.correctly_classifies(x, y))
            combined.update(weighted_vote(member.predict_proba(x), stats.accuracy))

        # The candidate is shadow-evaluated only, its vote is never combined
        self._candidate_stats.update(self._candidate.correctly_classifies(x, y))

        self._window_counter += 1
        if self._window_counter == self.window_length:
            self._replace_weakest()
            self._window_counter = 0

        return dict(combined)

    def _replace_weakest(self):
        accuracies = self.accuracies
        index = weakest_index(accuracies)
        candidate_accuracy = self._candidate_stats.accuracy
        replaced = candidate_accuracy > accuracies[index]

        if replaced:
            promoted = self._candidate
            self._members[index] = promoted
            self._member_stats[index] = AccuracyCounter()
            # The promoted learner now belongs to the pool
            self._candidate = promoted.copy()
            logger.info(
                "Window %d: candidate (acc=%.4f) replaced member %d (acc=%.4f)",
                len(self._replacement_history) + 1,
                candidate_accuracy,
                index,
                accuracies[index],
            )
        else:
            logger.debug(
                "Window %d: candidate (acc=%.4f) kept out, weakest member %d (acc=%.4f)",
                len(self._replacement_history) + 1,
                candidate_accuracy,
                index,
                accuracies[index],
            )

        self._candidate.reset()
        params = sample_hyperparameters(self._rng)
        apply_hyperparameters(self._candidate, params)
        self._candidate_stats = AccuracyCounter()

        self._replacement_history.append(
            WindowReport(
                window=len(self._replacement_history) + 1,
                weakest_index=index,
                weakest_accuracy=accuracies[index],
                candidate_accuracy=candidate_accuracy,
                replaced=replaced,
                next_candidate_params=params,
            )
        )

    # ------------------------------------------------------------------
    # Write path

    def train_one(self, x: dict, y: base.typing.ClfTarget):
        """Train every member and the candidate on one instance."""
        self._check_initialized()
        for member in self._members:
            member.train(x, y)
        self._candidate.train(x, y)

    # ------------------------------------------------------------------
    # river estimator interface

    def learn_one(self, x: dict, y: base.typing.ClfTarget, **kwargs):
        if not self.initialized:
            self.reset()
        self.score_one(x, y)
        self.train_one(x, y)

    def predict_proba_one(self, x: dict, **kwargs) -> dict[base.typing.ClfTarget, float]:
        y_pred: typing.Counter = collections.Counter()
        if not self.initialized:
            self.reset()
            return {}

        for member, stats in zip(self._members, self._member_stats):
            y_pred.update(weighted_vote(member.predict_proba(x), stats.accuracy))

        total = sum(y_pred.values())
        if total > 0:
            return {label: proba / total for label, proba in y_pred.items()}
        return {}

    # ------------------------------------------------------------------
    # Inspection

    @property
    def members(self) -> tuple[LearnerHandle, ...]:
        self._check_initialized()
        return tuple(self._members)

    @property
    def member_stats(self) -> tuple[AccuracyCounter, ...]:
        return tuple(dataclasses.replace(s) for s in self._member_stats)

    @property
    def accuracies(self) -> list[float]:
        return [stats.accuracy for stats in self._member_stats]

    @property
    def candidate(self) -> LearnerHandle:
        self._check_initialized()
        return self._candidate

    @property
    def candidate_stats(self) -> AccuracyCounter:
        return dataclasses.replace(self._candidate_stats)

    @property
    def candidate_accuracy(self) -> float:
        return self._candidate_stats.accuracy

    @property
    def candidate_params(self) -> CandidateParameters:
        return current_hyperparameters(self.candidate)

    @property
    def window_counter(self) -> int:
        return self._window_counter

    @property
    def replacement_history(self) -> list[WindowReport]:
        return list(self._replacement_history)

    @property
    def n_replacements(self) -> int:
        return sum(report.replaced for report in self._replacement_history)
