from __future__ import annotations

import copy
import typing

from river import base

# river's Hoeffding bound takes log(1 / delta), so delta must stay positive.
MIN_DELTA = 1e-12


@typing.runtime_checkable
class LearnerHandle(typing.Protocol):
    """The capabilities the ensemble needs from a base learner."""

    grace_period: int
    split_confidence: float
    tie_threshold: float

    def train(self, x: dict, y: base.typing.ClfTarget) -> None: ...

    def predict_proba(self, x: dict) -> dict[base.typing.ClfTarget, float]: ...

    def correctly_classifies(self, x: dict, y: base.typing.ClfTarget) -> bool: ...

    def copy(self) -> LearnerHandle: ...

    def reset(self) -> None: ...


class RiverLearner:
    """
    Wraps a river classifier so the ensemble can drive it as a `LearnerHandle`.

    The three tunable hyperparameters map onto river's Hoeffding tree names:
    `grace_period` -> `grace_period`, `split_confidence` -> `delta` and
    `tie_threshold` -> `tau`. Any river classifier exposing those attributes
    (HoeffdingTreeClassifier, HoeffdingAdaptiveTreeClassifier, ...) works.

    Parameters
    ----------
    model
        The river classifier to drive. It is used as is, not cloned.
    """

    def __init__(self, model: base.Classifier):
        if not isinstance(model, base.Classifier):
            raise TypeError("model must be an instance of river.base.Classifier")
        self.model = model
        self._split_confidence = float(model.delta)

    def train(self, x, y):
        self.model.learn_one(x, y)

    def predict_proba(self, x):
        return self.model.predict_proba_one(x)

    def correctly_classifies(self, x, y):
        # An untrained river model predicts None, which never matches a label
        return self.model.predict_one(x) == y

    def copy(self) -> RiverLearner:
        return copy.deepcopy(self)

    def reset(self):
        # clone() keeps the current hyperparameters but drops the learned tree
        self.model = self.model.clone()

    @property
    def grace_period(self) -> int:
        return self.model.grace_period

    @grace_period.setter
    def grace_period(self, value: int):
        self.model.grace_period = int(value)

    @property
    def split_confidence(self) -> float:
        return self._split_confidence

    @split_confidence.setter
    def split_confidence(self, value: float):
        self._split_confidence = float(value)
        self.model.delta = max(self._split_confidence, MIN_DELTA)

    @property
    def tie_threshold(self) -> float:
        return self.model.tau

    @tie_threshold.setter
    def tie_threshold(self, value: float):
        self.model.tau = float(value)

    def __repr__(self):
        return f"RiverLearner({self.model!r})"
