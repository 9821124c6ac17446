from __future__ import annotations

import dataclasses
import itertools
import time
from typing import Any, Iterable, Optional, Union

import pandas as pd
from river import base, metrics
from tqdm.auto import tqdm

DEFAULT_METRICS = {
    "accuracy": metrics.Accuracy(),
    "kappa": metrics.CohenKappa(),
    "precision": metrics.MacroPrecision(),
    "recall": metrics.MacroRecall(),
}


@dataclasses.dataclass
class PrequentialResults:
    learner: str
    stream: str
    instances: int
    wallclock: float
    cpu_time: float
    cumulative: dict
    windows: pd.DataFrame
    predictions: Optional[list] = None
    ground_truth_y: Optional[list] = None

    def metrics_per_window(self) -> pd.DataFrame:
        return self.windows


def _fresh_metrics() -> dict:
    return {name: metric.clone() for name, metric in DEFAULT_METRICS.items()}


def _snapshot(evaluators: dict) -> dict:
    return {name: metric.get() for name, metric in evaluators.items()}


def prequential_evaluation(
    stream: Iterable[tuple[dict, Any]],
    learner: base.Classifier,
    max_instances: Optional[int] = None,
    window_size: int = 1000,
    store_predictions: bool = False,
    store_y: bool = False,
    progress_bar: Union[bool, tqdm] = False,
    stream_name: Optional[str] = None,
) -> PrequentialResults:
    """
    Run a test-then-train evaluation of a river classifier on a stream.

    Each instance is first predicted with `predict_proba_one` (the argmax is
    the prediction fed to the metrics), then learnt with `learn_one`. Metrics
    are kept cumulatively and over tumbling windows of `window_size`
    instances; a trailing partial window is reported too.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")

    if max_instances is not None:
        stream = itertools.islice(stream, max_instances)

    predictions_to_store = [] if store_predictions else None
    ground_truth_y_to_store = [] if store_y else None

    evaluator_cumulative = _fresh_metrics()
    evaluator_windowed = _fresh_metrics()
    window_rows = []

    if isinstance(progress_bar, tqdm):
        actual_progress_bar = progress_bar
    elif progress_bar:
        actual_progress_bar = tqdm(total=max_instances, desc=f"Eval {learner}")
    else:
        actual_progress_bar = None

    start_wallclock_time = time.perf_counter()
    start_cpu_time = time.process_time()

    instances_processed = 0
    instances_in_window = 0
    for x, y in stream:
        # 1. Predict
        y_proba = learner.predict_proba_one(x)
        y_pred = max(y_proba, key=y_proba.get) if y_proba else None

        # 2. Evaluate
        for metric in itertools.chain(evaluator_cumulative.values(), evaluator_windowed.values()):
            metric.update(y, y_pred)

        # 3. Train
        learner.learn_one(x, y)

        instances_processed += 1
        instances_in_window += 1
        if instances_in_window == window_size:
            window_rows.append({"instances": instances_processed, **_snapshot(evaluator_windowed)})
            evaluator_windowed = _fresh_metrics()
            instances_in_window = 0

        if predictions_to_store is not None:
            predictions_to_store.append(y_proba)
        if ground_truth_y_to_store is not None:
            ground_truth_y_to_store.append(y)
        if actual_progress_bar is not None:
            actual_progress_bar.update(1)

    if actual_progress_bar is not None:
        actual_progress_bar.close()

    elapsed_wallclock_time = time.perf_counter() - start_wallclock_time
    elapsed_cpu_time = time.process_time() - start_cpu_time

    if instances_in_window > 0:
        window_rows.append({"instances": instances_processed, **_snapshot(evaluator_windowed)})

    return PrequentialResults(
        learner=str(learner),
        stream=stream_name if stream_name is not None else str(stream),
        instances=instances_processed,
        wallclock=elapsed_wallclock_time,
        cpu_time=elapsed_cpu_time,
        cumulative=_snapshot(evaluator_cumulative),
        windows=pd.DataFrame(window_rows, columns=["instances", *DEFAULT_METRICS]),
        predictions=predictions_to_store,
        ground_truth_y=ground_truth_y_to_store,
    )
