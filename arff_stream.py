from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Tuple, Union

import numpy as np
from scipy.io.arff import loadarff

logger = logging.getLogger(__name__)


def _load(filepath: str):
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return loadarff(f)
    except FileNotFoundError:
        logger.error("File not found at '%s'", filepath)
        raise
    except Exception as e:
        logger.error("Error loading ARFF file '%s': %s", filepath, e)
        raise


def _resolve_target(feature_names: List[str], target: Union[int, str]) -> str:
    if isinstance(target, int):
        try:
            return feature_names[target]
        except IndexError:
            raise ValueError(f"Target index {target} out of range for attributes {feature_names}")
    if target not in feature_names:
        raise ValueError(f"Target name '{target}' not found in attributes {feature_names}")
    return target


def _to_python(value: Any) -> Any:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Could not decode bytes value %r", value)
            return value
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return None if np.isnan(value) else float(value)
    return value


def arff_nominal_attributes(filepath: str, target: Union[int, str] = -1) -> List[str]:
    """Names of the nominal input attributes of an ARFF file, target excluded."""
    _, meta = _load(filepath)
    feature_names = meta.names()
    target_name = _resolve_target(feature_names, target)
    return [
        name
        for name, kind in zip(feature_names, meta.types())
        if kind == "nominal" and name != target_name
    ]


def arff_to_river_stream(
    filepath: str,
    task: str = "classification",
    target: Union[int, str] = -1
) -> Iterator[Tuple[Dict[str, Any], Any]]:
    """
    Reads an ARFF file and yields data rows in the format expected by River:
    (feature_dict, target_label_or_value).

    Args:
        filepath: Path to the ARFF file.
        task: "classification" (default) or "regression".
        target: Which attribute to use as y:
          - int index into the ARFF's attribute list (default -1, last attribute)
          - str name of the attribute

    Yields:
        A tuple (x, y) where
          x: dict of feature_name -> Python-native value (missing values are None)
          y: float for regression, or str/int for classification

    Raises:
        FileNotFoundError: If the filepath does not exist.
        ValueError: If `task` is not "classification" or "regression",
                    or if `target` is invalid.
    """
    if task not in ("classification", "regression"):
        raise ValueError(f"Invalid task '{task}'. Use 'classification' or 'regression'.")

    data, meta = _load(filepath)
    feature_names = meta.names()
    target_name = _resolve_target(feature_names, target)
    input_feature_names = [n for n in feature_names if n != target_name]

    logger.info(
        "ARFF reader: task='%s', target='%s', features=%s", task, target_name, input_feature_names
    )

    for row in data:
        x = {name: _to_python(row[name]) for name in input_feature_names}

        y = _to_python(row[target_name])
        if task == "regression":
            try:
                y = None if y is None else float(y)
            except (TypeError, ValueError):
                y = None
        elif isinstance(y, float) and y.is_integer():
            y = int(y)

        # scipy marks missing nominal values with '?'
        if y is None or y == "?":
            logger.warning("Skipping row due to missing target: %s", row)
            continue
        yield x, y
