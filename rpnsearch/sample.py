"""
rpnsearch Bulk Sampling

Dumps large numbers of random expressions with their values as CSV, for
studying the distribution of values the generator reaches.
"""

import csv
from typing import Any, Dict, Iterable, Iterator, List, Optional, TextIO, Tuple
import logging
import random

import numpy as np

from .core import Stack, evaluate, format_number
from .generate import generate

logger = logging.getLogger(__name__)

CSV_HEADER = ["num", "expression"]


def sample_expressions(count: int, length: int, rng: Optional[random.Random] = None,
                       min_number: int = 1, max_number: int = 10) -> Iterator[Tuple[float, Stack]]:
    """
    Yield ``count`` random expressions of the requested length with their values.

    Args:
        count: Number of expressions
        length: Requested expression length
        rng: Random number generator
        min_number: Smallest literal (inclusive)
        max_number: Largest literal (exclusive)

    Yields:
        Tuple of (value, expression)
    """
    rng = rng or random.Random()
    for _ in range(count):
        expression = generate(length, rng, min_number, max_number)
        yield evaluate(expression), expression


def write_samples(stream: TextIO, samples: Iterable[Tuple[float, Stack]]) -> List[float]:
    """
    Write samples as CSV rows under a ``num,expression`` header.

    Returns:
        The values written, in order
    """
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)

    values = []
    for value, expression in samples:
        writer.writerow([format_number(value), str(expression)])
        values.append(value)

    return values


def summarize_values(values: Iterable[float]) -> Dict[str, Any]:
    """
    Summary statistics of sampled values.

    inf and nan results are counted separately; the statistics only cover
    finite values and are nan when there are none.
    """
    data = np.asarray(list(values), dtype=np.float64)
    finite = data[np.isfinite(data)]

    summary = {
        "count": int(data.size),
        "finite": int(finite.size),
        "nan": int(np.isnan(data).sum()),
        "inf": int(np.isinf(data).sum()),
    }

    if finite.size:
        summary.update({
            "mean": float(np.mean(finite)),
            "median": float(np.median(finite)),
            "std": float(np.std(finite)),
            "min": float(np.min(finite)),
            "max": float(np.max(finite)),
        })
    else:
        summary.update({key: float("nan") for key in ("mean", "median", "std", "min", "max")})

    logger.info(f"Sampled {summary['count']} values: {summary['finite']} finite, "
                f"{summary['nan']} nan, {summary['inf']} inf")
    return summary
