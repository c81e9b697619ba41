"""
Histogram intersection scoring and top-N ranking.

The intersection of two normalized histograms is the probability mass
they share: 1.0 for identical color distributions, 0.0 when no bucket is
populated in both.
"""

import logging
from typing import Dict, List, Tuple

import numpy as np

from .histograms import Histogram

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5


def compare_histograms(h1: Histogram, h2: Histogram) -> float:
    """
    Histogram intersection: sum over buckets of min(h1[i], h2[i]).

    Args:
        h1: First histogram.
        h2: Second histogram, same depth as h1.

    Returns:
        Similarity in [0, 1].

    Raises:
        ValueError: If the histograms were built with different depths.
    """
    if h1.depth != h2.depth:
        raise ValueError(
            f"Cannot compare histograms of depth {h1.depth} ({h1.name}) "
            f"and {h2.depth} ({h2.name})"
        )
    return float(np.minimum(h1.buckets, h2.buckets).sum())


def rank_results(query: Histogram,
                 histograms: Dict[str, Histogram],
                 top_n: int = DEFAULT_TOP_N) -> List[Tuple[str, float]]:
    """
    Score every histogram against the query and keep the best top_n.

    Sorting is stable, so equal scores keep the collection's order.

    Args:
        query: Query histogram.
        histograms: Dataset histograms keyed by image name.
        top_n: Maximum number of results to return.

    Returns:
        (name, score) pairs, highest score first. Empty when there is
        nothing to rank.
    """
    if isinstance(top_n, bool) or not isinstance(top_n, int) or top_n <= 0:
        raise ValueError(f"top_n must be a positive integer, got {top_n!r}")

    scored = [
        (name, compare_histograms(query, histogram))
        for name, histogram in histograms.items()
    ]
    ranked = sorted(scored, key=lambda x: -x[1])[:top_n]

    logger.debug(f"Ranked {len(scored)} histograms, returning {len(ranked)}")
    return ranked
