"""
Color similarity search engine.

Orchestrates the search pipeline:
    1. Extract the query histogram (serially; failure is fatal)
    2. Extract dataset histograms on a worker pool
    3. Score each dataset histogram by intersection with the query
    4. Rank and keep the top N

Dataset images that fail to decode are reported and skipped; only the
query image and the dataset directory listing can abort a search.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from .config import SearchConfig
from .dataset import ErrorCallback, Failure, compute_dataset_histograms
from .histograms import extract_histogram
from .scoring import rank_results

logger = logging.getLogger(__name__)

TimingHook = Callable[[int, float], None]


@dataclass
class SearchResult:
    """Outcome of one similarity search."""

    query: str
    matches: List[Tuple[str, float]] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)
    processed: int = 0
    elapsed: float = 0.0


class SearchEngine:
    """
    Histogram-intersection search over a directory of images.

    Every search rescans the dataset; nothing is cached between calls.
    """

    def __init__(self,
                 config: Optional[SearchConfig] = None,
                 timing_hook: Optional[TimingHook] = None):
        """
        Args:
            config: Search parameters; defaults to SearchConfig().
            timing_hook: Called as timing_hook(workers, seconds) after
                each dataset batch completes.
        """
        self.config = config or SearchConfig()
        self.config.validate()
        self.timing_hook = timing_hook

    def search(self,
               query_path: str,
               dataset_dir: str,
               top_n: Optional[int] = None,
               on_error: Optional[ErrorCallback] = None,
               cancel_event: Optional[threading.Event] = None) -> SearchResult:
        """
        Find the dataset images most similar in color to the query.

        Args:
            query_path: Query image file.
            dataset_dir: Directory of candidate images.
            top_n: Results to return; defaults to config.top_n.
            on_error: Called for every dataset image that fails.
            cancel_event: Set it to abort the dataset batch.

        Returns:
            SearchResult with matches sorted by score, highest first.

        Raises:
            ImageDecodeError, EmptyImageError: Query image is unusable.
            OSError: Dataset directory cannot be listed.
            BatchCancelledError: cancel_event was set mid-batch.
        """
        top_n = self.config.top_n if top_n is None else top_n
        if isinstance(top_n, bool) or not isinstance(top_n, int) or top_n <= 0:
            raise ValueError(f"top_n must be a positive integer, got {top_n!r}")

        query = extract_histogram(query_path, self.config.depth)

        start = time.perf_counter()
        scan = compute_dataset_histograms(
            dataset_dir,
            workers=self.config.workers,
            depth=self.config.depth,
            extensions=self.config.extensions,
            on_error=on_error,
            cancel_event=cancel_event,
        )
        elapsed = time.perf_counter() - start

        if self.timing_hook is not None:
            self.timing_hook(self.config.workers, elapsed)

        matches = rank_results(query, scan.histograms, top_n)

        logger.info(
            f"Search complete: {len(scan.histograms)} images scored in "
            f"{elapsed:.3f}s with K={self.config.workers} -> {len(matches)} results"
        )

        return SearchResult(
            query=query.name,
            matches=matches,
            failures=scan.failures,
            processed=len(scan.histograms),
            elapsed=elapsed,
        )


def benchmark_workers(query_path: str,
                      dataset_dir: str,
                      worker_counts: Iterable[int],
                      config: Optional[SearchConfig] = None
                      ) -> List[Tuple[int, float]]:
    """
    Time a full search once per worker count.

    Returns:
        (workers, elapsed_seconds) pairs in the order given.
    """
    base = config or SearchConfig()
    timings = []

    for workers in worker_counts:
        run_config = SearchConfig(
            depth=base.depth,
            workers=workers,
            top_n=base.top_n,
            extensions=base.extensions,
        )
        engine = SearchEngine(
            run_config,
            timing_hook=lambda k, seconds: timings.append((k, seconds)),
        )
        engine.search(query_path, dataset_dir)

    return timings
