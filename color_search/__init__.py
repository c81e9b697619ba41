"""
color_search — Color histogram similarity search over image directories.

Ranks every image in a directory by histogram intersection with a query
image. Histograms are extracted in parallel on each query; there is no
persistent index.

Modules:
    engine         Main SearchEngine class and worker-count benchmark
    histograms     Quantized RGB histogram extraction
    scoring        Histogram intersection and top-N ranking
    partitioning   Balanced dataset partitioning
    dataset        Directory listing and parallel extraction
    preprocessing  Image decoding
    config         Search configuration
"""

from .config import SearchConfig
from .dataset import BatchCancelledError, compute_dataset_histograms
from .engine import SearchEngine, SearchResult, benchmark_workers
from .histograms import (
    EmptyImageError,
    Histogram,
    HistogramError,
    ImageDecodeError,
    compute_histogram,
    extract_histogram,
)
from .partitioning import divide_dataset
from .scoring import compare_histograms, rank_results

__version__ = "1.0.0"

__all__ = [
    "BatchCancelledError",
    "EmptyImageError",
    "Histogram",
    "HistogramError",
    "ImageDecodeError",
    "SearchConfig",
    "SearchEngine",
    "SearchResult",
    "benchmark_workers",
    "compare_histograms",
    "compute_dataset_histograms",
    "compute_histogram",
    "divide_dataset",
    "extract_histogram",
    "rank_results",
]
