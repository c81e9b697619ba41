"""
Search configuration.

Defaults can be overridden with environment variables:

    COLOR_SEARCH_DEPTH       bits kept per color channel (default 3)
    COLOR_SEARCH_WORKERS     concurrent worker tasks (default: CPU count)
    COLOR_SEARCH_TOP_N       number of results returned (default 5)
    COLOR_SEARCH_EXTENSIONS  comma-separated image extensions
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from .histograms import DEFAULT_DEPTH, MAX_DEPTH
from .scoring import DEFAULT_TOP_N

DEFAULT_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".webp"})


def normalize_extensions(extensions: Iterable[str]) -> FrozenSet[str]:
    """Lower-case extensions and make sure each starts with a dot."""
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)


def _env_extensions() -> FrozenSet[str]:
    raw = os.environ.get("COLOR_SEARCH_EXTENSIONS")
    if not raw:
        return DEFAULT_EXTENSIONS
    return normalize_extensions(raw.split(","))


ENV_DEPTH = int(os.environ.get("COLOR_SEARCH_DEPTH", str(DEFAULT_DEPTH)))
ENV_WORKERS = int(os.environ.get("COLOR_SEARCH_WORKERS", str(os.cpu_count() or 1)))
ENV_TOP_N = int(os.environ.get("COLOR_SEARCH_TOP_N", str(DEFAULT_TOP_N)))
ENV_EXTENSIONS = _env_extensions()


@dataclass
class SearchConfig:
    """Parameters shared by every stage of one similarity search."""

    # Bits kept per channel; fixes the histogram shape for the whole run
    depth: int = ENV_DEPTH
    # Number of dataset partitions processed concurrently
    workers: int = ENV_WORKERS
    top_n: int = ENV_TOP_N
    extensions: FrozenSet[str] = field(default_factory=lambda: ENV_EXTENSIONS)

    def __post_init__(self) -> None:
        self.extensions = normalize_extensions(self.extensions)

    @property
    def buckets(self) -> int:
        """Histogram length for the configured depth."""
        return 1 << (3 * self.depth)

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        for name in ("depth", "workers", "top_n"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{name} must be an integer, got {value!r}"
                raise ValueError(msg)
        if not 1 <= self.depth <= MAX_DEPTH:
            msg = f"depth must be in [1, {MAX_DEPTH}], got {self.depth}"
            raise ValueError(msg)
        if self.workers <= 0:
            msg = f"workers must be positive, got {self.workers}"
            raise ValueError(msg)
        if self.top_n <= 0:
            msg = f"top_n must be positive, got {self.top_n}"
            raise ValueError(msg)
        if not self.extensions:
            msg = "at least one image extension is required"
            raise ValueError(msg)
