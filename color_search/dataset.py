"""
Parallel histogram extraction over a directory of images.

The directory listing is split into contiguous partitions and each
partition runs as one task on a thread pool:

    - every task extracts histograms for the image files in its slice
    - results go to a shared HistogramSink (the only shared state)
    - per-file failures are logged and skipped, never fatal
    - the sink is read only after every task has returned

OpenCV decoding and numpy quantization release the GIL for their heavy
loops, so threads scale across cores for this workload.
"""

import os
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import DEFAULT_EXTENSIONS
from .histograms import Histogram, HistogramError, extract_histogram
from .partitioning import divide_dataset

logger = logging.getLogger(__name__)

Failure = Tuple[str, str]
ErrorCallback = Callable[[str, Exception], None]


class BatchCancelledError(RuntimeError):
    """The batch was aborted through its cancel event."""


@dataclass
class DatasetScan:
    """Histograms and failures collected from one dataset directory."""

    histograms: Dict[str, Histogram] = field(default_factory=dict)
    failures: List[Failure] = field(default_factory=list)
    partitions: int = 0


class HistogramSink:
    """
    Thread-safe collection point for histograms emitted by workers.

    Writers call emit() concurrently. Once close() is called no more
    emissions are accepted, and only then can collect() read the result.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._histograms: Dict[str, Histogram] = {}
        self._closed = False

    def emit(self, histogram: Histogram) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"Sink is closed; cannot emit {histogram.name}")
            if histogram.name in self._histograms:
                logger.debug(f"Duplicate image name {histogram.name}, overwriting")
            self._histograms[histogram.name] = histogram

    def close(self) -> None:
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def collect(self) -> Dict[str, Histogram]:
        """Return the collected histograms keyed by name."""
        with self._lock:
            if not self._closed:
                raise RuntimeError("Sink read before all workers finished")
            return dict(self._histograms)

    def __len__(self) -> int:
        with self._lock:
            return len(self._histograms)


def list_dataset(image_dir: str) -> List[os.DirEntry]:
    """
    List a dataset directory, sorted by entry name.

    Raises:
        OSError: If the directory does not exist or cannot be read.
    """
    with os.scandir(image_dir) as it:
        return sorted(it, key=lambda e: e.name)


def is_image_entry(entry: os.DirEntry,
                   extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> bool:
    """True for regular files whose extension is in the given set."""
    if os.path.splitext(entry.name)[1].lower() not in extensions:
        return False
    try:
        return entry.is_file()
    except OSError:
        return False


def _is_set(event: Optional[threading.Event]) -> bool:
    return event is not None and event.is_set()


def process_partition(partition: List[os.DirEntry],
                      image_dir: str,
                      depth: int,
                      extensions: Iterable[str],
                      sink: HistogramSink,
                      on_error: Optional[ErrorCallback] = None,
                      cancel_event: Optional[threading.Event] = None,
                      stop_event: Optional[threading.Event] = None
                      ) -> List[Failure]:
    """
    Compute histograms for one partition and emit them into the sink.

    The loop stops between files once either cancel_event (owned by the
    caller) or stop_event (owned by the pool) is set.

    Returns:
        (filename, cause) for every file that could not be processed.
    """
    failures = []
    emitted = 0

    for entry in partition:
        if _is_set(cancel_event) or _is_set(stop_event):
            logger.debug(f"Partition cancelled after {emitted} images")
            break
        if not is_image_entry(entry, extensions):
            continue

        filepath = os.path.join(image_dir, entry.name)
        try:
            histogram = extract_histogram(filepath, depth)
        except HistogramError as e:
            logger.warning(f"Failed to process {entry.name}: {e}")
            failures.append((entry.name, str(e)))
            if on_error is not None:
                on_error(entry.name, e)
            continue

        sink.emit(histogram)
        emitted += 1

    return failures


def compute_dataset_histograms(image_dir: str,
                               workers: int,
                               depth: int,
                               extensions: Iterable[str] = DEFAULT_EXTENSIONS,
                               on_error: Optional[ErrorCallback] = None,
                               cancel_event: Optional[threading.Event] = None
                               ) -> DatasetScan:
    """
    Compute histograms for every image in a directory using a worker pool.

    Args:
        image_dir: Directory containing the dataset images.
        workers: Requested number of partitions (one task each).
        depth: Bits per channel kept by the extractor.
        extensions: Lower-case file extensions treated as images.
        on_error: Called as on_error(filename, exception) for each file
                  that fails to decode.
        cancel_event: Setting it stops workers between files.

    Returns:
        DatasetScan with one histogram per successfully processed image.

    Raises:
        OSError: If the directory cannot be listed.
        ValueError: If workers is not a positive integer.
        BatchCancelledError: If cancel_event was set before completion.
    """
    extensions = frozenset(extensions)
    entries = list_dataset(image_dir)
    partitions = divide_dataset(entries, workers)
    # Set only by this call, so a caller can reuse its own cancel_event
    stop_event = threading.Event()

    logger.info(
        f"Processing {len(entries)} entries in {image_dir} "
        f"across {len(partitions)} partitions"
    )

    sink = HistogramSink()
    scan = DatasetScan(partitions=len(partitions))

    if partitions:
        with ThreadPoolExecutor(max_workers=len(partitions),
                                thread_name_prefix="histogram") as ex:
            futs = [
                ex.submit(
                    process_partition,
                    partition,
                    image_dir,
                    depth,
                    extensions,
                    sink,
                    on_error,
                    cancel_event,
                    stop_event,
                )
                for partition in partitions
            ]
            try:
                for f in as_completed(futs):
                    scan.failures.extend(f.result())
            except BaseException:
                stop_event.set()
                for f in futs:
                    f.cancel()
                raise

    # Executor shutdown above is the barrier: every task has returned
    sink.close()

    if _is_set(cancel_event):
        raise BatchCancelledError(
            f"Batch cancelled after {len(sink)} histograms in {image_dir}"
        )

    scan.histograms = sink.collect()
    logger.info(
        f"Collected {len(scan.histograms)} histograms, "
        f"{len(scan.failures)} failures"
    )
    return scan
