"""Split a dataset listing into contiguous, balanced groups for workers."""

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def divide_dataset(entries: Sequence[T], k: int) -> List[List[T]]:
    """
    Divide entries into min(k, len(entries)) contiguous groups.

    Group sizes differ by at most one, with the larger groups first.
    Concatenating the groups in order gives back the input, and no group
    is empty.

    Args:
        entries: Items to split, in order.
        k: Requested number of groups.

    Returns:
        List of groups; empty when entries is empty.

    Raises:
        ValueError: If k is not a positive integer.
    """
    if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
        raise ValueError(f"Worker count must be a positive integer, got {k!r}")

    entries = list(entries)
    groups = min(k, len(entries))
    if groups == 0:
        return []

    size, remainder = divmod(len(entries), groups)
    partitions = []
    start = 0
    for i in range(groups):
        end = start + size + (1 if i < remainder else 0)
        partitions.append(entries[start:end])
        start = end

    return partitions
