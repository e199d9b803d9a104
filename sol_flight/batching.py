from typing import List, Sequence, TypeVar

from .models import Batch

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into contiguous groups of at most ``size``, keeping order."""
    if size <= 0:
        raise ValueError(f"Chunk size must be greater than 0, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def make_batches(addresses: Sequence[str], batch_size: int) -> List[Batch]:
    """Group recipient addresses into indexed batches."""
    return [
        Batch(index=i, addresses=tuple(group))
        for i, group in enumerate(chunk(addresses, batch_size))
    ]
