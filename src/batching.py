"""Splitting of candidate issues into bounded-size batches."""

from typing import List, Sequence, TypeVar

from errors import InvalidArgument

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into consecutive batches of at most `size` elements.

    Args:
        items (Sequence[T]): Ordered items to split
        size (int): Maximum batch size, must be positive

    Returns:
        List[List[T]]: Batches in original order. Every batch except possibly
                       the last holds exactly `size` items. No batches for
                       empty input.

    Raises:
        InvalidArgument: If size is not a positive integer
    """
    if size <= 0:
        raise InvalidArgument(f"Batch size must be a positive integer, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
