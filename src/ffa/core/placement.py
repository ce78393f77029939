from __future__ import annotations

from ffa.core.records import Entry


def is_valid_placement(offset: int, size: int, data_length: int) -> bool:
    """True if [offset, offset + size) lies inside a blob of data_length bytes."""
    return offset >= 0 and size >= 0 and offset + size <= data_length


def entry_fits(entry: Entry, data_length: int) -> bool:
    return is_valid_placement(entry.offset, entry.size, data_length)
