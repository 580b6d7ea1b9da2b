"""Genomic interval ordering and merging."""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Callable, Iterable, List

from ..models import GenomicInterval

Comparator = Callable[[GenomicInterval, GenomicInterval], int]


_INTEGER = re.compile(r"[+-]?[0-9]+")


def is_integer(text: str) -> bool:
    """Return True if text is a plain base-10 integer (no spaces or underscores)."""
    return _INTEGER.fullmatch(text) is not None


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def contig_order(first: GenomicInterval, second: GenomicInterval) -> int:
    """
    Compare two intervals by contig, then by start position.

    Contigs are compared numerically only when both parse as integers;
    as soon as one of them is not numeric both are compared as strings.
    For mixed inputs the ordering is therefore not transitive
    ("2" < "10" numerically, but "10" < "2" < "X" against a named contig).

    Returns:
        Negative, zero or positive, like a classic cmp function
    """
    if is_integer(first.contig) and is_integer(second.contig):
        by_contig = _compare(int(first.contig), int(second.contig))
    else:
        by_contig = _compare(first.contig, second.contig)

    if by_contig != 0:
        return by_contig
    return _compare(first.start, second.start)


contig_sort_key = cmp_to_key(contig_order)


def sort_intervals(
    intervals: Iterable[GenomicInterval],
    comparator: Comparator = contig_order,
) -> List[GenomicInterval]:
    """Return a new list of intervals sorted with the given comparator."""
    key = contig_sort_key if comparator is contig_order else cmp_to_key(comparator)
    return sorted(intervals, key=key)


def merge_bases(
    bases: Iterable[GenomicInterval],
    comparator: Comparator = contig_order,
) -> List[GenomicInterval]:
    """
    Collapse single-base intervals into windows of consecutive positions.

    The bases are sorted first. Windows closed because the contig changes or
    a position is skipped end on their last base. The final window is closed
    by the last element without looking at it: its end is the running end
    plus one, whatever the contig or position of that last element.

    Args:
        bases: Single-base intervals, start is the base position
        comparator: Ordering applied before merging

    Returns:
        Merged windows in sorted order
    """
    ordered = sort_intervals(bases, comparator)
    regions: List[GenomicInterval] = []

    window_contig = ""
    window_start = 0
    window_end = 0

    for index, base in enumerate(ordered):
        if index == 0:
            window_contig = base.contig
            window_start = base.start
            window_end = base.start

        elif index == len(ordered) - 1:
            window_end += 1
            regions.append(GenomicInterval(window_contig, window_start, window_end))

        elif base.contig != window_contig or base.start != window_end + 1:
            regions.append(GenomicInterval(window_contig, window_start, window_end))

            window_contig = base.contig
            window_start = base.start
            window_end = base.start

        else:
            window_end += 1

    return regions
