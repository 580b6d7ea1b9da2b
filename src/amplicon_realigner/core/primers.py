"""Primer similarity scoring over fixed-length read windows."""

from __future__ import annotations

from typing import Tuple

from ..exceptions import LengthMismatch


def hamming_distance(first: str, second: str) -> int:
    """
    Count positions at which two equal-length strings differ.

    Raises:
        LengthMismatch: If the strings differ in length
    """
    if len(first) != len(second):
        raise LengthMismatch(
            "Strings must be the same length",
            expected=len(second),
            actual=len(first)
        )
    return sum(1 for a, b in zip(first, second) if a != b)


def similarity(observed: str, expected: str) -> float:
    """Fraction of identical positions; 0.0 for empty strings."""
    if not observed and not expected:
        return 0.0
    return (len(observed) - hamming_distance(observed, expected)) / len(observed)


def passes_filter(
    read_upstream: str,
    expected_upstream: str,
    read_downstream: str,
    expected_downstream: str,
    threshold: float,
) -> bool:
    """True if both primer windows are strictly more similar than threshold."""
    return (
        similarity(read_upstream, expected_upstream) > threshold
        and similarity(read_downstream, expected_downstream) > threshold
    )


class PrimerMatcher:
    """Checks whether a read starts and ends with the expected primers."""

    def __init__(self, upstream_primer: str, downstream_primer: str, threshold: float = 0.8):
        """
        Initialize matcher.

        Args:
            upstream_primer: Expected first bases of a read
            downstream_primer: Expected last bases of a read
            threshold: Minimum similarity (exclusive) for both primers
        """
        self.upstream_primer = upstream_primer
        self.downstream_primer = downstream_primer
        self.threshold = threshold

    def read_windows(self, sequence: str) -> Tuple[str, str]:
        """
        Extract the read bases facing each primer.

        Raises:
            LengthMismatch: If the read is shorter than either primer
        """
        for primer in (self.upstream_primer, self.downstream_primer):
            if len(sequence) < len(primer):
                raise LengthMismatch(
                    "Read is shorter than primer",
                    expected=len(primer),
                    actual=len(sequence)
                )

        upstream = sequence[:len(self.upstream_primer)]
        downstream = sequence[len(sequence) - len(self.downstream_primer):]
        return upstream, downstream

    def matches(self, sequence: str) -> bool:
        """Apply the primer filter to a read sequence."""
        upstream, downstream = self.read_windows(sequence)
        return passes_filter(
            upstream, self.upstream_primer,
            downstream, self.downstream_primer,
            self.threshold
        )
