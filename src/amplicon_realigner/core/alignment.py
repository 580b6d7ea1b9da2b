#!/usr/bin/env python3
"""
Pairwise alignment module for the amplicon realigner.

This module wraps Biopython's pairwise aligner and converts its gapped
output into CIGAR edit scripts.
"""

from enum import Enum
from typing import Protocol

from Bio import Align
from Bio.Align import substitution_matrices

from ..exceptions import AlignmentError
from ..models import (
    CIGAR_DELETION,
    CIGAR_INSERTION,
    CIGAR_MATCH,
    GAP,
    AlignmentResult,
    EditScript,
)


class AlignmentMode(Enum):
    """Pairwise alignment mode."""
    GLOBAL = "global"
    LOCAL = "local"


class Aligner(Protocol):
    """Anything able to align a read against a reference window."""

    def align(
        self,
        reference: str,
        query: str,
        gap_open: float,
        gap_extend: float,
        mode: AlignmentMode = AlignmentMode.GLOBAL,
    ) -> AlignmentResult:
        ...


def edit_script_from_alignment(result: AlignmentResult) -> EditScript:
    """
    Convert a gapped alignment into a CIGAR edit script.

    Columns are read left to right: a gap in the query is a deletion, a gap
    in the reference is an insertion, anything else is a match/mismatch.
    Consecutive columns of the same kind collapse into one run.

    Args:
        result: Alignment with equal-length gapped reference and query

    Returns:
        EditScript whose reference-consuming runs add up to the number of
        reference bases in the alignment
    """
    if len(result.aligned_reference) != len(result.aligned_query):
        raise AlignmentError(
            f"Aligned sequences differ in length: "
            f"{len(result.aligned_reference)} vs {len(result.aligned_query)}"
        )

    script = EditScript()
    current_op = None
    current_length = 0

    for reference_base, query_base in zip(result.aligned_reference, result.aligned_query):
        if query_base == GAP:
            op = CIGAR_DELETION
        elif reference_base == GAP:
            op = CIGAR_INSERTION
        else:
            op = CIGAR_MATCH

        if op == current_op:
            current_length += 1
        else:
            if current_op is not None:
                script.push(current_op, current_length)
            current_op = op
            current_length = 1

    # push last run
    if current_op is not None:
        script.push(current_op, current_length)

    return script


class PairwiseAligner:
    """Nucleotide pairwise aligner using Biopython."""

    def __init__(self, matrix: str = "NUC.4.4"):
        """
        Initialize aligner.

        Args:
            matrix: Name of a Biopython substitution matrix
        """
        try:
            self.substitution_matrix = substitution_matrices.load(matrix)
        except FileNotFoundError as e:
            raise AlignmentError(f"Unknown substitution matrix: {matrix}") from e
        self.matrix = matrix

    def _build(self, gap_open: float, gap_extend: float, mode: AlignmentMode) -> Align.PairwiseAligner:
        aligner = Align.PairwiseAligner()
        aligner.mode = mode.value
        aligner.substitution_matrix = self.substitution_matrix
        # A new gap costs open plus extend, each further position extend
        aligner.open_gap_score = gap_open + gap_extend
        aligner.extend_gap_score = gap_extend
        return aligner

    def align(
        self,
        reference: str,
        query: str,
        gap_open: float,
        gap_extend: float,
        mode: AlignmentMode = AlignmentMode.GLOBAL,
    ) -> AlignmentResult:
        """
        Align query against reference.

        Args:
            reference: Reference window bases
            query: Read bases
            gap_open: Extra score charged once when a gap opens (negative)
            gap_extend: Score of every gap position, the first included (negative)
            mode: Global (end-to-end) or local alignment

        Returns:
            Best-scoring AlignmentResult

        Raises:
            AlignmentError: If the sequences cannot be aligned
        """
        if not reference or not query:
            raise AlignmentError("Cannot align an empty sequence")

        aligner = self._build(gap_open, gap_extend, mode)

        try:
            best = aligner.align(reference.upper(), query.upper())[0]
        except (ValueError, KeyError, IndexError) as e:
            raise AlignmentError(str(e)) from e

        aligned_reference = best[0]
        aligned_query = best[1]

        identical = sum(
            1 for r, q in zip(aligned_reference, aligned_query)
            if r == q and r != GAP
        )
        distance = 1.0 - identical / len(aligned_reference) if aligned_reference else 0.0

        return AlignmentResult(
            aligned_reference=aligned_reference,
            aligned_query=aligned_query,
            score=float(best.score),
            distance=distance,
        )
