#!/usr/bin/env python3
"""
Read realignment module for the amplicon realigner.

Soft-clipped reads are aligned end to end against their amplicon window;
the new CIGAR replaces the old one when the alignment scores well enough.
"""

import math
from typing import List, Tuple

from loguru import logger

from ..models import EditScript, ReadOutcome, ReferenceWindow
from .alignment import Aligner, AlignmentMode, edit_script_from_alignment

READ_GROUP_TAG = "RG"
SCORE_TAG = "AS"
TARGET_TAG = "CO"
ORIGINAL_CIGAR_TAG = "XC"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounded up."""
    return int(math.floor(value + 0.5))


def _existing_tags(read, names: Tuple[str, ...]) -> List[Tuple[str, object]]:
    return [(name, read.get_tag(name)) for name in names if read.has_tag(name)]


class RealignmentEngine:
    """Decides, per read, whether to keep or replace its alignment."""

    def __init__(
        self,
        aligner: Aligner,
        min_score: float = 50,
        gap_open: float = -14,
        gap_extend: float = -4,
    ):
        """
        Initialize engine.

        Args:
            aligner: Pairwise aligner used for realignment
            min_score: Alignment score a realignment must exceed
            gap_open: Gap open score passed to the aligner
            gap_extend: Gap extension score passed to the aligner
        """
        self.aligner = aligner
        self.min_score = min_score
        self.gap_open = gap_open
        self.gap_extend = gap_extend

    def realign(self, read, window: ReferenceWindow) -> ReadOutcome:
        """
        Realign a read that passed the primer filter, rewriting it in place.

        Args:
            read: pysam.AlignedSegment (or anything exposing the same attributes)
            window: Reference window of the target the read overlaps

        Returns:
            PASSTHROUGH, REALIGNED or REJECTED; the read is emitted in every case
        """
        original = EditScript.from_pysam(read.cigartuples)

        if not original.is_soft_clipped:
            self._keep_alignment(read, window)
            return ReadOutcome.PASSTHROUGH

        result = self.aligner.align(
            window.sequence,
            read.query_sequence,
            self.gap_open,
            self.gap_extend,
            AlignmentMode.GLOBAL,
        )

        if result.score > self.min_score:
            script = edit_script_from_alignment(result)
            logger.debug(
                f"{read.query_name}: {original.cigar_string} -> {script.cigar_string} "
                f"(score {result.score:g}, target {window.target.name})"
            )
            self._replace_alignment(read, window, script, result.score, original)
            return ReadOutcome.REALIGNED

        logger.debug(
            f"{read.query_name}: realignment score {result.score:g} <= {self.min_score}, "
            f"keeping {original.cigar_string}"
        )
        self._keep_alignment(read, window)
        return ReadOutcome.REJECTED

    @staticmethod
    def _keep_alignment(read, window: ReferenceWindow) -> None:
        """Keep CIGAR and position; retain read group and score, stamp target."""
        tags = _existing_tags(read, (READ_GROUP_TAG, SCORE_TAG))
        tags.append((TARGET_TAG, window.target.name))
        read.set_tags(tags)

    @staticmethod
    def _replace_alignment(
        read,
        window: ReferenceWindow,
        script: EditScript,
        score: float,
        original: EditScript,
    ) -> None:
        tags = _existing_tags(read, (READ_GROUP_TAG,))
        tags.extend([
            (SCORE_TAG, round_half_up(score)),
            (TARGET_TAG, window.target.name),
            (ORIGINAL_CIGAR_TAG, original.cigar_string),
        ])
        read.set_tags(tags)
        read.cigartuples = script.to_pysam()
        # Padded window start; the alignment spans the whole window, not just the target
        read.reference_start = window.interval.start - 1
