"""Core processing modules for the amplicon realigner."""

from .intervals import contig_order, contig_sort_key, merge_bases, sort_intervals
from .targets import BedTargetParser, TargetCatalog, merge_targets
from .primers import hamming_distance, similarity, passes_filter, PrimerMatcher
from .alignment import AlignmentMode, PairwiseAligner, edit_script_from_alignment
from .realign import RealignmentEngine
from .io import ReferenceLookup, AlignmentSource, AlignmentSink, build_output_header

__all__ = [
    "contig_order",
    "contig_sort_key",
    "merge_bases",
    "sort_intervals",
    "BedTargetParser",
    "TargetCatalog",
    "merge_targets",
    "hamming_distance",
    "similarity",
    "passes_filter",
    "PrimerMatcher",
    "AlignmentMode",
    "PairwiseAligner",
    "edit_script_from_alignment",
    "RealignmentEngine",
    "ReferenceLookup",
    "AlignmentSource",
    "AlignmentSink",
    "build_output_header",
]
