"""Amplicon Realigner.

Realigns soft-clipped amplicon reads (after merging and whole-genome
alignment) end to end against their target windows, using the primer
positions recorded in an amplicon BED file.
"""

__version__ = "1.1.0"

from .config import ErrorPolicy, RealignerConfig
from .models import (
    AlignmentResult,
    CigarOp,
    EditScript,
    GenomicInterval,
    ReadOutcome,
    ReferenceWindow,
    RunSummary,
    Strand,
)
from .core import (
    contig_order, merge_bases,
    BedTargetParser, TargetCatalog,
    hamming_distance, similarity, passes_filter, PrimerMatcher,
    PairwiseAligner, edit_script_from_alignment,
    RealignmentEngine,
    ReferenceLookup, AlignmentSource, AlignmentSink,
)
from .main import run_pipeline, process_target, process_read

__all__ = [
    "__version__",
    "ErrorPolicy",
    "RealignerConfig",
    "AlignmentResult",
    "CigarOp",
    "EditScript",
    "GenomicInterval",
    "ReadOutcome",
    "ReferenceWindow",
    "RunSummary",
    "Strand",
    "contig_order",
    "merge_bases",
    "BedTargetParser",
    "TargetCatalog",
    "hamming_distance",
    "similarity",
    "passes_filter",
    "PrimerMatcher",
    "PairwiseAligner",
    "edit_script_from_alignment",
    "RealignmentEngine",
    "ReferenceLookup",
    "AlignmentSource",
    "AlignmentSink",
    "run_pipeline",
    "process_target",
    "process_read",
]
