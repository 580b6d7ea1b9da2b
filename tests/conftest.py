#!/usr/bin/env python3
"""
Shared fixtures for realigner tests.
"""

import random
from pathlib import Path
from typing import Dict, List, Optional

import pysam
import pytest

CONTIG = "1"

# Random flanks around a 100 bp ACGT repeat, so that amplicons shifted by a
# multiple of 4 bases share the same primer sequences.
_rng = random.Random(7)
FLANK_LEFT = "".join(_rng.choice("ACGT") for _ in range(40))
FLANK_RIGHT = "".join(_rng.choice("ACGT") for _ in range(60))
REFERENCE = FLANK_LEFT + "ACGT" * 25 + FLANK_RIGHT

# amp1: 1-based 49-108, 8 bp primers on both sides
AMP1_BED = f"{CONTIG}\t48\t108\tamp1\t0\t+\t56\t100"
AMP1_WINDOW = REFERENCE[48:108]
# amp2: same layout shifted 4 bp right
AMP2_BED = f"{CONTIG}\t52\t112\tamp2\t0\t+\t60\t104"

HEADER = {
    "HD": {"VN": "1.6", "SO": "coordinate"},
    "SQ": [{"SN": CONTIG, "LN": len(REFERENCE)}],
    "RG": [{"ID": "grp1", "SM": "sample1"}],
    "PG": [{"ID": "bwa", "PN": "bwa", "VN": "0.7.17"}],
}


def make_read(
    name: str,
    sequence: str,
    cigar: str,
    reference_start: int,
    tags: Optional[List] = None,
    flag: int = 0,
    header: Optional[pysam.AlignmentHeader] = None,
) -> pysam.AlignedSegment:
    """Build an in-memory read; reference_start is 0-based."""
    if header is None:
        header = pysam.AlignmentHeader.from_dict(HEADER)

    read = pysam.AlignedSegment(header)
    read.query_name = name
    read.query_sequence = sequence
    read.flag = flag
    read.reference_id = 0
    read.reference_start = reference_start
    read.mapping_quality = 60
    read.cigarstring = cigar
    read.query_qualities = pysam.qualitystring_to_array("I" * len(sequence))
    if tags is None:
        tags = [("RG", "grp1"), ("AS", 52), ("NM", 0), ("MD", "52")]
    read.set_tags(tags)
    return read


def write_bam(path: Path, reads: List[Dict]) -> Path:
    """Write reads (make_read keyword dicts) to a sorted, indexed BAM."""
    unsorted = path.with_suffix(".unsorted.bam")
    with pysam.AlignmentFile(str(unsorted), "wb", header=HEADER) as bam:
        for fields in reads:
            bam.write(make_read(header=bam.header, **fields))

    pysam.sort("-o", str(path), str(unsorted))
    pysam.index(str(path))
    return path


@pytest.fixture
def reference_fasta(tmp_path):
    """Indexed FASTA holding the test contig."""
    fasta = tmp_path / "reference.fa"
    lines = [REFERENCE[i:i + 60] for i in range(0, len(REFERENCE), 60)]
    fasta.write_text(f">{CONTIG}\n" + "\n".join(lines) + "\n")
    pysam.faidx(str(fasta))
    return fasta


@pytest.fixture
def targets_bed(tmp_path):
    """BED file with the single amp1 target."""
    bed = tmp_path / "targets.bed"
    bed.write_text(AMP1_BED + "\n")
    return bed
