#!/usr/bin/env python3
"""
Reference and alignment file access for the amplicon realigner.

Thin wrappers around pysam so the rest of the package only deals with
intervals, sequences and reads.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import pysam
from loguru import logger

from ..exceptions import UnreadableAlignmentSource, UnreadableReference
from ..models import GenomicInterval, ReferenceWindow

PROGRAM_NAME = "AmpliconRealigner"


def _io_mode(path: Path, write: bool) -> str:
    suffix = path.suffix.lower()
    if suffix == ".bam":
        return "wb" if write else "rb"
    if suffix == ".cram":
        return "wc" if write else "rc"
    return "w" if write else "r"


class ReferenceLookup:
    """Random access to an indexed FASTA file."""

    def __init__(self, fasta_file: Path):
        """
        Open the reference.

        Args:
            fasta_file: FASTA file, indexed with samtools faidx

        Raises:
            UnreadableReference: If the file or its index cannot be opened
        """
        self.fasta_file = Path(fasta_file)
        try:
            self._fasta = pysam.FastaFile(str(self.fasta_file))
        except (OSError, ValueError) as e:
            raise UnreadableReference(str(e), path=str(self.fasta_file)) from e

    def contig_length(self, contig: str) -> int:
        try:
            return self._fasta.get_reference_length(contig)
        except KeyError as e:
            raise UnreadableReference(str(e), path=str(self.fasta_file), region=contig) from e

    def fetch(self, contig: str, start: int, end: int) -> str:
        """
        Return bases of contig between 1-based inclusive start and end.

        Raises:
            UnreadableReference: If the contig is unknown or the region does
                not lie entirely on it
        """
        region = f"{contig}:{start}-{end}"
        length = self.contig_length(contig)

        if start < 1 or end > length or start > end:
            raise UnreadableReference(
                f"Region outside contig {contig} (length {length})",
                path=str(self.fasta_file),
                region=region
            )

        try:
            sequence = self._fasta.fetch(contig, start - 1, end)
        except (KeyError, ValueError, IndexError, OSError) as e:
            raise UnreadableReference(str(e), path=str(self.fasta_file), region=region) from e

        if len(sequence) != end - start + 1:
            raise UnreadableReference(
                f"Expected {end - start + 1} bases, got {len(sequence)}",
                path=str(self.fasta_file),
                region=region
            )
        return sequence

    def window(self, target: GenomicInterval, padding: int = 0) -> ReferenceWindow:
        """
        Fetch the target span, optionally padded on both sides.

        Padding stops at the contig ends; the target itself must lie on the contig.
        """
        interval = target
        if padding:
            interval = target.padded(padding)
            length = self.contig_length(target.contig)
            if interval.end > length:
                interval = replace(interval, end=max(length, target.end))
        sequence = self.fetch(interval.contig, interval.start, interval.end)
        return ReferenceWindow(target=target, interval=interval, sequence=sequence)

    def close(self) -> None:
        self._fasta.close()

    def __enter__(self) -> "ReferenceLookup":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class AlignmentSource:
    """Indexed SAM/BAM/CRAM input queried by region."""

    def __init__(self, path: Path, reference: Optional[Path] = None):
        self.path = Path(path)
        kwargs = {}
        if reference is not None and self.path.suffix.lower() == ".cram":
            kwargs["reference_filename"] = str(reference)

        try:
            self._file = pysam.AlignmentFile(str(self.path), _io_mode(self.path, False), **kwargs)
        except (OSError, ValueError) as e:
            raise UnreadableAlignmentSource(str(e), path=str(self.path)) from e

        if not self._file.has_index():
            self._file.close()
            raise UnreadableAlignmentSource(
                "Region queries need an index (samtools index)", path=str(self.path)
            )

    @property
    def header(self) -> Dict:
        """Header as a plain dictionary."""
        return self._file.header.to_dict()

    def overlapping(self, interval: GenomicInterval) -> Iterator[pysam.AlignedSegment]:
        """Yield every record overlapping the 1-based interval."""
        if interval.contig not in self._file.references:
            logger.warning(f"Contig {interval.contig} not in {self.path}; no reads for {interval}")
            return

        try:
            yield from self._file.fetch(interval.contig, interval.start - 1, interval.end)
        except (OSError, ValueError) as e:
            raise UnreadableAlignmentSource(str(e), path=str(self.path), region=str(interval)) from e

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "AlignmentSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class AlignmentSink:
    """SAM/BAM/CRAM output; format follows the file extension."""

    def __init__(self, path: Path, header: Dict, reference: Optional[Path] = None):
        self.path = Path(path)
        self.written = 0
        kwargs = {}
        if reference is not None and self.path.suffix.lower() == ".cram":
            kwargs["reference_filename"] = str(reference)

        try:
            self._file = pysam.AlignmentFile(
                str(self.path), _io_mode(self.path, True), header=header, **kwargs
            )
        except (OSError, ValueError) as e:
            raise UnreadableAlignmentSource(str(e), path=str(self.path)) from e

    def write(self, read: pysam.AlignedSegment) -> None:
        try:
            self._file.write(read)
        except (OSError, ValueError) as e:
            raise UnreadableAlignmentSource(str(e), path=str(self.path)) from e
        self.written += 1

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "AlignmentSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def build_output_header(header: Dict, version: str, command_line: str) -> Dict:
    """
    Prepare the output header from the input one.

    Marks the output as unsorted and appends a @PG line for this program,
    chained to the last program already in the header.

    Args:
        header: Input header as returned by AlignmentSource.header
        version: Program version
        command_line: Invoking command line

    Returns:
        New header dictionary; the input is left untouched
    """
    header = copy.deepcopy(header)

    hd = header.setdefault("HD", {"VN": "1.6"})
    hd["SO"] = "unsorted"

    programs: List[Dict] = header.setdefault("PG", [])
    existing_ids = {program.get("ID") for program in programs}

    program_id = PROGRAM_NAME
    suffix = 0
    while program_id in existing_ids:
        suffix += 1
        program_id = f"{PROGRAM_NAME}.{suffix}"

    record = {"ID": program_id, "PN": PROGRAM_NAME, "VN": version, "CL": command_line}
    if programs and programs[-1].get("ID"):
        record["PP"] = programs[-1]["ID"]
    programs.append(record)

    return header
