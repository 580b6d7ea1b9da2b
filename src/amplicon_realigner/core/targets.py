"""Amplicon target (BED) parser and catalog."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from collections.abc import Sequence
from typing import Dict, Iterator, List, Optional, Tuple

from loguru import logger

from ..exceptions import MalformedTargetRecord
from ..models import GenomicInterval, Strand
from .intervals import Comparator, contig_order, sort_intervals

# BED columns used by the parser (0-based field indices)
CONTIG_FIELD = 0
START_FIELD = 1
END_FIELD = 2
NAME_FIELD = 3
STRAND_FIELD = 5
THICK_START_FIELD = 6
THICK_END_FIELD = 7

HEADER_PREFIXES = ("#", "track", "browser")


def merge_targets(existing: GenomicInterval, new: GenomicInterval) -> GenomicInterval:
    """
    Combine two targets sharing the same coordinates.

    Keeps the longest primer on each side and joins the names in
    encounter order.
    """
    return replace(
        existing,
        name=f"{existing.name}_{new.name}",
        upstream_primer_length=max(existing.upstream_primer_length, new.upstream_primer_length),
        downstream_primer_length=max(existing.downstream_primer_length, new.downstream_primer_length),
    )


class BedTargetParser:
    """Parser for amplicon BED files with primer-trimmed thick regions."""

    def __init__(self, bed_file: Path):
        """Initialize parser with BED file path."""
        self.bed_file = Path(bed_file)
        self.targets: List[GenomicInterval] = []

    def parse(self) -> List[GenomicInterval]:
        """
        Parse the BED file.

        Returns:
            Targets in file order, duplicates included

        Raises:
            MalformedTargetRecord: On the first invalid record or if the
                file cannot be read
        """
        self.targets = []

        logger.info(f"Parsing target BED file: {self.bed_file}")

        try:
            with open(self.bed_file, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.rstrip("\r\n")

                    if not line.strip():
                        continue

                    if line.startswith(HEADER_PREFIXES):
                        continue

                    self.targets.append(self._parse_line(line, line_number))

        except IOError as e:
            raise MalformedTargetRecord(f"Failed to read BED file {self.bed_file}: {e}") from e

        logger.info(f"Parsed {len(self.targets)} target records")
        return self.targets

    def _parse_line(self, line: str, line_number: int) -> GenomicInterval:
        """Parse a single BED record."""
        fields = line.split("\t")

        if len(fields) <= THICK_END_FIELD:
            raise MalformedTargetRecord(
                f"Expected at least {THICK_END_FIELD + 1} tab-separated fields, got {len(fields)}",
                line_number=line_number,
                line_content=line
            )

        contig = fields[CONTIG_FIELD]
        name = fields[NAME_FIELD]

        if not contig:
            raise MalformedTargetRecord("Empty contig", line_number=line_number, line_content=line)

        start = self._parse_int(fields, START_FIELD, line, line_number) + 1
        end = self._parse_int(fields, END_FIELD, line, line_number)
        thick_start = self._parse_int(fields, THICK_START_FIELD, line, line_number) + 1
        thick_end = self._parse_int(fields, THICK_END_FIELD, line, line_number)

        upstream_primer_length = thick_start - start
        downstream_primer_length = end - thick_end

        if start > end:
            raise MalformedTargetRecord(
                f"Start {start} is after end {end}",
                line_number=line_number,
                line_content=line
            )

        if upstream_primer_length < 0 or downstream_primer_length < 0:
            raise MalformedTargetRecord(
                "Thick region extends outside the amplicon",
                line_number=line_number,
                line_content=line
            )

        if upstream_primer_length + downstream_primer_length > end - start + 1:
            raise MalformedTargetRecord(
                "Primers are longer than the amplicon",
                line_number=line_number,
                line_content=line
            )

        return GenomicInterval(
            contig=contig,
            start=start,
            end=end,
            name=name,
            strand=self._parse_strand(fields),
            upstream_primer_length=upstream_primer_length,
            downstream_primer_length=downstream_primer_length,
        )

    @staticmethod
    def _parse_int(fields: List[str], index: int, line: str, line_number: int) -> int:
        try:
            return int(fields[index])
        except ValueError:
            raise MalformedTargetRecord(
                f"Field {index + 1} is not an integer: {fields[index]!r}",
                line_number=line_number,
                line_content=line
            ) from None

    @staticmethod
    def _parse_strand(fields: List[str]) -> Optional[Strand]:
        value = fields[STRAND_FIELD]
        if value in ("+", "-"):
            return Strand(value)
        return None


class TargetCatalog(Sequence):
    """
    Deduplicated, ordered collection of amplicon targets.

    Targets with identical (contig, start, end) collapse into one entry
    through merge_targets; the catalog is read-only once built.
    """

    def __init__(self, targets: List[GenomicInterval], comparator: Comparator = contig_order):
        by_key: Dict[Tuple[str, int, int], GenomicInterval] = {}

        for target in targets:
            existing = by_key.get(target.key)
            if existing is None:
                by_key[target.key] = target
            else:
                logger.debug(f"Merging duplicate target {target} ({existing.name} + {target.name})")
                by_key[target.key] = merge_targets(existing, target)

        self._by_key = by_key
        self._targets = tuple(sort_intervals(by_key.values(), comparator))

    @classmethod
    def from_bed(cls, bed_file: Path, comparator: Comparator = contig_order) -> "TargetCatalog":
        """Parse a BED file and build the catalog."""
        records = BedTargetParser(bed_file).parse()
        catalog = cls(records, comparator)
        logger.info(f"Catalog holds {len(catalog)} unique targets ({len(records)} records)")
        return catalog

    def get(self, key: Tuple[str, int, int]) -> Optional[GenomicInterval]:
        """Look up a target by (contig, start, end)."""
        return self._by_key.get(key)

    def __getitem__(self, index):
        return self._targets[index]

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[GenomicInterval]:
        return iter(self._targets)

    def __contains__(self, item) -> bool:
        if isinstance(item, GenomicInterval):
            item = item.key
        return item in self._by_key
