"""Data models for the amplicon realigner."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

# SAM/BAM CIGAR op codes
CIGAR_MATCH = 0
CIGAR_INSERTION = 1
CIGAR_DELETION = 2
CIGAR_SKIP = 3
CIGAR_SOFT_CLIP = 4
CIGAR_HARD_CLIP = 5
CIGAR_PAD = 6
CIGAR_EQUAL = 7
CIGAR_DIFF = 8

CIGAR_CHARS = "MIDNSHP=X"

REF_CONSUMING = {CIGAR_MATCH, CIGAR_DELETION, CIGAR_SKIP, CIGAR_EQUAL, CIGAR_DIFF}
QUERY_CONSUMING = {CIGAR_MATCH, CIGAR_INSERTION, CIGAR_SOFT_CLIP, CIGAR_EQUAL, CIGAR_DIFF}

GAP = "-"


class Strand(Enum):
    """DNA strand orientation."""
    PLUS = "+"
    MINUS = "-"


@dataclass(frozen=True)
class GenomicInterval:
    """1-based, closed genomic interval.

    Identity is the coordinate triple (contig, start, end); name, strand and
    primer lengths are carried along but never take part in comparisons.
    """

    contig: str
    start: int
    end: int
    name: str = field(default="", compare=False)
    strand: Optional[Strand] = field(default=None, compare=False)
    upstream_primer_length: int = field(default=0, compare=False)
    downstream_primer_length: int = field(default=0, compare=False)

    @property
    def key(self) -> Tuple[str, int, int]:
        """Coordinate key used for deduplication."""
        return (self.contig, self.start, self.end)

    @property
    def length(self) -> int:
        """Get interval length."""
        return self.end - self.start + 1

    @property
    def concatenated_position(self) -> str:
        return f"{self.contig}:{self.start}"

    def left_padded(self, bases: int) -> "GenomicInterval":
        """Return a copy with the start moved left, never below position 1."""
        if self.start > bases:
            return replace(self, start=self.start - bases)
        return replace(self, start=1)

    def right_padded(self, bases: int) -> "GenomicInterval":
        """Return a copy with the end moved right. Contig length is not checked."""
        return replace(self, end=self.end + bases)

    def padded(self, bases: int) -> "GenomicInterval":
        return self.left_padded(bases).right_padded(bases)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        data = asdict(self)
        data['strand'] = self.strand.value if self.strand else None
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "GenomicInterval":
        """Create from dictionary."""
        data = dict(data)
        if isinstance(data.get('strand'), str):
            data['strand'] = Strand(data['strand'])
        return cls(**data)

    def __str__(self) -> str:
        return f"{self.contig}:{self.start}-{self.end}"


@dataclass(frozen=True)
class ReferenceWindow:
    """Reference bases fetched for one target, possibly padded."""

    target: GenomicInterval
    interval: GenomicInterval  # Fetched span, target plus padding
    sequence: str

    @property
    def offset(self) -> int:
        """Position of the target start within the sequence (0-based)."""
        return self.target.start - self.interval.start

    @property
    def upstream_primer(self) -> str:
        """First bases of the target, covered by the forward primer."""
        return self.sequence[self.offset:self.offset + self.target.upstream_primer_length]

    @property
    def downstream_primer(self) -> str:
        """Last bases of the target, covered by the reverse primer."""
        target_end = self.offset + self.target.length
        return self.sequence[target_end - self.target.downstream_primer_length:target_end]


@dataclass(frozen=True)
class AlignmentResult:
    """Pairwise alignment of a query (read) against a reference window."""

    aligned_reference: str  # Reference with gaps
    aligned_query: str  # Query with gaps
    score: float
    distance: float

    @property
    def length(self) -> int:
        """Number of aligned columns."""
        return len(self.aligned_reference)

    @property
    def reference_length(self) -> int:
        """Reference bases covered by the alignment."""
        return len(self.aligned_reference.replace(GAP, ""))


class CigarOp(NamedTuple):
    """One CIGAR run: (operation code, run length)."""

    op: int
    length: int

    def __str__(self) -> str:
        return f"{self.length}{CIGAR_CHARS[self.op]}"


class EditScript(list):
    """Run-length encoded edit script (CIGAR) made of CigarOp entries."""

    @classmethod
    def from_pysam(cls, cigartuples: Optional[Iterable[Tuple[int, int]]]) -> "EditScript":
        """Build from pysam's list of (op, length) tuples."""
        if not cigartuples:
            return cls()
        return cls(CigarOp(op, length) for op, length in cigartuples)

    def to_pysam(self) -> List[Tuple[int, int]]:
        """Convert back to list of (op, length) tuples for pysam."""
        return [(run.op, run.length) for run in self]

    def push(self, op: int, length: int) -> None:
        """Append a run, merging with the previous one if the op matches."""
        if length <= 0:
            return
        if self and self[-1].op == op:
            self[-1] = CigarOp(op, self[-1].length + length)
            return
        self.append(CigarOp(op, length))

    @property
    def cigar_string(self) -> str:
        return "".join(str(run) for run in self)

    @property
    def reference_length(self) -> int:
        """Sum of reference-consuming runs."""
        return sum(run.length for run in self if run.op in REF_CONSUMING)

    @property
    def query_length(self) -> int:
        """Sum of query-consuming runs."""
        return sum(run.length for run in self if run.op in QUERY_CONSUMING)

    @property
    def is_soft_clipped(self) -> bool:
        """True if the first or last run is a soft clip."""
        if not self:
            return False
        return self[0].op == CIGAR_SOFT_CLIP or self[-1].op == CIGAR_SOFT_CLIP


class ReadOutcome(Enum):
    """Terminal state of one (read, target) pair."""
    FILTERED_OUT = "filtered_out"
    PASSTHROUGH = "passthrough"
    REALIGNED = "realigned"
    REJECTED = "rejected"

    @property
    def emitted(self) -> bool:
        return self is not ReadOutcome.FILTERED_OUT


@dataclass
class RunSummary:
    """Counters collected over a whole run."""

    targets: int = 0
    reads_inspected: int = 0
    outcomes: Dict[ReadOutcome, int] = field(
        default_factory=lambda: {outcome: 0 for outcome in ReadOutcome}
    )

    def record(self, outcome: ReadOutcome) -> None:
        self.reads_inspected += 1
        self.outcomes[outcome] += 1

    @property
    def emitted(self) -> int:
        """Records written to the output sink."""
        return sum(count for outcome, count in self.outcomes.items() if outcome.emitted)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        data = {
            'targets': self.targets,
            'reads_inspected': self.reads_inspected,
            'emitted': self.emitted,
        }
        data.update({outcome.value: count for outcome, count in self.outcomes.items()})
        return data
