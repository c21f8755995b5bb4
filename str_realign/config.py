"""
Configuration classes for STR realignment.

Scoring constants, classification thresholds and pipeline options. Every
realignment and classification call receives a RealignmentConfig explicitly;
nothing is read from module-level mutable state.

Author: Kevin R. Roy
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .utils.sequence import is_dna_sequence


class UnclassifiedPolicy(Enum):
    """What to do with a read whose geometry matches no read type."""
    RAISE = "raise"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RealignmentConfig:
    """
    Scoring and classification constants shared by every read.

    Attributes:
        match_score: Reward for a matching base (positive)
        mismatch_score: Penalty for a mismatching base
        gap_score: Penalty for a single-base insertion or deletion
        match_perc_threshold: Fraction of the perfect score a read must reach
            to be classified as anything other than UNKNOWN
        margin_multiplier: Boundary tolerance in motif units; the margin is
            margin_multiplier * period - 1 bases
        max_read_length: Longest read the aligner will accept
        unclassified_policy: Raise or report UNKNOWN for reads that match
            no read type
    """
    match_score: int = 3
    mismatch_score: int = -1
    gap_score: int = -3
    match_perc_threshold: float = 0.9
    margin_multiplier: int = 4
    max_read_length: int = 1000
    unclassified_policy: UnclassifiedPolicy = UnclassifiedPolicy.RAISE

    def __post_init__(self):
        if self.match_score <= 0:
            raise ValueError(f"match_score must be positive, got {self.match_score}")
        if self.mismatch_score >= self.match_score:
            raise ValueError(
                f"mismatch_score must be below match_score ({self.match_score}), "
                f"got {self.mismatch_score}"
            )
        if self.gap_score >= 0:
            raise ValueError(f"gap_score must be negative, got {self.gap_score}")
        if not 0.0 <= self.match_perc_threshold <= 1.0:
            raise ValueError(
                f"match_perc_threshold must be in [0, 1], got {self.match_perc_threshold}"
            )
        if self.margin_multiplier < 1:
            raise ValueError(
                f"margin_multiplier must be at least 1, got {self.margin_multiplier}"
            )
        if self.max_read_length < 1:
            raise ValueError(
                f"max_read_length must be at least 1, got {self.max_read_length}"
            )
        if not isinstance(self.unclassified_policy, UnclassifiedPolicy):
            raise ValueError(f"Unknown unclassified_policy: {self.unclassified_policy}")

    def max_score(self, read_length: int) -> int:
        """Score of a read matching its candidate base for base."""
        return read_length * self.match_score

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> 'RealignmentConfig':
        """Create from dictionary (e.g. the 'realignment' block of a YAML file)."""
        if not d:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown realignment options: {', '.join(sorted(unknown))}")

        values = dict(d)
        policy = values.get('unclassified_policy')
        if policy is not None and not isinstance(policy, UnclassifiedPolicy):
            values['unclassified_policy'] = UnclassifiedPolicy(str(policy).lower())
        return cls(**values)


DEFAULT_CONFIG = RealignmentConfig()


def compute_margin(period: int, margin_multiplier: int = DEFAULT_CONFIG.margin_multiplier) -> int:
    """Boundary tolerance, in bases, around the repeat for a motif period."""
    if period < 1:
        raise ValueError(f"Motif period must be at least 1, got {period}")
    return margin_multiplier * period - 1


def parse_sequence_input(value: str) -> str:
    """
    Parse sequence input - can be either a DNA string or a FASTA file path.

    Args:
        value: Either a DNA sequence string or path to a FASTA file

    Returns:
        The DNA sequence (uppercase)

    Examples:
        >>> parse_sequence_input("ATCGATCG")
        'ATCGATCG'
    """
    value = value.strip()

    if is_dna_sequence(value):
        return value.upper()

    path = Path(value)
    if not path.exists():
        raise ValueError(f"File not found: {value}")

    return load_fasta(path)


@dataclass
class PipelineConfig:
    """Full per-locus pipeline configuration."""
    bam: Path
    reference: Path
    regions: Path
    output_dir: Path

    # Processing options
    threads: int = 1
    flank_length: int = 100

    # Read filters
    min_mapq: int = 0
    include_duplicates: bool = False

    realignment: RealignmentConfig = field(default_factory=RealignmentConfig)

    def __post_init__(self):
        self.bam = Path(self.bam)
        self.reference = Path(self.reference)
        self.regions = Path(self.regions)
        self.output_dir = Path(self.output_dir)
        if self.threads < 1:
            raise ValueError(f"threads must be at least 1, got {self.threads}")
        if self.flank_length < 0:
            raise ValueError(f"flank_length must not be negative, got {self.flank_length}")

    @classmethod
    def from_yaml(cls, path: Path) -> 'PipelineConfig':
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        for key in ('bam', 'reference', 'regions'):
            if key not in data:
                raise ValueError(f"Configuration {path} is missing '{key}'")

        return cls(
            bam=Path(data['bam']),
            reference=Path(data['reference']),
            regions=Path(data['regions']),
            output_dir=Path(data.get('output_dir', './results')),
            threads=data.get('threads', 1),
            flank_length=data.get('flank_length', 100),
            min_mapq=data.get('min_mapq', 0),
            include_duplicates=data.get('include_duplicates', False),
            realignment=RealignmentConfig.from_dict(data.get('realignment')),
        )


def load_realignment_config(path: Path) -> RealignmentConfig:
    """Load only the scoring block from a YAML file.

    The file may hold a full pipeline configuration (scoring under
    'realignment') or just the scoring keys at top level.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if 'realignment' in data or 'bam' in data:
        data = data.get('realignment')
    return RealignmentConfig.from_dict(data)


def _read_fasta_sequence(path: str) -> str:
    """Read first sequence from a FASTA file."""
    sequence = []
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line.startswith('>'):
                if sequence:
                    break  # Only read first sequence
                continue
            sequence.append(line.upper())
    return ''.join(sequence)


def load_fasta(path: Path) -> str:
    """Load sequence from FASTA file."""
    return _read_fasta_sequence(str(path))
