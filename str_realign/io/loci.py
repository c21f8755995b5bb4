"""
STR region parsing and validation.

Author: Kevin R. Roy
"""

from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass
import pandas as pd
import logging

from ..utils.sequence import DNA_PATTERN

logger = logging.getLogger(__name__)

REGION_COLUMNS = ['chrom', 'start', 'end', 'period', 'motif', 'name']


@dataclass
class Locus:
    """Represents a single STR locus.

    Attributes:
        chrom: Contig name
        start: 1-based position of the first repeat base
        end: 1-based position of the last repeat base
        period: Motif length
        motif: Repeat unit on the forward strand
        name: Optional locus identifier
    """
    chrom: str
    start: int
    end: int
    period: int
    motif: str
    name: Optional[str] = None

    def __post_init__(self):
        self.motif = self.motif.upper()
        if self.name is None:
            self.name = self.region

    @property
    def region(self) -> str:
        return f"{self.chrom}:{self.start}-{self.end}"

    @property
    def reference_length(self) -> int:
        return self.end - self.start + 1

    @property
    def reference_copies(self) -> float:
        """Copies of the motif in the reference allele."""
        return self.reference_length / self.period if self.period else 0.0

    def validate(self) -> List[str]:
        """Validate locus definition. Returns list of errors."""
        errors = []

        if self.start < 1:
            errors.append(f"Start must be 1-based and positive, got {self.start}")
        if self.end < self.start:
            errors.append(f"End {self.end} is before start {self.start}")
        if not self.motif or not DNA_PATTERN.match(self.motif):
            errors.append(f"Invalid motif: {self.motif!r}")
        elif self.period != len(self.motif):
            errors.append(f"Period {self.period} does not match motif {self.motif}")

        return errors


def load_regions(path: Path, validate: bool = True) -> List[Locus]:
    """
    Load STR loci from a BED-like regions file.

    Columns (tab-separated, no header):
    - chrom
    - start: 1-based first repeat base
    - end: 1-based last repeat base
    - period: motif length
    - motif
    - name (optional)

    Lines starting with '#' are ignored.

    Args:
        path: Path to regions file
        validate: If True, drop loci that fail validation

    Returns:
        List of Locus objects
    """
    df = pd.read_csv(path, sep='\t', header=None, comment='#', dtype={0: str})

    if df.shape[1] < 5:
        raise ValueError(
            f"Regions file {path} needs at least 5 columns (chrom, start, end, period, motif), "
            f"found {df.shape[1]}"
        )
    df = df.iloc[:, :len(REGION_COLUMNS)]
    df.columns = REGION_COLUMNS[:df.shape[1]]

    loci = []
    errors = []

    for idx, row in df.iterrows():
        name = str(row['name']) if 'name' in row and pd.notna(row.get('name')) else None
        locus = Locus(
            chrom=str(row['chrom']),
            start=int(row['start']),
            end=int(row['end']),
            period=int(row['period']),
            motif=str(row['motif']),
            name=name,
        )

        if validate:
            locus_errors = locus.validate()
            if locus_errors:
                for err in locus_errors:
                    errors.append(f"line {idx + 1} ({locus.name}): {err}")
                continue

        loci.append(locus)

    if errors:
        logger.warning(f"Regions file validation found {len(errors)} errors:")
        for err in errors[:10]:
            logger.warning(f"  {err}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more")

    logger.info(f"Loaded {len(loci)} loci from {path}")

    return loci
