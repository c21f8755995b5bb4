"""
Reference genome and alignment file access.

Thin wrappers over pysam used by the per-locus pipeline. Anything with the
same fetch() signature as pysam.FastaFile / pysam.AlignmentFile can be used
in their place.

Author: Kevin R. Roy
"""

from pathlib import Path
from typing import Tuple
import logging

import pysam

from .loci import Locus

logger = logging.getLogger(__name__)


def open_reference(path: Path) -> pysam.FastaFile:
    """Open an indexed reference FASTA."""
    return pysam.FastaFile(str(path))


def open_alignments(path: Path) -> pysam.AlignmentFile:
    """Open an indexed BAM or CRAM file."""
    return pysam.AlignmentFile(str(path))


def fetch_flanks(reference, locus: Locus, flank_length: int) -> Tuple[str, str]:
    """
    Fetch the reference bases either side of a repeat.

    The upstream window is clamped at the contig start and the downstream
    window is cut short by the contig end, so loci near contig edges get
    short or empty flanks.

    Args:
        reference: pysam.FastaFile or compatible object
        locus: Locus with 1-based inclusive repeat coordinates
        flank_length: Bases to fetch on each side

    Returns:
        Tuple of (pre_flank, post_flank), uppercase
    """
    repeat_start = locus.start - 1  # 0-based
    pre_start = max(0, repeat_start - flank_length)

    pre_flank = reference.fetch(locus.chrom, pre_start, repeat_start)
    post_flank = reference.fetch(locus.chrom, locus.end, locus.end + flank_length)

    if len(pre_flank) < flank_length or len(post_flank) < flank_length:
        logger.debug(
            f"{locus.name}: short flanks ({len(pre_flank)} bp upstream, "
            f"{len(post_flank)} bp downstream)"
        )

    return pre_flank.upper(), post_flank.upper()


def read_passes_filters(read, min_mapq: int = 0, include_duplicates: bool = False) -> bool:
    """
    Check whether an aligned segment should be realigned.

    Unmapped, secondary, supplementary and QC-failed records are skipped, as
    are duplicates (unless requested), low mapping quality and records
    without a stored sequence.
    """
    if read.is_unmapped or read.is_secondary or read.is_supplementary:
        return False
    if read.is_qcfail:
        return False
    if read.is_duplicate and not include_duplicates:
        return False
    if read.mapping_quality < min_mapq:
        return False
    return bool(read.query_sequence)
