"""
Expansion-aware realignment of a read against copy-number hypotheses.

For each candidate copy number the locus is rebuilt as
pre_flank + motif * n + post_flank and the read is locally aligned to it.
The hypothesis with the highest score wins.

Author: Kevin R. Roy
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from ..config import DEFAULT_CONFIG, RealignmentConfig
from ..utils.sequence import normalize_sequence
from .alignment import StructuralAlignmentError, smith_waterman

logger = logging.getLogger(__name__)


@dataclass
class Hypothesis:
    """Best copy-number hypothesis for a read."""
    n_copy: int = 0
    position: int = 0  # Approximate read start in candidate coordinates, may be negative
    score: int = 0


def candidate_copy_numbers(read_length: int, period: int) -> Iterator[int]:
    """
    Copy numbers to try, in increasing order.

    Goes two copies beyond what fits in the read so that repeats longer than
    the read are still covered.
    """
    if period < 1:
        raise StructuralAlignmentError(f"Motif period must be at least 1, got {period}")
    return iter(range(0, read_length // period + 3))


def build_candidate_reference(pre_flank: str, motif: str, n_copy: int, post_flank: str) -> str:
    """Reconstruct the locus with n_copy copies of the motif."""
    return pre_flank + motif * n_copy + post_flank


def _prepare(seq: str, label: str, allow_empty: bool = False) -> str:
    try:
        return normalize_sequence(seq, allow_empty=allow_empty)
    except ValueError as e:
        raise StructuralAlignmentError(f"Invalid {label}: {e}") from e


def expansion_aware_realign(
    read: str,
    pre_flank: str,
    post_flank: str,
    motif: str,
    config: RealignmentConfig = DEFAULT_CONFIG,
    early_exit: bool = True,
) -> Hypothesis:
    """
    Find the copy number whose reconstructed locus best explains a read.

    Ties keep the lowest copy number. The search stops as soon as a candidate
    scores len(read) * match_score, which no later candidate can beat, so
    early_exit=False returns the same hypothesis.

    Args:
        read: Read sequence
        pre_flank: Reference bases upstream of the repeat (may be empty)
        post_flank: Reference bases downstream of the repeat (may be empty)
        motif: Repeat unit
        config: Scoring constants
        early_exit: Stop at the first perfect-scoring candidate

    Returns:
        Hypothesis with the best copy number, approximate start and score

    Raises:
        StructuralAlignmentError: empty read or motif, read longer than
            config.max_read_length, or invalid bases
    """
    read = _prepare(read, "read")
    motif = _prepare(motif, "motif")
    pre_flank = _prepare(pre_flank, "upstream flank", allow_empty=True)
    post_flank = _prepare(post_flank, "downstream flank", allow_empty=True)

    read_len = len(read)
    if read_len > config.max_read_length:
        raise StructuralAlignmentError(
            f"Read of {read_len} bp exceeds max_read_length={config.max_read_length}"
        )

    perfect_score = config.max_score(read_len)
    best = Hypothesis()

    for n_copy in candidate_copy_numbers(read_len, len(motif)):
        candidate = build_candidate_reference(pre_flank, motif, n_copy, post_flank)
        result = smith_waterman(candidate, read, config)

        if result.score > best.score:
            best = Hypothesis(n_copy=n_copy, position=result.start_position, score=result.score)

        if early_exit and result.score == perfect_score:
            logger.debug(f"Perfect match at {n_copy} copies of {motif}, stopping search")
            break

    return best
