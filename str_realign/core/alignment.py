"""
Local alignment scoring for expansion-aware realignment.

A Smith-Waterman variant with linear gap penalties that reports only the best
score and the row where it was reached. No traceback is kept: callers use the
terminal row as an approximate alignment end, and the classifier margins are
calibrated against that approximation.

Author: Kevin R. Roy
"""

from dataclasses import dataclass

import numpy as np

from ..config import DEFAULT_CONFIG, RealignmentConfig


class StructuralAlignmentError(ValueError):
    """Raised when sequences cannot be scored (missing, empty or malformed)."""


@dataclass
class AlignmentResult:
    """
    Best local alignment cell of a score matrix.

    Attributes:
        score: Highest cumulative score anywhere in the matrix (>= 0)
        best_row: Row of that cell, i.e. how many candidate bases were
            consumed; -1 when no cell scored above zero
        start_position: best_row - len(read), the approximate start of the
            read in candidate coordinates
    """
    score: int
    best_row: int
    start_position: int

    @property
    def is_aligned(self) -> bool:
        return self.best_row >= 0


def _encode(seq: str) -> np.ndarray:
    if seq is None:
        raise StructuralAlignmentError("Cannot align a missing sequence")
    try:
        return np.frombuffer(seq.encode('ascii'), dtype=np.uint8)
    except UnicodeEncodeError as e:
        raise StructuralAlignmentError(f"Sequence is not ASCII: {seq[:20]!r}") from e


def score_cell(
    matrix: np.ndarray,
    i: int,
    j: int,
    seq1: str,
    seq2: str,
    config: RealignmentConfig = DEFAULT_CONFIG,
) -> int:
    """
    Score one cell from its up, left and upper-left neighbours.

    score[i][j] = max(0, diag + similarity, up + gap, left + gap)
    """
    similarity = config.match_score if seq1[i - 1] == seq2[j - 1] else config.mismatch_score
    diag_score = int(matrix[i - 1, j - 1]) + similarity
    up_score = int(matrix[i - 1, j]) + config.gap_score
    left_score = int(matrix[i, j - 1]) + config.gap_score
    return max(0, diag_score, up_score, left_score)


def create_score_matrix(
    seq1: str,
    seq2: str,
    config: RealignmentConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Build the (len(seq1)+1) x (len(seq2)+1) local alignment score matrix.

    Row 0 and column 0 stay at zero. Each row gives the same values as
    applying score_cell left to right: diagonal and vertical moves are
    computed as vectors, then horizontal gap moves are folded in with a
    running maximum, since

        left-propagated[j] = max_k(best[k] + (j - k) * gap)

    Args:
        seq1: Candidate reference sequence (rows)
        seq2: Read sequence (columns)
        config: Scoring constants

    Returns:
        int64 score matrix, every entry >= 0
    """
    codes1 = _encode(seq1)
    codes2 = _encode(seq2)

    rows = len(codes1) + 1
    cols = len(codes2) + 1
    matrix = np.zeros((rows, cols), dtype=np.int64)
    if rows == 1 or cols == 1:
        return matrix

    gap = config.gap_score
    offsets = np.arange(cols, dtype=np.int64) * gap
    best = np.zeros(cols, dtype=np.int64)

    for i in range(1, rows):
        prev = matrix[i - 1]
        similarity = np.where(codes2 == codes1[i - 1], config.match_score, config.mismatch_score)
        best[1:] = np.maximum(prev[:-1] + similarity, prev[1:] + gap)
        np.maximum(best, 0, out=best)
        matrix[i] = np.maximum.accumulate(best - offsets) + offsets

    return matrix


def smith_waterman(
    seq1: str,
    seq2: str,
    config: RealignmentConfig = DEFAULT_CONFIG,
) -> AlignmentResult:
    """
    Locally align seq2 (the read) against seq1 (the candidate reference).

    The best cell is the first maximum in row-major order. When nothing
    scores above zero, the result has score 0 and best_row -1.

    Args:
        seq1: Candidate reference sequence
        seq2: Read sequence
        config: Scoring constants

    Returns:
        AlignmentResult
    """
    matrix = create_score_matrix(seq1, seq2, config)
    best_row, best_col = np.unravel_index(int(np.argmax(matrix)), matrix.shape)
    score = int(matrix[best_row, best_col])

    # Nothing scored: no alignment
    best_row = int(best_row) if score > 0 else -1

    return AlignmentResult(
        score=score,
        best_row=best_row,
        start_position=best_row - len(seq2),
    )
