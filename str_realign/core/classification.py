"""
Read classification relative to an STR.

Classifies reads into:
- IRR: In-repeat read, both ends inside the repeat (within margin)
- PREFLANK: Starts upstream of the repeat, ends inside it
- POSTFLANK: Starts inside the repeat, ends downstream of it
- ENCLOSING: Spans the whole repeat plus both flanks
- UNKNOWN: Alignment too weak, or no repeat copies in the best hypothesis

A read matching none of these raises UnclassifiableReadError, or is reported
as UNKNOWN when the configuration asks for it.

Author: Kevin R. Roy
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..config import DEFAULT_CONFIG, RealignmentConfig, UnclassifiedPolicy, compute_margin
from ..utils.sequence import count_motif_copies
from .realignment import Hypothesis, expansion_aware_realign


class SingleReadType(Enum):
    """Relationship of a single read to the repeat region."""
    IRR = 'irr'
    PREFLANK = 'preflank'
    POSTFLANK = 'postflank'
    ENCLOSING = 'enclosing'
    UNKNOWN = 'unknown'


class UnclassifiableReadError(ValueError):
    """Raised when a read's alignment geometry matches no read type."""

    def __init__(self, start_position: int, end_position: int, start_str: int, end_str: int, margin: int):
        self.start_position = start_position
        self.end_position = end_position
        self.start_str = start_str
        self.end_str = end_str
        self.margin = margin
        super().__init__(
            f"Read at {start_position}-{end_position} matches no read type for "
            f"repeat {start_str}-{end_str} (margin {margin})"
        )


@dataclass
class ClassificationResult:
    """Result of realigning and classifying one read."""
    read_type: SingleReadType
    hypothesis: Hypothesis
    details: Dict = field(default_factory=dict)


def classify_realigned_read(
    read_length: int,
    motif: str,
    start_position: int,
    n_copy: int,
    score: int,
    prefix_length: int,
    config: RealignmentConfig = DEFAULT_CONFIG,
    margin: Optional[int] = None,
) -> SingleReadType:
    """
    Classify a read from its winning realignment hypothesis.

    Classification hierarchy:
    1. Score below threshold, or zero copies -> UNKNOWN
    2. Start and end inside the repeat (+/- margin) -> IRR
    3. Only the start inside -> POSTFLANK
    4. Only the end inside -> PREFLANK
    5. Start before and end after the repeat -> ENCLOSING
    6. Otherwise -> UnclassifiableReadError (or UNKNOWN, per
       config.unclassified_policy)

    Args:
        read_length: Length of the read
        motif: Repeat unit
        start_position: Read start in candidate coordinates
        n_copy: Copy number of the winning hypothesis
        score: Alignment score of the winning hypothesis
        prefix_length: Length of the upstream flank
        config: Scoring constants and thresholds
        margin: Boundary tolerance in bases; defaults to
            compute_margin(len(motif), config.margin_multiplier)

    Returns:
        SingleReadType
    """
    period = len(motif)
    if margin is None:
        margin = compute_margin(period, config.margin_multiplier)

    end_position = start_position + read_length - 1

    start_str = prefix_length
    end_str = prefix_length + n_copy * period

    start_in_str = start_str - margin <= start_position <= end_str + margin
    end_in_str = start_str - margin <= end_position <= end_str + margin

    score_threshold = int(config.match_perc_threshold * read_length * config.match_score)

    if score < score_threshold or n_copy == 0:
        return SingleReadType.UNKNOWN
    if start_in_str and end_in_str:
        return SingleReadType.IRR
    if start_in_str:
        return SingleReadType.POSTFLANK
    if end_in_str:
        return SingleReadType.PREFLANK
    if start_position < start_str and end_position > end_str:
        return SingleReadType.ENCLOSING

    if config.unclassified_policy == UnclassifiedPolicy.UNKNOWN:
        return SingleReadType.UNKNOWN
    raise UnclassifiableReadError(start_position, end_position, start_str, end_str, margin)


def realign_and_classify(
    read: str,
    pre_flank: str,
    post_flank: str,
    motif: str,
    config: RealignmentConfig = DEFAULT_CONFIG,
) -> ClassificationResult:
    """
    Realign a read against copy-number hypotheses and classify it.

    Raises:
        StructuralAlignmentError: malformed input
        UnclassifiableReadError: geometry matches no read type and the
            policy is RAISE
    """
    hypothesis = expansion_aware_realign(read, pre_flank, post_flank, motif, config)
    read_type = classify_realigned_read(
        read_length=len(read),
        motif=motif,
        start_position=hypothesis.position,
        n_copy=hypothesis.n_copy,
        score=hypothesis.score,
        prefix_length=len(pre_flank),
        config=config,
    )

    details = {
        'end_position': hypothesis.position + len(read) - 1,
        'max_score': config.max_score(len(read)),
        'motif_run': count_motif_copies(read, motif),
    }

    return ClassificationResult(read_type=read_type, hypothesis=hypothesis, details=details)


def summarize_classifications(
    classifications: List[ClassificationResult]
) -> Dict:
    """
    Summarize a list of classifications into counts and rates.

    Args:
        classifications: List of ClassificationResult objects

    Returns:
        Dict with counts and rates for each read type
    """
    counts = Counter(c.read_type for c in classifications)

    total = len(classifications)
    summary = {
        'total_reads': total,
    }

    for read_type in SingleReadType:
        count = counts.get(read_type, 0)
        summary[f'{read_type.value}_count'] = count
        summary[f'{read_type.value}_rate'] = count / total if total > 0 else 0

    # Reads that carry length evidence
    informative = total - counts.get(SingleReadType.UNKNOWN, 0)
    summary['informative_count'] = informative
    summary['informative_rate'] = informative / total if total > 0 else 0

    return summary
