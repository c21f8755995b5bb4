"""
Core realignment and classification modules.

Author: Kevin R. Roy
"""

from .alignment import (
    AlignmentResult,
    StructuralAlignmentError,
    create_score_matrix,
    score_cell,
    smith_waterman,
)
from .classification import (
    ClassificationResult,
    SingleReadType,
    UnclassifiableReadError,
    classify_realigned_read,
    realign_and_classify,
    summarize_classifications,
)
from .realignment import (
    Hypothesis,
    build_candidate_reference,
    candidate_copy_numbers,
    expansion_aware_realign,
)

__all__ = [
    # Alignment
    'AlignmentResult',
    'StructuralAlignmentError',
    'score_cell',
    'create_score_matrix',
    'smith_waterman',
    # Realignment
    'Hypothesis',
    'candidate_copy_numbers',
    'build_candidate_reference',
    'expansion_aware_realign',
    # Classification
    'SingleReadType',
    'UnclassifiableReadError',
    'ClassificationResult',
    'classify_realigned_read',
    'realign_and_classify',
    'summarize_classifications',
]
