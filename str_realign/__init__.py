"""
STR Realign - expansion-aware realignment and classification of STR reads.

Author: Kevin R. Roy
"""

__version__ = "0.1.0"
__author__ = "Kevin R. Roy"

from .config import (
    DEFAULT_CONFIG,
    PipelineConfig,
    RealignmentConfig,
    UnclassifiedPolicy,
)
from .core.classification import (
    ClassificationResult,
    SingleReadType,
    UnclassifiableReadError,
    classify_realigned_read,
    realign_and_classify,
)
from .core.alignment import StructuralAlignmentError
from .core.realignment import Hypothesis, expansion_aware_realign

__all__ = [
    "RealignmentConfig",
    "PipelineConfig",
    "UnclassifiedPolicy",
    "DEFAULT_CONFIG",
    "Hypothesis",
    "expansion_aware_realign",
    "SingleReadType",
    "ClassificationResult",
    "classify_realigned_read",
    "realign_and_classify",
    "StructuralAlignmentError",
    "UnclassifiableReadError",
    "__version__",
]
