"""
Utility modules for STR realignment.

Author: Kevin R. Roy
"""

from .sequence import (
    DNA_PATTERN,
    count_motif_copies,
    is_dna_sequence,
    normalize_sequence,
)

__all__ = [
    'DNA_PATTERN',
    'is_dna_sequence',
    'normalize_sequence',
    'count_motif_copies',
]
