"""
I/O modules for STR realignment.

Author: Kevin R. Roy
"""

from .loci import (
    Locus,
    load_regions,
)
from .output import (
    write_locus_summary_tsv,
    write_read_evidence_tsv,
)
from .reference import (
    fetch_flanks,
    open_alignments,
    open_reference,
    read_passes_filters,
)

__all__ = [
    'Locus',
    'load_regions',
    'fetch_flanks',
    'open_reference',
    'open_alignments',
    'read_passes_filters',
    'write_read_evidence_tsv',
    'write_locus_summary_tsv',
]
