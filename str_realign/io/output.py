"""
Output generation for STR realignment results.

Author: Kevin R. Roy
"""

from pathlib import Path
from typing import List
import pandas as pd
import logging

logger = logging.getLogger(__name__)

READ_EVIDENCE_COLUMNS = [
    'locus', 'chrom', 'start', 'end', 'motif',
    'read_name', 'read_length', 'n_copy', 'position', 'score', 'read_type',
]


def write_read_evidence_tsv(results: List, output_path: Path) -> Path:
    """
    Write per-read evidence to TSV, one row per classified read.

    Args:
        results: List of LocusResult objects
        output_path: Path for output TSV

    Returns:
        Path to written file
    """
    rows = []
    for r in results:
        for evidence in r.evidence:
            rows.append({
                'locus': r.locus.name,
                'chrom': r.locus.chrom,
                'start': r.locus.start,
                'end': r.locus.end,
                'motif': r.locus.motif,
                **evidence.to_dict(),
            })

    df = pd.DataFrame(rows, columns=READ_EVIDENCE_COLUMNS)
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote {len(rows)} read classifications to {output_path}")

    return output_path


def write_locus_summary_tsv(results: List, output_path: Path) -> Path:
    """
    Write per-locus read-type counts to TSV.

    Args:
        results: List of LocusResult objects
        output_path: Path for output TSV

    Returns:
        Path to written file
    """
    df = pd.DataFrame([r.to_summary_row() for r in results])
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote summary for {len(results)} loci to {output_path}")

    return output_path
