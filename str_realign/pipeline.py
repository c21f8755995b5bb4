"""
Per-locus orchestration for STR realignment.

For every locus: fetch the reference flanks, pull the reads overlapping the
repeat, realign each read against copy-number hypotheses and classify it.
The output is per-read evidence; no genotype is called here.

Author: Kevin R. Roy
"""

from collections import Counter
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

from .config import PipelineConfig
from .core.alignment import StructuralAlignmentError
from .core.classification import (
    SingleReadType,
    UnclassifiableReadError,
    realign_and_classify,
)
from .io.loci import Locus, load_regions
from .io.output import write_locus_summary_tsv, write_read_evidence_tsv
from .io.reference import fetch_flanks, open_alignments, open_reference, read_passes_filters

logger = logging.getLogger(__name__)


@dataclass
class ReadEvidence:
    """Realignment evidence from a single read."""
    read_name: str
    read_length: int
    n_copy: int
    position: int
    score: int
    read_type: SingleReadType

    def to_dict(self) -> Dict:
        return {
            'read_name': self.read_name,
            'read_length': self.read_length,
            'n_copy': self.n_copy,
            'position': self.position,
            'score': self.score,
            'read_type': self.read_type.value,
        }


@dataclass
class LocusResult:
    """Evidence gathered for one locus."""
    locus: Locus
    evidence: List[ReadEvidence] = field(default_factory=list)
    filtered: int = 0  # Reads dropped by the read filters
    failed: int = 0  # Reads the aligner rejected
    unclassified: int = 0  # Reads whose geometry matched no read type
    pre_flank_length: int = 0
    post_flank_length: int = 0
    skipped: bool = False  # Locus contig missing from the reference or BAM

    @property
    def counts(self) -> Dict[SingleReadType, int]:
        counts = Counter(e.read_type for e in self.evidence)
        return {read_type: counts.get(read_type, 0) for read_type in SingleReadType}

    @property
    def total_reads(self) -> int:
        return len(self.evidence) + self.failed + self.unclassified

    def to_summary_row(self) -> Dict:
        """Flatten to a single output row."""
        row = {
            'locus': self.locus.name,
            'chrom': self.locus.chrom,
            'start': self.locus.start,
            'end': self.locus.end,
            'motif': self.locus.motif,
            'reference_copies': f"{self.locus.reference_copies:.1f}",
            'total_reads': self.total_reads,
        }
        for read_type, count in self.counts.items():
            row[f'{read_type.value}_count'] = count
        row['unclassified'] = self.unclassified
        row['failed'] = self.failed
        row['filtered'] = self.filtered
        row['skipped'] = self.skipped
        return row


class Genotyper:
    """
    Gather per-read STR evidence locus by locus.

    The BAM and reference handles may be injected (anything with pysam's
    fetch() signatures); otherwise they are opened from the configured paths
    on first use and closed by close() or on leaving a with block.
    """

    def __init__(self, config: PipelineConfig, bam=None, reference=None):
        self.config = config
        self.realignment = config.realignment
        self._bam = bam
        self._reference = reference
        self._opened = []

    @property
    def bam(self):
        if self._bam is None:
            logger.info(f"Opening alignments: {self.config.bam}")
            self._bam = open_alignments(self.config.bam)
            self._opened.append(self._bam)
        return self._bam

    @property
    def reference(self):
        if self._reference is None:
            logger.info(f"Opening reference: {self.config.reference}")
            self._reference = open_reference(self.config.reference)
            self._opened.append(self._reference)
        return self._reference

    def close(self):
        """Close handles this genotyper opened itself."""
        for handle in self._opened:
            handle.close()
            if handle is self._bam:
                self._bam = None
            if handle is self._reference:
                self._reference = None
        self._opened = []

    def __enter__(self) -> 'Genotyper':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def process_read(
        self,
        read_name: str,
        sequence: str,
        pre_flank: str,
        post_flank: str,
        locus: Locus,
    ) -> ReadEvidence:
        """
        Realign and classify one read.

        Raises:
            StructuralAlignmentError: the aligner rejected the read
            UnclassifiableReadError: geometry matched no read type
        """
        result = realign_and_classify(sequence, pre_flank, post_flank, locus.motif, self.realignment)
        return ReadEvidence(
            read_name=read_name,
            read_length=len(sequence),
            n_copy=result.hypothesis.n_copy,
            position=result.hypothesis.position,
            score=result.hypothesis.score,
            read_type=result.read_type,
        )

    def process_locus(self, locus: Locus) -> LocusResult:
        """Collect evidence from every read overlapping a locus."""
        # Unknown contigs: KeyError from the FASTA, ValueError from the BAM
        try:
            pre_flank, post_flank = fetch_flanks(self.reference, locus, self.config.flank_length)
            reads = self.bam.fetch(locus.chrom, locus.start - 1, locus.end)
        except (KeyError, ValueError) as e:
            logger.warning(f"{locus.name}: skipping locus, cannot fetch {locus.region}: {e}")
            return LocusResult(locus=locus, skipped=True)

        result = LocusResult(
            locus=locus,
            pre_flank_length=len(pre_flank),
            post_flank_length=len(post_flank),
        )

        for read in reads:
            if not read_passes_filters(read, self.config.min_mapq, self.config.include_duplicates):
                result.filtered += 1
                continue

            try:
                evidence = self.process_read(
                    read.query_name, read.query_sequence, pre_flank, post_flank, locus
                )
            except StructuralAlignmentError as e:
                logger.warning(f"{locus.name}: skipping read {read.query_name}: {e}")
                result.failed += 1
                continue
            except UnclassifiableReadError as e:
                logger.debug(f"{locus.name}: read {read.query_name} left unclassified: {e}")
                result.unclassified += 1
                continue

            result.evidence.append(evidence)

        counts = {t.value: c for t, c in result.counts.items() if c}
        logger.info(
            f"{locus.name}: {len(result.evidence)} reads classified {counts}, "
            f"{result.unclassified} unclassified, {result.failed} failed, "
            f"{result.filtered} filtered"
        )
        return result

    def run(self, loci: List[Locus]) -> List[LocusResult]:
        """
        Process all loci.

        With threads > 1, loci are split into batches processed in separate
        worker processes, each opening its own BAM and reference handles.
        Results come back in input order.

        Args:
            loci: Loci to process

        Returns:
            List of LocusResult objects
        """
        if self.config.threads <= 1 or len(loci) <= 1:
            results = []
            for i, locus in enumerate(loci):
                logger.debug(f"Processing locus {i + 1}/{len(loci)}: {locus.name}")
                results.append(self.process_locus(locus))
            return results

        return self._run_parallel(loci)

    def _run_parallel(self, loci: List[Locus]) -> List[LocusResult]:
        n_workers = self.config.threads
        batch_size = max(1, len(loci) // (n_workers * 4))  # ~4 batches per worker
        batches = [
            (self.config, loci[i:i + batch_size], batch_idx)
            for batch_idx, i in enumerate(range(0, len(loci), batch_size))
        ]

        logger.info(f"Processing {len(loci)} loci in {len(batches)} batches using {n_workers} workers")

        batch_results: Dict[int, List[LocusResult]] = {}
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            future_to_batch = {
                executor.submit(_process_locus_batch_worker, batch): batch[2]
                for batch in batches
            }

            for future in as_completed(future_to_batch):
                batch_idx = future_to_batch[future]
                try:
                    batch_results[batch_idx] = future.result()
                except Exception as e:
                    logger.error(f"Batch {batch_idx} failed: {e}")
                    raise
                logger.info(f"Completed batch {batch_idx + 1}/{len(batches)}")

        return [r for idx in sorted(batch_results) for r in batch_results[idx]]


def _process_locus_batch_worker(
    batch: Tuple[PipelineConfig, List[Locus], int]
) -> List[LocusResult]:
    """Module-level worker so batches pickle cleanly."""
    config, loci, _ = batch
    with Genotyper(config) as genotyper:
        return [genotyper.process_locus(locus) for locus in loci]


def summarize_results(results: List[LocusResult]) -> Dict:
    """Totals across loci, for the run log."""
    totals = Counter()
    for r in results:
        for read_type, count in r.counts.items():
            totals[read_type.value] += count
        totals['unclassified'] += r.unclassified
        totals['failed'] += r.failed
        totals['filtered'] += r.filtered
        totals['skipped_loci'] += int(r.skipped)

    summary = {'loci': len(results)}
    summary.update(totals)
    return summary


def run_pipeline(config: PipelineConfig, loci: Optional[List[Locus]] = None) -> List[LocusResult]:
    """Load regions (unless given), process them and write outputs."""
    if loci is None:
        loci = load_regions(config.regions)

    config.output_dir.mkdir(parents=True, exist_ok=True)

    with Genotyper(config) as genotyper:
        results = genotyper.run(loci)

    write_read_evidence_tsv(results, config.output_dir / "read_evidence.tsv")
    write_locus_summary_tsv(results, config.output_dir / "locus_summary.tsv")

    logger.info(f"Run summary: {summarize_results(results)}")
    return results
