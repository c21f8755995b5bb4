"""
Command-line interface for STR realignment.

Author: Kevin R. Roy
"""

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from . import __version__
from .config import (
    PipelineConfig,
    RealignmentConfig,
    UnclassifiedPolicy,
    load_realignment_config,
    parse_sequence_input,
)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Log per-read detail')
def cli(verbose):
    """Expansion-aware STR read realignment and classification."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


@cli.command()
@click.argument('read', type=str)
@click.option('--motif', '-m', type=str, required=True,
              help='Repeat unit, e.g. CAG')
@click.option('--pre-flank', type=str, default='',
              help='Reference upstream of the repeat: DNA sequence or FASTA file path')
@click.option('--post-flank', type=str, default='',
              help='Reference downstream of the repeat: DNA sequence or FASTA file path')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='YAML file with scoring options')
@click.option('--unclassified', type=click.Choice(['raise', 'unknown']), default=None,
              help='Report reads matching no read type as an error or as UNKNOWN')
def realign(read, motif, pre_flank, post_flank, config_path, unclassified):
    """
    Realign a single READ and report its copy number and read type.

    \b
    Example:
      str-realign realign CAGCAGCAGCAGCAGCAGCAG -m CAG \\
                  --pre-flank GGCTTCCACTGCCTGG --post-flank CCGCTTCAGAGGTTCC
    """
    from .core.alignment import StructuralAlignmentError
    from .core.classification import UnclassifiableReadError, realign_and_classify

    config = load_realignment_config(Path(config_path)) if config_path else RealignmentConfig()
    if unclassified:
        config = replace(config, unclassified_policy=UnclassifiedPolicy(unclassified))

    try:
        pre_seq = parse_sequence_input(pre_flank) if pre_flank else ''
        post_seq = parse_sequence_input(post_flank) if post_flank else ''
    except ValueError as e:
        click.echo(f"Error loading flank sequence: {e}", err=True)
        sys.exit(1)

    try:
        result = realign_and_classify(read, pre_seq, post_seq, motif, config)
    except StructuralAlignmentError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except UnclassifiableReadError as e:
        click.echo(f"Unclassifiable read: {e}", err=True)
        sys.exit(1)

    hypothesis = result.hypothesis
    click.echo(f"copy_number\t{hypothesis.n_copy}")
    click.echo(f"position\t{hypothesis.position}")
    click.echo(f"score\t{hypothesis.score}/{result.details['max_score']}")
    click.echo(f"read_type\t{result.read_type.value}")


@cli.command()
@click.option('--bam', '-b', type=click.Path(exists=True),
              help='Indexed BAM/CRAM file')
@click.option('--reference', '-r', type=click.Path(exists=True),
              help='Indexed reference FASTA')
@click.option('--regions', type=click.Path(exists=True),
              help='STR regions file (chrom, start, end, period, motif[, name])')
@click.option('--output', '-o', type=click.Path(),
              help='Output directory')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='YAML pipeline configuration; command-line options override it')
@click.option('--threads', '-t', type=int, default=None,
              help='Number of worker processes (default: 1)')
@click.option('--flank-length', type=int, default=None,
              help='Reference bases fetched each side of the repeat (default: 100)')
@click.option('--min-mapq', type=int, default=None,
              help='Minimum mapping quality (default: 0)')
def run(bam, reference, regions, output, config_path, threads, flank_length, min_mapq):
    """
    Classify every read overlapping each STR region.

    Writes read_evidence.tsv (one row per classified read) and
    locus_summary.tsv (read-type counts per locus) to the output directory.

    \b
    Example:
      str-realign run -b sample.bam -r hg38.fa --regions strs.bed -o results/
    """
    from .pipeline import run_pipeline

    options = {
        'bam': bam, 'reference': reference, 'regions': regions,
        'output_dir': output, 'threads': threads,
        'flank_length': flank_length, 'min_mapq': min_mapq,
    }
    options = {key: value for key, value in options.items() if value is not None}

    if not config_path and not all([bam, reference, regions, output]):
        click.echo("Error: --bam, --reference, --regions and --output are required without --config", err=True)
        sys.exit(1)

    # replace() reruns PipelineConfig validation on the overridden values
    try:
        if config_path:
            config = replace(PipelineConfig.from_yaml(Path(config_path)), **options)
        else:
            config = PipelineConfig(**options)
    except ValueError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    results = run_pipeline(config)

    click.echo(f"\nProcessed {len(results)} loci")
    click.echo(f"Results written to: {config.output_dir}")


if __name__ == '__main__':
    cli()
