"""
Sequence manipulation utilities.

Provides common functions for DNA sequence operations.

Author: Kevin R. Roy
"""

import re


# Bases accepted anywhere a read, motif or flank is supplied
DNA_PATTERN = re.compile(r'^[ACGTNacgtn]*$')


def is_dna_sequence(s: str) -> bool:
    """Check if string is a pure, non-empty DNA sequence (not a file path)."""
    return bool(s) and bool(DNA_PATTERN.match(s))


def normalize_sequence(seq: str, allow_empty: bool = False) -> str:
    """Upper-case a DNA sequence and check its alphabet.

    Reference FASTA files are often soft-masked (lower case), reads are not,
    so every sequence entering the aligner goes through here.

    Raises ValueError if the sequence is empty (unless allow_empty) or
    contains characters outside ACGTN.
    """
    if seq is None:
        raise ValueError("Sequence is missing")
    if not seq and not allow_empty:
        raise ValueError("Sequence is empty")
    if not DNA_PATTERN.match(seq):
        bad = sorted(set(seq.upper()) - set('ACGTN'))
        raise ValueError(f"Sequence contains invalid bases: {''.join(bad)}")
    return seq.upper()


def count_motif_copies(sequence: str, motif: str) -> int:
    """Length, in motif units, of the longest uninterrupted run of motif.

    Runs are counted in any phase and rotation, so "GATAGATAGA" holds two
    copies of "AGAT". Returns 0 for an empty motif.
    """
    if not motif:
        return 0
    sequence = sequence.upper()
    motif = motif.upper()
    period = len(motif)
    rotations = {motif[shift:] + motif[:shift] for shift in range(period)}

    best = 0
    for unit in rotations:
        for phase in range(period):
            run = 0
            for i in range(phase, len(sequence) - period + 1, period):
                if sequence[i:i + period] == unit:
                    run += 1
                    best = max(best, run)
                else:
                    run = 0
    return best
