"""Tests for str_realign.config module."""

from dataclasses import FrozenInstanceError, replace
from pathlib import Path

import pytest
import yaml

from str_realign.config import (
    DEFAULT_CONFIG,
    PipelineConfig,
    RealignmentConfig,
    UnclassifiedPolicy,
    compute_margin,
    load_fasta,
    load_realignment_config,
    parse_sequence_input,
)


class TestRealignmentConfig:
    """Test RealignmentConfig class."""

    def test_defaults(self):
        """Test default scoring constants."""
        config = RealignmentConfig()
        assert config.match_score == 3
        assert config.mismatch_score == -1
        assert config.gap_score == -3
        assert config.match_perc_threshold == 0.9
        assert config.margin_multiplier == 4
        assert config.max_read_length == 1000
        assert config.unclassified_policy == UnclassifiedPolicy.RAISE

    def test_default_config_is_shared_default(self):
        """Test the module default equals a fresh instance."""
        assert DEFAULT_CONFIG == RealignmentConfig()

    def test_frozen(self):
        """Test configs cannot be mutated after creation."""
        config = RealignmentConfig()
        with pytest.raises(FrozenInstanceError):
            config.match_score = 5

    def test_replace(self):
        """Test deriving a modified config."""
        config = replace(DEFAULT_CONFIG, gap_score=-5)
        assert config.gap_score == -5
        assert DEFAULT_CONFIG.gap_score == -3

    def test_max_score(self):
        """Test perfect score for a read length."""
        assert RealignmentConfig().max_score(40) == 120
        assert RealignmentConfig(match_score=2).max_score(40) == 80

    @pytest.mark.parametrize("kwargs", [
        {'match_score': 0},
        {'match_score': -3},
        {'gap_score': 0},
        {'gap_score': 2},
        {'mismatch_score': 3},
        {'match_score': 2, 'mismatch_score': 5},
        {'match_perc_threshold': 1.5},
        {'match_perc_threshold': -0.1},
        {'margin_multiplier': 0},
        {'max_read_length': 0},
        {'unclassified_policy': 'sometimes'},
    ])
    def test_invalid_values(self, kwargs):
        """Test invalid values raise ValueError."""
        with pytest.raises(ValueError):
            RealignmentConfig(**kwargs)

    def test_positive_gap_message(self):
        """Test a rewarded gap is rejected before any score can pass the ceiling."""
        with pytest.raises(ValueError, match="gap_score must be negative"):
            RealignmentConfig(gap_score=2)

    def test_from_dict(self):
        """Test creation from a YAML-style dictionary."""
        config = RealignmentConfig.from_dict({
            'match_score': 2,
            'gap_score': -4,
            'unclassified_policy': 'unknown',
        })
        assert config.match_score == 2
        assert config.gap_score == -4
        assert config.mismatch_score == -1
        assert config.unclassified_policy == UnclassifiedPolicy.UNKNOWN

    def test_from_dict_accepts_enum(self):
        """Test the policy may already be an enum member."""
        config = RealignmentConfig.from_dict({'unclassified_policy': UnclassifiedPolicy.UNKNOWN})
        assert config.unclassified_policy == UnclassifiedPolicy.UNKNOWN

    def test_from_dict_empty(self):
        """Test empty or missing blocks give defaults."""
        assert RealignmentConfig.from_dict(None) == RealignmentConfig()
        assert RealignmentConfig.from_dict({}) == RealignmentConfig()

    def test_from_dict_unknown_key(self):
        """Test misspelled options are rejected."""
        with pytest.raises(ValueError, match="Unknown realignment options"):
            RealignmentConfig.from_dict({'match': 3})


class TestComputeMargin:
    """Test margin computation."""

    def test_default_multiplier(self):
        """Test margin = 4 * period - 1."""
        assert compute_margin(4) == 15
        assert compute_margin(3) == 11
        assert compute_margin(1) == 3

    def test_custom_multiplier(self):
        """Test a custom multiplier."""
        assert compute_margin(4, margin_multiplier=2) == 7

    def test_invalid_period(self):
        """Test a zero period is rejected."""
        with pytest.raises(ValueError):
            compute_margin(0)


class TestPipelineConfig:
    """Test PipelineConfig class."""

    def test_paths_converted(self, tmp_path):
        """Test string paths become Path objects."""
        config = PipelineConfig(
            bam=str(tmp_path / "sample.bam"),
            reference=str(tmp_path / "ref.fa"),
            regions=str(tmp_path / "strs.bed"),
            output_dir=str(tmp_path / "out"),
        )
        assert isinstance(config.bam, Path)
        assert config.output_dir == tmp_path / "out"
        assert config.threads == 1
        assert config.flank_length == 100
        assert config.realignment == RealignmentConfig()

    def test_invalid_threads(self, tmp_path):
        """Test thread count must be positive."""
        with pytest.raises(ValueError, match="threads"):
            PipelineConfig(tmp_path, tmp_path, tmp_path, tmp_path, threads=0)

    def test_invalid_flank_length(self, tmp_path):
        """Test flank length must not be negative."""
        with pytest.raises(ValueError, match="flank_length"):
            PipelineConfig(tmp_path, tmp_path, tmp_path, tmp_path, flank_length=-1)

    def test_from_yaml(self, tmp_path):
        """Test loading a full configuration."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            'bam': 'sample.bam',
            'reference': 'ref.fa',
            'regions': 'strs.bed',
            'output_dir': 'results',
            'threads': 4,
            'flank_length': 50,
            'min_mapq': 20,
            'realignment': {'match_perc_threshold': 0.8, 'unclassified_policy': 'unknown'},
        }))

        config = PipelineConfig.from_yaml(path)

        assert config.bam == Path('sample.bam')
        assert config.output_dir == Path('results')
        assert config.threads == 4
        assert config.flank_length == 50
        assert config.min_mapq == 20
        assert config.include_duplicates is False
        assert config.realignment.match_perc_threshold == 0.8
        assert config.realignment.unclassified_policy == UnclassifiedPolicy.UNKNOWN

    def test_from_yaml_defaults(self, tmp_path):
        """Test optional keys fall back to defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("bam: a.bam\nreference: ref.fa\nregions: strs.bed\n")

        config = PipelineConfig.from_yaml(path)

        assert config.output_dir == Path('./results')
        assert config.realignment == RealignmentConfig()

    def test_from_yaml_missing_key(self, tmp_path):
        """Test required inputs are checked."""
        path = tmp_path / "config.yaml"
        path.write_text("bam: a.bam\nreference: ref.fa\n")

        with pytest.raises(ValueError, match="missing 'regions'"):
            PipelineConfig.from_yaml(path)


class TestLoadRealignmentConfig:
    """Test loading the scoring block alone."""

    def test_top_level_keys(self, tmp_path):
        """Test a file holding only scoring keys."""
        path = tmp_path / "scoring.yaml"
        path.write_text("match_score: 2\nmismatch_score: -2\n")

        config = load_realignment_config(path)

        assert config.match_score == 2
        assert config.mismatch_score == -2

    def test_nested_block(self, tmp_path):
        """Test a full pipeline file."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "bam: a.bam\nreference: ref.fa\nregions: strs.bed\n"
            "realignment:\n  gap_score: -2\n"
        )

        assert load_realignment_config(path).gap_score == -2

    def test_pipeline_file_without_block(self, tmp_path):
        """Test a pipeline file without scoring options gives defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("bam: a.bam\nreference: ref.fa\nregions: strs.bed\n")

        assert load_realignment_config(path) == RealignmentConfig()

    def test_empty_file(self, tmp_path):
        """Test an empty file gives defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_realignment_config(path) == RealignmentConfig()


class TestParseSequenceInput:
    """Test sequence-or-path parsing."""

    def test_dna_string(self):
        """Test a literal sequence is upper-cased."""
        assert parse_sequence_input("acgtn") == "ACGTN"

    def test_long_dna_string(self):
        """Test flanks of 1000 bp or more are not mistaken for file paths."""
        flank = "acgt" * 300
        assert parse_sequence_input(flank) == flank.upper()

    def test_fasta_path(self, tmp_path):
        """Test a FASTA path loads the first record."""
        path = tmp_path / "flank.fa"
        path.write_text(">flank\nACGT\nacgt\n>other\nTTTT\n")

        assert parse_sequence_input(str(path)) == "ACGTACGT"
        assert load_fasta(path) == "ACGTACGT"

    def test_missing_file(self, tmp_path):
        """Test a missing path raises ValueError."""
        with pytest.raises(ValueError, match="File not found"):
            parse_sequence_input(str(tmp_path / "missing.fa"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
