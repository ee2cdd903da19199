"""Pytest configuration and fixtures for pileup-caller tests."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from fixtures.pileup_generator import (  # noqa: E402
    SyntheticPileupSite,
    SyntheticSnp,
    write_pileup_file,
    write_snp_file,
)
from fixtures.random_sources import FixedSequenceRandom  # noqa: E402


@pytest.fixture
def fixed_random():
    """Random source that always draws the first candidate."""
    return FixedSequenceRandom([0])


@pytest.fixture
def two_site_panel(tmp_path) -> Path:
    """SNP file with a transversion at chr1:100 and a transition at chr1:200."""
    return write_snp_file(
        tmp_path / "panel.snp",
        [
            SyntheticSnp("chr1", 100, "A", "C"),
            SyntheticSnp("chr1", 200, "C", "T"),
        ],
    )


@pytest.fixture
def two_sample_pileup(tmp_path) -> Path:
    """Pileup covering chr1:100 only, for two samples."""
    return write_pileup_file(
        tmp_path / "reads.pileup",
        [
            SyntheticPileupSite("chr1", 50, "G", ["..", "."]),
            SyntheticPileupSite("chr1", 100, "A", ["...", "CC,"]),
            SyntheticPileupSite("chr1", 150, "T", ["T", ""]),
        ],
    )
