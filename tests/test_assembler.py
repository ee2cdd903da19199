"""Tests for assembling genotype matrix records from merged rows."""

import pytest
from fixtures.random_sources import FixedSequenceRandom


def _row(pos, *samples, ref="A", alt="G"):
    from pileup_caller.models import JoinedRow, PanelSite, PileupRecord

    site = PanelSite(chrom="1", pos=pos, ref=ref, alt=alt, snp_id=f"rs{pos}")
    if not samples:
        return JoinedRow(site, None)
    record = PileupRecord(
        chrom="1", pos=pos, ref=ref, bases_per_sample=tuple(tuple(s) for s in samples)
    )
    return JoinedRow(site, record)


def _config(mode_name="RANDOM_HAPLOID", min_depth=1):
    from pileup_caller.models import CallingConfig, CallingMode

    return CallingConfig(mode=CallingMode[mode_name], min_depth=min_depth)


class TestAssembleSites:
    """Tests for per-site calling across samples."""

    def test_uncovered_site_is_all_missing(self):
        from pileup_caller.assembler import assemble_sites

        records = list(assemble_sites([_row(100)], 3, _config(), FixedSequenceRandom([0])))

        assert len(records) == 1
        assert records[0].dosages == (None, None, None)
        assert records[0].site.snp_id == "rs100"

    def test_positions_and_alleles_come_from_panel(self):
        from pileup_caller.assembler import assemble_sites

        row = _row(100, "CC", ref="C", alt="T")
        record = next(assemble_sites([row], 1, _config(), FixedSequenceRandom([0])))

        assert (record.chrom, record.pos, record.ref, record.alt) == ("1", 100, "C", "T")
        assert record.dosages == (0,)

    def test_samples_called_independently_in_order(self):
        from pileup_caller.assembler import assemble_sites

        row = _row(100, "AA", "GG", "", "TT")
        record = next(assemble_sites([row], 4, _config(), FixedSequenceRandom([0])))

        assert record.dosages == (0, 2, None, None)

    def test_random_draws_follow_sample_order(self):
        from pileup_caller.assembler import assemble_sites

        rng = FixedSequenceRandom([0])
        row = _row(100, "AAG", "AG", "G")
        next(assemble_sites([row], 3, _config(), rng))

        assert rng.calls == [3, 2, 1]

    def test_diploid_het_dosage(self):
        from pileup_caller.assembler import assemble_sites

        row = _row(100, "AG")
        record = next(
            assemble_sites([row], 1, _config("RANDOM_DIPLOID"), FixedSequenceRandom([0]))
        )

        assert record.dosages == (1,)

    def test_min_depth_applies_per_sample(self):
        from pileup_caller.assembler import assemble_sites

        row = _row(100, "AA", "AAA")
        record = next(assemble_sites([row], 2, _config(min_depth=3), FixedSequenceRandom([0])))

        assert record.dosages == (None, 0)

    def test_sample_count_mismatch_raises(self):
        from pileup_caller.assembler import assemble_sites
        from pileup_caller.errors import SampleCountMismatchError

        rows = [_row(100), _row(200, "A", "A")]
        records = assemble_sites(rows, 3, _config(), FixedSequenceRandom([0]))

        assert next(records).pos == 100
        with pytest.raises(SampleCountMismatchError, match="1:200 has 2 sample columns"):
            next(records)
