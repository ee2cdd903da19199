"""End-to-end tests for the calling pipeline."""

import pytest
from fixtures.random_sources import FixedSequenceRandom


def _settings(**kwargs):
    from pileup_caller.config import CallerSettings
    from pileup_caller.models import CallingMode

    kwargs.setdefault("mode", CallingMode.RANDOM_HAPLOID)
    return CallerSettings(**kwargs)


def _site(chrom, pos, ref, alt):
    from pileup_caller.models import PanelSite

    return PanelSite(chrom=chrom, pos=pos, ref=ref, alt=alt)


def _pileup(chrom, pos, ref, *samples):
    from pileup_caller.models import PileupRecord

    return PileupRecord(
        chrom=chrom, pos=pos, ref=ref, bases_per_sample=tuple(tuple(s) for s in samples)
    )


class TestPipelineEndToEnd:
    """Tests for the documented end-to-end behaviour."""

    def test_single_site_random_haploid_with_seed(self):
        from pileup_caller.pipeline import PileupCallerPipeline

        panel = [_site("chr1", 100, "A", "G")]
        pileup = [_pileup("chr1", 100, "A", ["A", "A", "G"])]

        results = []
        for _ in range(3):
            pipeline = PileupCallerPipeline(_settings(seed=42), ["sample1"])
            results.append(list(pipeline.run(panel, pileup)))

        assert len(results[0]) == 1
        assert results[0][0].dosages[0] in (0, 2)
        assert results[0] == results[1] == results[2]

    def test_uncovered_site_is_missing(self):
        from pileup_caller.pipeline import PileupCallerPipeline

        panel = [_site("chr1", 100, "A", "G"), _site("chr1", 200, "C", "T")]
        pileup = [_pileup("chr1", 100, "A", ["A"])]

        pipeline = PileupCallerPipeline(_settings(seed=1), ["sample1"])
        records = list(pipeline.run(panel, pileup))

        assert len(records) == 2
        assert records[0].dosages == (0,)
        assert records[1].dosages == (None,)

    def test_seeded_runs_reproduce_multi_sample_calls(self):
        from pileup_caller.models import CallingMode
        from pileup_caller.pipeline import PileupCallerPipeline

        panel = [_site("1", pos, "A", "G") for pos in range(10, 200, 10)]
        pileup = [_pileup("1", pos, "A", "AGAG", "GGA", "AG") for pos in range(10, 200, 20)]
        settings = _settings(mode=CallingMode.RANDOM_DIPLOID, seed=7)

        first = list(PileupCallerPipeline(settings, ["a", "b", "c"]).run(panel, pileup))
        second = list(PileupCallerPipeline(settings, ["a", "b", "c"]).run(panel, pileup))

        assert first == second

    def test_skip_transitions(self):
        from pileup_caller.models import TransitionsMode
        from pileup_caller.pipeline import PileupCallerPipeline

        panel = [_site("1", 100, "A", "G"), _site("1", 200, "A", "C")]
        pipeline = PileupCallerPipeline(
            _settings(transitions_mode=TransitionsMode.SKIP_TRANSITIONS), ["s1"]
        )

        records = list(pipeline.run(panel, []))

        assert [r.pos for r in records] == [200]
        assert pipeline.stats.panel_sites == 2
        assert pipeline.stats.sites_written == 1
        assert pipeline.stats.sites_filtered == 1

    def test_stats_count_coverage_and_missing(self):
        from pileup_caller.pipeline import PileupCallerPipeline

        panel = [_site("1", 100, "A", "C"), _site("1", 200, "A", "C")]
        pileup = [_pileup("1", 100, "A", "A", "")]
        pipeline = PileupCallerPipeline(_settings(), ["s1", "s2"], rng=FixedSequenceRandom([0]))

        list(pipeline.run(panel, pileup))

        assert pipeline.stats.covered_sites == 1
        assert pipeline.stats.missing_calls == [1, 2]
        assert pipeline.stats.to_dict(["s1", "s2"])["missing_calls"] == {"s1": 1, "s2": 2}

    def test_ploidy_follows_mode(self):
        from pileup_caller.models import CallingMode
        from pileup_caller.pipeline import PileupCallerPipeline

        assert PileupCallerPipeline(_settings(), ["s"]).ploidy == 1
        assert (
            PileupCallerPipeline(_settings(mode=CallingMode.RANDOM_DIPLOID), ["s"]).ploidy == 2
        )

    def test_missing_mode_raises(self):
        from pileup_caller.config import CallerSettings, ConfigValidationError
        from pileup_caller.pipeline import PileupCallerPipeline

        with pytest.raises(ConfigValidationError, match="No calling mode"):
            PileupCallerPipeline(CallerSettings(), ["s"])

    def test_no_samples_raises(self):
        from pileup_caller.errors import ConfigurationError
        from pileup_caller.pipeline import PileupCallerPipeline

        with pytest.raises(ConfigurationError):
            PileupCallerPipeline(_settings(), [])
