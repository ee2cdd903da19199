"""Streaming pipeline from panel and pileup records to genotype matrix records."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from .assembler import assemble_sites
from .config import CallerSettings
from .errors import ConfigurationError
from .filters import filter_transitions
from .merge import ordered_merge
from .models import CallingConfig, GenotypeMatrixRecord, JoinedRow, PanelSite, PileupRecord
from .sampling import RandomSource, make_random_source

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Counters collected while the pipeline runs."""

    panel_sites: int = 0
    covered_sites: int = 0
    sites_written: int = 0
    missing_calls: list[int] = field(default_factory=list)

    @property
    def sites_filtered(self) -> int:
        return self.panel_sites - self.sites_written

    def to_dict(self, sample_names: Sequence[str]) -> dict[str, Any]:
        return {
            "panel_sites": self.panel_sites,
            "covered_sites": self.covered_sites,
            "sites_written": self.sites_written,
            "sites_filtered": self.sites_filtered,
            "missing_calls": dict(zip(sample_names, self.missing_calls, strict=True)),
        }


class PileupCallerPipeline:
    """Merge, call and filter stages wired into one lazy record stream.

    Records are produced one at a time as the consumer pulls them; nothing
    beyond the current panel site and pileup record is held in memory.
    """

    def __init__(
        self,
        settings: CallerSettings,
        sample_names: Sequence[str],
        rng: RandomSource | None = None,
    ):
        if not sample_names:
            raise ConfigurationError("At least one sample name is required")

        self.settings = settings
        self.sample_names = list(sample_names)
        self.calling_config: CallingConfig = settings.to_calling_config()
        self.rng = rng if rng is not None else make_random_source(self.calling_config.seed)
        self.stats = PipelineStats(missing_calls=[0] * len(self.sample_names))

    @property
    def n_samples(self) -> int:
        return len(self.sample_names)

    @property
    def ploidy(self) -> int:
        return self.calling_config.ploidy

    def _count_rows(self, rows: Iterable[JoinedRow]) -> Iterator[JoinedRow]:
        for row in rows:
            self.stats.panel_sites += 1
            if row.pileup is not None:
                self.stats.covered_sites += 1
            yield row

    def _count_written(
        self, records: Iterable[GenotypeMatrixRecord]
    ) -> Iterator[GenotypeMatrixRecord]:
        for record in records:
            self.stats.sites_written += 1
            for i, dosage in enumerate(record.dosages):
                if dosage is None:
                    self.stats.missing_calls[i] += 1
            yield record

    def run(
        self,
        panel: Iterable[PanelSite],
        pileup: Iterable[PileupRecord],
    ) -> Iterator[GenotypeMatrixRecord]:
        """Yield one filtered genotype matrix record per kept panel site."""
        logger.info(
            "Calling %d samples in %s mode (min depth %d%s)",
            self.n_samples,
            self.calling_config.mode.value,
            self.calling_config.min_depth,
            ", downsampling" if self.calling_config.downsample else "",
        )

        rows = ordered_merge(
            panel,
            pileup,
            chrom_order=self.settings.chrom_order,
            unmatched_pileup=self.settings.unmatched_pileup,
        )
        records = assemble_sites(
            self._count_rows(rows), self.n_samples, self.calling_config, self.rng
        )
        records = filter_transitions(records, self.settings.transitions_mode)
        yield from self._count_written(records)

        logger.info(
            "Processed %d panel sites (%d covered), wrote %d",
            self.stats.panel_sites,
            self.stats.covered_sites,
            self.stats.sites_written,
        )
