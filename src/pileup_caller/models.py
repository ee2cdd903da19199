"""Data models for panel sites, pileup rows and genotype calls."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class CallingMode(Enum):
    """Genotype calling method."""

    RANDOM_HAPLOID = "random-haploid"
    RANDOM_DIPLOID = "random-diploid"
    MAJORITY = "majority"

    @classmethod
    def from_string(cls, value: str) -> "CallingMode":
        value_lower = value.lower().replace("_", "-")
        for mode in cls:
            if mode.value == value_lower:
                return mode
        raise ValueError(
            f"Unknown calling mode: '{value}'. Valid values: {', '.join(m.value for m in cls)}"
        )


class TransitionsMode(Enum):
    """Treatment of transition SNPs in the output."""

    ALL_SITES = "all-sites"
    SKIP_TRANSITIONS = "skip-transitions"
    TRANSITIONS_MISSING = "transitions-missing"

    @classmethod
    def from_string(cls, value: str) -> "TransitionsMode":
        value_lower = value.lower().replace("_", "-")
        for mode in cls:
            if mode.value == value_lower:
                return mode
        raise ValueError(
            f"Unknown transitions mode: '{value}'. "
            f"Valid values: {', '.join(m.value for m in cls)}"
        )


class CalledGenotype(Enum):
    """Genotype called for one sample at one site."""

    MISSING = "missing"
    HOM_REF = "hom_ref"
    HOM_ALT = "hom_alt"
    HET = "het"


@dataclass(frozen=True)
class CallingConfig:
    """Settings for genotype calling, fixed for a whole run."""

    mode: CallingMode = CallingMode.RANDOM_HAPLOID
    min_depth: int = 1
    downsample: bool = False
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.min_depth < 0:
            raise ValueError(f"min_depth must be >= 0, got {self.min_depth}")
        if self.downsample and self.mode != CallingMode.MAJORITY:
            raise ValueError("downsample is only supported with majority calling")

    @property
    def ploidy(self) -> int:
        """Number of haplotypes each call represents."""
        return 2 if self.mode == CallingMode.RANDOM_DIPLOID else 1


@dataclass(frozen=True)
class PanelSite:
    """Represents one line of an Eigenstrat SNP file.

    genetic_pos keeps the text of the file so the line can be written back unchanged.
    """

    chrom: str
    pos: int
    ref: str
    alt: str
    snp_id: str = ""
    genetic_pos: str = "0"

    @property
    def key(self) -> tuple[str, int]:
        return (self.chrom, self.pos)


@dataclass(frozen=True)
class PileupRecord:
    """Represents one covered position of a multi-sample pileup."""

    chrom: str
    pos: int
    ref: str
    bases_per_sample: tuple[tuple[str, ...], ...]

    @property
    def key(self) -> tuple[str, int]:
        return (self.chrom, self.pos)

    @property
    def n_samples(self) -> int:
        return len(self.bases_per_sample)


@dataclass(frozen=True)
class GenotypeMatrixRecord:
    """Dosage calls for all samples at one panel site.

    Dosages count alternate alleles (0, 1 or 2); None marks a missing call.
    """

    chrom: str
    pos: int
    ref: str
    alt: str
    dosages: tuple[int | None, ...]
    site: PanelSite | None = field(default=None, compare=False)

    @classmethod
    def missing(cls, site: PanelSite, n_samples: int) -> "GenotypeMatrixRecord":
        return cls(
            chrom=site.chrom,
            pos=site.pos,
            ref=site.ref,
            alt=site.alt,
            dosages=(None,) * n_samples,
            site=site,
        )

    @property
    def n_called(self) -> int:
        return sum(1 for d in self.dosages if d is not None)


class JoinedRow(NamedTuple):
    """A panel site with the pileup record at the same key, if any."""

    site: PanelSite
    pileup: PileupRecord | None
