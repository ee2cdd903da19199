"""Turn merged panel/pileup rows into genotype matrix records."""

from collections.abc import Iterable, Iterator

from .caller import call_genotype, genotype_to_dosage
from .errors import SampleCountMismatchError
from .models import CallingConfig, GenotypeMatrixRecord, JoinedRow
from .sampling import RandomSource


def assemble_sites(
    rows: Iterable[JoinedRow],
    n_samples: int,
    config: CallingConfig,
    rng: RandomSource,
) -> Iterator[GenotypeMatrixRecord]:
    """Call every sample at every panel site.

    Samples are called in column order from the shared random source, so a
    fixed seed reproduces the same calls.

    Raises:
        SampleCountMismatchError: If a pileup record has a different number
            of sample columns than n_samples.
    """
    for site, pileup in rows:
        if pileup is None:
            yield GenotypeMatrixRecord.missing(site, n_samples)
            continue

        if pileup.n_samples != n_samples:
            raise SampleCountMismatchError(
                f"Pileup at {pileup.chrom}:{pileup.pos} has {pileup.n_samples} sample "
                f"columns but {n_samples} sample names were given"
            )

        dosages = tuple(
            genotype_to_dosage(call_genotype(reads, site.ref, site.alt, config, rng))
            for reads in pileup.bases_per_sample
        )
        yield GenotypeMatrixRecord(
            chrom=site.chrom,
            pos=site.pos,
            ref=site.ref,
            alt=site.alt,
            dosages=dosages,
            site=site,
        )
