"""Per-sample genotype calling from read bases.

Depth thresholds are applied to the raw read count. Reads whose base is
neither the reference nor the alternate allele are then dropped before any
draw or count.
"""

from collections.abc import Sequence

from .models import CalledGenotype, CallingConfig, CallingMode
from .sampling import RandomSource, choose_one, sample_without_replacement

DOSAGES = {
    CalledGenotype.MISSING: None,
    CalledGenotype.HOM_REF: 0,
    CalledGenotype.HET: 1,
    CalledGenotype.HOM_ALT: 2,
}


def _allele_reads(reads: Sequence[str], ref: str, alt: str) -> list[str]:
    return [base for base in reads if base == ref or base == alt]


def _homozygous(base: str, ref: str) -> CalledGenotype:
    return CalledGenotype.HOM_REF if base == ref else CalledGenotype.HOM_ALT


def call_random_haploid(
    reads: Sequence[str], ref: str, alt: str, min_depth: int, rng: RandomSource
) -> CalledGenotype:
    """Call a haploid genotype from one randomly drawn read."""
    if len(reads) < min_depth:
        return CalledGenotype.MISSING

    pool = _allele_reads(reads, ref, alt)
    if not pool:
        return CalledGenotype.MISSING
    return _homozygous(choose_one(pool, rng), ref)


def call_random_diploid(
    reads: Sequence[str], ref: str, alt: str, min_depth: int, rng: RandomSource
) -> CalledGenotype:
    """Call a diploid genotype from two reads drawn without replacement.

    At least two reads are needed even when min_depth is lower.
    """
    if len(reads) < max(min_depth, 2):
        return CalledGenotype.MISSING

    pool = _allele_reads(reads, ref, alt)
    if len(pool) < 2:
        return CalledGenotype.MISSING

    first, second = sample_without_replacement(pool, 2, rng)
    if first != second:
        return CalledGenotype.HET
    return _homozygous(first, ref)


def call_majority(
    reads: Sequence[str],
    ref: str,
    alt: str,
    min_depth: int,
    downsample: bool,
    rng: RandomSource,
) -> CalledGenotype:
    """Call the allele supported by most reads.

    With downsample set, exactly min_depth reads are drawn from the raw pool
    first. Ties between the two alleles are broken at random.
    """
    if len(reads) < min_depth:
        return CalledGenotype.MISSING

    if downsample:
        reads = sample_without_replacement(reads, min_depth, rng)

    n_ref = sum(1 for base in reads if base == ref)
    n_alt = sum(1 for base in reads if base == alt)

    if n_ref == 0 and n_alt == 0:
        return CalledGenotype.MISSING
    if n_ref > n_alt:
        return CalledGenotype.HOM_REF
    if n_alt > n_ref:
        return CalledGenotype.HOM_ALT
    return choose_one((CalledGenotype.HOM_REF, CalledGenotype.HOM_ALT), rng)


def call_genotype(
    reads: Sequence[str],
    ref: str,
    alt: str,
    config: CallingConfig,
    rng: RandomSource,
) -> CalledGenotype:
    """Call one sample's genotype at a site.

    Args:
        reads: Uppercase read bases observed for the sample
        ref: Panel reference allele
        alt: Panel alternate allele
        config: Calling mode and depth settings
        rng: Random source consumed by the draws

    Returns:
        The called genotype; MISSING when depth or allele reads are insufficient
    """
    if config.mode == CallingMode.RANDOM_HAPLOID:
        return call_random_haploid(reads, ref, alt, config.min_depth, rng)
    if config.mode == CallingMode.RANDOM_DIPLOID:
        return call_random_diploid(reads, ref, alt, config.min_depth, rng)
    return call_majority(reads, ref, alt, config.min_depth, config.downsample, rng)


def genotype_to_dosage(genotype: CalledGenotype) -> int | None:
    """Convert a called genotype to an alternate-allele dosage."""
    return DOSAGES[genotype]
