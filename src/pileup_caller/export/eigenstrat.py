"""Export genotype matrix records as an Eigenstrat file triple.

Files written for a prefix P (give "out/calls." for out/calls.geno.txt):
    Pgeno.txt   one line per site, one character per sample
    Psnp.txt    one line per site: id, chrom, genetic pos, pos, ref, alt
    Pind.txt    one line per sample: name, sex (U), population

Genotype characters count reference alleles: 2 (hom ref), 1 (het),
0 (hom alt), 9 (missing).
"""

import logging
from collections.abc import Iterable, Sequence
from contextlib import ExitStack
from pathlib import Path

from ..errors import ConfigurationError
from ..models import GenotypeMatrixRecord, PanelSite

logger = logging.getLogger(__name__)

GENO_CODES = {None: "9", 0: "2", 1: "1", 2: "0"}
UNKNOWN_SEX = "U"


def eigenstrat_paths(prefix: str | Path) -> tuple[Path, Path, Path]:
    """Return the (geno, snp, ind) paths for an output prefix."""
    prefix = str(prefix)
    return (
        Path(f"{prefix}geno.txt"),
        Path(f"{prefix}snp.txt"),
        Path(f"{prefix}ind.txt"),
    )


def format_geno_line(record: GenotypeMatrixRecord) -> str:
    return "".join(GENO_CODES[dosage] for dosage in record.dosages)


def format_snp_line(record: GenotypeMatrixRecord) -> str:
    site = record.site or PanelSite(
        chrom=record.chrom, pos=record.pos, ref=record.ref, alt=record.alt
    )
    snp_id = site.snp_id or f"{record.chrom}_{record.pos}"
    return (
        f"{snp_id}\t{record.chrom}\t{site.genetic_pos}\t{record.pos}\t"
        f"{record.ref}\t{record.alt}"
    )


def export_eigenstrat(
    records: Iterable[GenotypeMatrixRecord],
    prefix: str | Path,
    sample_names: Sequence[str],
    population: str = "Unknown",
) -> int:
    """Write records as Eigenstrat geno/snp/ind files.

    All three files are opened before the first record is consumed.

    Returns:
        Number of sites written

    Raises:
        ConfigurationError: If any output file cannot be opened
    """
    geno_path, snp_path, ind_path = eigenstrat_paths(prefix)

    with ExitStack() as stack:
        try:
            geno = stack.enter_context(open(geno_path, "w", encoding="utf-8", newline="\n"))
            snp = stack.enter_context(open(snp_path, "w", encoding="utf-8", newline="\n"))
            ind = stack.enter_context(open(ind_path, "w", encoding="utf-8", newline="\n"))
        except OSError as e:
            raise ConfigurationError(f"Cannot write Eigenstrat output {prefix}: {e}") from e

        for name in sample_names:
            ind.write(f"{name}\t{UNKNOWN_SEX}\t{population}\n")

        count = 0
        for record in records:
            geno.write(format_geno_line(record) + "\n")
            snp.write(format_snp_line(record) + "\n")
            count += 1

    logger.info("Exported %d sites to Eigenstrat files: %s", count, geno_path)
    return count
