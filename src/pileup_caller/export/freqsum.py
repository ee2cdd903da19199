"""Export genotype matrix records in FreqSum format.

Format:
    #CHROM  POS     REF     ALT     S1(1)   S2(1)
    1       752566  G       A       0       -1

Each sample column holds the alternate allele count out of the ploidy given
in the header, or -1 for a missing call.
"""

import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TextIO

from ..errors import ConfigurationError
from ..models import GenotypeMatrixRecord

logger = logging.getLogger(__name__)

MISSING_TOKEN = "-1"


def format_freqsum_header(sample_names: Sequence[str], ploidy: int) -> str:
    columns = ["#CHROM", "POS", "REF", "ALT"]
    columns.extend(f"{name}({ploidy})" for name in sample_names)
    return "\t".join(columns)


def _allele_count(dosage: int | None, ploidy: int) -> str:
    if dosage is None:
        return MISSING_TOKEN
    # Haploid calls carry a diploid dosage of 0 or 2
    if ploidy == 1:
        return str(dosage // 2)
    return str(dosage)


def format_freqsum_line(record: GenotypeMatrixRecord, ploidy: int) -> str:
    columns = [record.chrom, str(record.pos), record.ref, record.alt]
    columns.extend(_allele_count(dosage, ploidy) for dosage in record.dosages)
    return "\t".join(columns)


def _write_freqsum(
    f: TextIO,
    records: Iterable[GenotypeMatrixRecord],
    sample_names: Sequence[str],
    ploidy: int,
) -> int:
    f.write(format_freqsum_header(sample_names, ploidy) + "\n")
    count = 0
    for record in records:
        f.write(format_freqsum_line(record, ploidy) + "\n")
        count += 1
    return count


def export_freqsum(
    records: Iterable[GenotypeMatrixRecord],
    sample_names: Sequence[str],
    ploidy: int,
    output_path: Path | None = None,
) -> int:
    """Write records in FreqSum format.

    Args:
        records: Genotype matrix records, consumed lazily
        sample_names: Sample names for the header
        ploidy: 1 for haploid calling modes, 2 for random diploid calling
        output_path: Output file; standard output when None

    Returns:
        Number of sites written

    Raises:
        ConfigurationError: If the output file cannot be opened
    """
    if output_path is None:
        count = _write_freqsum(sys.stdout, records, sample_names, ploidy)
        sys.stdout.flush()
        logger.info("Exported %d sites to FreqSum format on stdout", count)
        return count

    try:
        f = open(output_path, "w", encoding="utf-8", newline="\n")
    except OSError as e:
        raise ConfigurationError(f"Cannot write FreqSum output {output_path}: {e}") from e

    with f:
        count = _write_freqsum(f, records, sample_names, ploidy)

    logger.info("Exported %d sites to FreqSum format: %s", count, output_path)
    return count
