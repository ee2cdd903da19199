"""Eigenstrat SNP file and sample name readers."""

import gzip
import logging
from collections.abc import Iterator
from pathlib import Path

from ..errors import ConfigurationError, MalformedRecordError
from ..models import PanelSite

logger = logging.getLogger(__name__)

SNP_FIELDS = 6
VALID_ALLELES = frozenset("ACGTN")


def parse_snp_line(line: str, line_number: int = 0) -> PanelSite:
    """Parse an Eigenstrat SNP line: id, chrom, genetic pos, pos, ref, alt.

    Raises:
        MalformedRecordError: If the line does not describe a biallelic SNP.
    """
    fields = line.split()
    if len(fields) != SNP_FIELDS:
        raise MalformedRecordError(
            f"SNP file line {line_number}: expected {SNP_FIELDS} fields, got {len(fields)}"
        )

    snp_id, chrom, genetic_pos, pos_str, ref, alt = fields
    try:
        float(genetic_pos)
        pos = int(pos_str)
    except ValueError:
        raise MalformedRecordError(
            f"SNP file line {line_number}: invalid position '{genetic_pos}' or '{pos_str}'"
        ) from None

    ref, alt = ref.upper(), alt.upper()
    for allele in (ref, alt):
        if len(allele) != 1 or allele not in VALID_ALLELES:
            raise MalformedRecordError(
                f"SNP file line {line_number}: invalid allele '{allele}' for {snp_id}"
            )

    return PanelSite(
        chrom=chrom,
        pos=pos,
        ref=ref,
        alt=alt,
        snp_id=snp_id,
        genetic_pos=genetic_pos,
    )


def read_snp_file(snp_path: Path) -> Iterator[PanelSite]:
    """Stream panel sites from an Eigenstrat SNP file (can be gzipped)."""
    open_func = gzip.open if str(snp_path).endswith(".gz") else open
    mode = "rt" if str(snp_path).endswith(".gz") else "r"

    count = 0
    with open_func(snp_path, mode, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip() or line.startswith("#"):
                continue
            count += 1
            yield parse_snp_line(line, line_number)

    logger.debug("Read %d SNP panel sites from %s", count, snp_path)


def read_sample_names(
    names: str | None = None,
    names_file: Path | None = None,
) -> list[str]:
    """Resolve sample names from a comma-separated list or a one-per-line file.

    Raises:
        ConfigurationError: If neither or both sources are given, or no names result.
    """
    if names is None and names_file is None:
        raise ConfigurationError("No sample names given (use a name list or a name file)")
    if names is not None and names_file is not None:
        raise ConfigurationError("Give sample names either as a list or as a file, not both")

    if names is not None:
        result = [name.strip() for name in names.split(",") if name.strip()]
    else:
        if not names_file.exists():
            raise ConfigurationError(f"Sample name file not found: {names_file}")
        with open(names_file) as f:
            result = [line.strip() for line in f if line.strip()]

    if not result:
        raise ConfigurationError("No sample names given")
    return result
