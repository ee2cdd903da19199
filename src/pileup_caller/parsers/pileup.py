"""samtools mpileup text parsing.

Each line holds chrom, pos and the reference base, followed by one
(depth, read bases, base qualities) triple per sample. Read bases use the
standard pileup encoding:
- `.` and `,`: match to the reference base on the forward/reverse strand
- `ACGTN` / `acgtn`: mismatching base on the forward/reverse strand
- `^`: start of read, followed by one mapping quality character
- `$`: end of read
- `+N<seq>` / `-N<seq>`: insertion/deletion of N bases after this position
- `*` / `#`: placeholder for a deleted base
- `>` / `<`: reference skip
"""

import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from ..errors import MalformedRecordError
from ..models import PileupRecord

logger = logging.getLogger(__name__)

READ_BASES = frozenset("ACGTN")
REF_MATCHES = frozenset(".,")
DIGITS = frozenset("0123456789")
FIXED_COLUMNS = 3
COLUMNS_PER_SAMPLE = 3


def decode_read_bases(bases: str, ref: str) -> tuple[str, ...]:
    """Decode a pileup read-base string into one uppercase base per read.

    Args:
        bases: Read-base column for one sample
        ref: Reference base at the position

    Returns:
        Tuple of uppercase bases, reference matches resolved to ref

    Raises:
        ValueError: If an indel marker has no length
    """
    ref = ref.upper()
    decoded = []
    index = 0
    while index < len(bases):
        char = bases[index]
        if char in REF_MATCHES:
            decoded.append(ref)
            index += 1
        elif char.upper() in READ_BASES:
            decoded.append(char.upper())
            index += 1
        elif char == "^":
            index += 2
        elif char in "+-":
            index += 1
            start = index
            while index < len(bases) and bases[index] in DIGITS:
                index += 1
            if index == start:
                raise ValueError(f"indel marker without length in '{bases}'")
            index += int(bases[start:index])
        else:
            index += 1
    return tuple(decoded)


def parse_pileup_line(line: str, line_number: int = 0) -> PileupRecord:
    """Parse one mpileup line.

    Raises:
        MalformedRecordError: If the column layout or position is invalid.
    """
    fields = line.rstrip("\r\n").split("\t")
    n_sample_fields = len(fields) - FIXED_COLUMNS
    if n_sample_fields < 0 or n_sample_fields % COLUMNS_PER_SAMPLE != 0:
        raise MalformedRecordError(
            f"Pileup line {line_number}: expected 3 + 3*k tab-separated columns, "
            f"got {len(fields)}"
        )

    chrom, pos_str, ref = fields[0], fields[1], fields[2]
    try:
        pos = int(pos_str)
    except ValueError:
        raise MalformedRecordError(
            f"Pileup line {line_number}: invalid position '{pos_str}'"
        ) from None

    bases_per_sample = []
    for i in range(FIXED_COLUMNS, len(fields), COLUMNS_PER_SAMPLE):
        try:
            bases_per_sample.append(decode_read_bases(fields[i + 1], ref))
        except ValueError as e:
            raise MalformedRecordError(f"Pileup line {line_number}: {e}") from None

    return PileupRecord(
        chrom=chrom,
        pos=pos,
        ref=ref.upper(),
        bases_per_sample=tuple(bases_per_sample),
    )


def iter_pileup_lines(handle: TextIO) -> Iterator[PileupRecord]:
    count = 0
    try:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            count += 1
            yield parse_pileup_line(line, line_number)
    except UnicodeDecodeError as e:
        raise MalformedRecordError(
            f"Pileup input is not valid UTF-8 text: {e.reason}"
        ) from None
    logger.debug("Read %d pileup records", count)


def read_pileup(source: Path | str = "-") -> Iterator[PileupRecord]:
    """Stream pileup records from a file, or from standard input for '-'."""
    if str(source) == "-":
        yield from iter_pileup_lines(sys.stdin)
        return

    with open(source, encoding="utf-8") as f:
        yield from iter_pileup_lines(f)
