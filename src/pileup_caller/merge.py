"""Ordered merge-join of the SNP panel with the pileup stream.

Both inputs must be sorted by (chromosome, position). Every panel site is
emitted exactly once, in panel order, paired with the pileup record at the
same key or None. Pileup records without a panel site are dropped.
"""

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from typing import Any, TypeVar

from .errors import DuplicatePositionError, InputOrderingError, UnmatchedPileupError
from .models import JoinedRow, PanelSite, PileupRecord

logger = logging.getLogger(__name__)

T = TypeVar("T", PanelSite, PileupRecord)

SortKey = tuple[Any, int]

NUMERIC_CHROM_PATTERN = re.compile(r"^\d+$")
SEX_AND_MITO_ORDER = {"X": 1, "Y": 2, "M": 3, "MT": 3}


class ChromosomeOrder(Enum):
    """How chromosome names are compared."""

    LEXICOGRAPHIC = "lexicographic"
    NATURAL = "natural"


class UnmatchedPileupPolicy(Enum):
    """What to do with a pileup record that has no panel site."""

    SKIP = "skip"
    ERROR = "error"


def natural_chrom_key(chrom: str) -> tuple[int, int, str]:
    """Sort key placing 1..22 numerically, then X, Y, MT, then other names."""
    bare = chrom[3:] if chrom.lower().startswith("chr") else chrom
    if NUMERIC_CHROM_PATTERN.match(bare):
        return (0, int(bare), "")
    upper = bare.upper()
    if upper in SEX_AND_MITO_ORDER:
        return (1, SEX_AND_MITO_ORDER[upper], "")
    return (2, 0, bare)


def make_sort_key(order: ChromosomeOrder) -> Callable[[str, int], SortKey]:
    if order == ChromosomeOrder.NATURAL:
        return lambda chrom, pos: (natural_chrom_key(chrom), pos)
    return lambda chrom, pos: (chrom, pos)


def check_sorted(
    records: Iterable[T],
    stream_name: str,
    sort_key: Callable[[str, int], SortKey],
) -> Iterator[tuple[SortKey, T]]:
    """Yield (sort key, record) pairs, failing on out-of-order or repeated keys.

    Raises:
        InputOrderingError: If a key is smaller than the previous one.
        DuplicatePositionError: If a key equals the previous one.
    """
    previous: SortKey | None = None
    previous_record: T | None = None
    count = 0

    for record in records:
        count += 1
        key = sort_key(record.chrom, record.pos)
        if previous is not None:
            if key < previous:
                raise InputOrderingError(
                    f"{stream_name} is not sorted: {record.chrom}:{record.pos} "
                    f"(record {count}) follows {previous_record.chrom}:{previous_record.pos}"
                )
            if key == previous:
                raise DuplicatePositionError(
                    f"{stream_name} repeats position {record.chrom}:{record.pos} "
                    f"(record {count})"
                )
        previous = key
        previous_record = record
        yield key, record

    logger.debug("Consumed %d records from %s", count, stream_name)


def ordered_merge(
    panel: Iterable[PanelSite],
    pileup: Iterable[PileupRecord],
    chrom_order: ChromosomeOrder = ChromosomeOrder.LEXICOGRAPHIC,
    unmatched_pileup: UnmatchedPileupPolicy = UnmatchedPileupPolicy.SKIP,
) -> Iterator[JoinedRow]:
    """Merge-join the panel and pileup streams on (chromosome, position).

    At most one pileup record is held back at a time. Once the panel is
    exhausted the remainder of the pileup stream is not read.

    Args:
        panel: Panel sites sorted by key
        pileup: Pileup records sorted by key
        chrom_order: Chromosome comparison used for both streams
        unmatched_pileup: SKIP drops pileup records without a panel site,
            ERROR raises UnmatchedPileupError on the first one

    Yields:
        One JoinedRow per panel site
    """
    sort_key = make_sort_key(chrom_order)
    pileup_iter = check_sorted(pileup, "pileup", sort_key)
    pending: tuple[SortKey, PileupRecord] | None = None
    pileup_exhausted = False

    for panel_key, site in check_sorted(panel, "panel", sort_key):
        match = None
        while not pileup_exhausted:
            if pending is None:
                pending = next(pileup_iter, None)
                if pending is None:
                    pileup_exhausted = True
                    break

            pileup_key, record = pending
            if pileup_key < panel_key:
                if unmatched_pileup == UnmatchedPileupPolicy.ERROR:
                    raise UnmatchedPileupError(
                        f"Pileup position {record.chrom}:{record.pos} is not in the SNP panel"
                    )
                pending = None
                continue

            if pileup_key == panel_key:
                match = record
                pending = None
            break

        yield JoinedRow(site, match)
