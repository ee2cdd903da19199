"""Transition/transversion filtering of genotype matrix records."""

import dataclasses
from collections.abc import Iterable, Iterator

from .models import GenotypeMatrixRecord, TransitionsMode

TRANSITIONS = {("A", "G"), ("G", "A"), ("C", "T"), ("T", "C")}


def is_transition(ref: str, alt: str) -> bool:
    """Return True for A<->G and C<->T substitutions (uppercase only)."""
    return (ref, alt) in TRANSITIONS


def filter_transitions(
    records: Iterable[GenotypeMatrixRecord],
    mode: TransitionsMode,
) -> Iterator[GenotypeMatrixRecord]:
    """Apply the transitions policy to a record stream.

    ALL_SITES passes records through, SKIP_TRANSITIONS drops transition sites
    and TRANSITIONS_MISSING keeps them with every call set to missing.
    """
    for record in records:
        if mode == TransitionsMode.ALL_SITES or not is_transition(record.ref, record.alt):
            yield record
        elif mode == TransitionsMode.TRANSITIONS_MISSING:
            yield dataclasses.replace(record, dosages=(None,) * len(record.dosages))
