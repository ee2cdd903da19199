"""Writers for the FreqSum and Eigenstrat genotype matrix formats."""

from .eigenstrat import eigenstrat_paths, export_eigenstrat
from .freqsum import export_freqsum, format_freqsum_header, format_freqsum_line

__all__ = [
    "eigenstrat_paths",
    "export_eigenstrat",
    "export_freqsum",
    "format_freqsum_header",
    "format_freqsum_line",
]
