"""Readers for pileup, SNP panel and sample name inputs."""

from .eigenstrat import parse_snp_line, read_sample_names, read_snp_file
from .pileup import decode_read_bases, parse_pileup_line, read_pileup

__all__ = [
    "decode_read_bases",
    "parse_pileup_line",
    "parse_snp_line",
    "read_pileup",
    "read_sample_names",
    "read_snp_file",
]
