"""pileup-caller: genotype calling from pileup data at SNP panel positions."""

__version__ = "0.1.0"
