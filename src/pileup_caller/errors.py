"""Exception types raised by the calling pipeline."""


class PileupCallerError(Exception):
    """Base class for fatal pipeline errors."""

    pass


class InputOrderingError(PileupCallerError):
    """Raised when an input stream is not sorted by (chromosome, position)."""

    pass


class DuplicatePositionError(InputOrderingError):
    """Raised when an input stream repeats a (chromosome, position) key."""

    pass


class UnmatchedPileupError(InputOrderingError):
    """Raised in strict mode for a pileup record with no panel site."""

    pass


class MalformedRecordError(PileupCallerError, ValueError):
    """Raised when an input line cannot be parsed into a record."""

    pass


class ConfigurationError(PileupCallerError):
    """Raised when run settings are inconsistent or unusable."""

    pass


class SampleCountMismatchError(ConfigurationError):
    """Raised when pileup sample columns do not match the sample names."""

    pass
