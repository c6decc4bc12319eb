"""
errors.py - Failure taxonomy for an imposition run.

Every stage raises one of these; the batch aborts on the first one.
"""


class ImpositionError(Exception):
    """Base class for all batch-aborting failures."""


class InvalidConfiguration(ImpositionError, ValueError):
    """Layout settings or pipeline cannot produce a sheet."""


class DocumentOpenFailure(ImpositionError):
    """Input buffer is not a parseable PDF."""


class PageOutOfRange(ImpositionError, IndexError):
    """Requested 1-based page number is outside the document."""


class RasterContextFailure(ImpositionError):
    """A page or sheet surface could not be rendered or allocated."""


class EncodingFailure(ImpositionError):
    """Image compression or PDF serialization failed."""
