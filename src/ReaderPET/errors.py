# -*- coding: utf-8 -*-
"""
ReaderPET.errors
================

Exception hierarchy used across ReaderPET.

Every failure raised while opening, classifying or reading an RDF container
derives from :class:`RDFError`. Each class additionally derives from the
closest built-in exception, so code that already catches ``ValueError``,
``KeyError`` or ``TypeError`` keeps working.

Nothing in ReaderPET retries: a corrupted or unsupported container cannot be
fixed by reading it again, so every error is fatal to the current file.
"""


class RDFError(Exception):
    """Base class of all ReaderPET errors."""


class FormatError(RDFError, ValueError):
    """File is not a container of the expected kind or vendor."""


class NotAContainerError(FormatError):
    """File is not an HDF5 container at all."""


class UnsupportedVersionError(RDFError, ValueError):
    """The RDF major revision is not handled by this reader."""


class UnrecognizedFileKindError(RDFError, ValueError):
    """None of the list/sino/norm/geo probes matched."""


class UnsupportedEncodingError(RDFError, ValueError):
    """Payload is stored compressed; decompression is not supported."""


class UnknownScannerError(RDFError, KeyError):
    """Scanner name stored in the file is absent from the catalog."""

    def __str__(self):
        # KeyError quotes its argument, keep the message readable
        return str(self.args[0]) if self.args else ""


class EmptyDatasetError(RDFError, ValueError):
    """The file reports zero valid singles samples."""


class UnsupportedSelectionError(RDFError, ValueError):
    """Only the full-extent selection (offset 0, stride 1) can be read."""


class NotFoundError(RDFError, KeyError):
    """Requested dataset path does not exist in the container."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class DatasetTypeError(RDFError, TypeError):
    """On-disk type of a dataset does not match the requested type."""


class WrongFileKindError(RDFError, ValueError):
    """Operation requires a different file kind (list/sino/geo/norm)."""


class RegionError(RDFError, IndexError):
    """View, slice or sample number outside the valid range."""
