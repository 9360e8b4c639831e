# -*- coding: utf-8 -*-
"""
ReaderPET.classifier
====================

Signature check, revision check and file-kind classification of RDF files.

An RDF file carries no explicit "file type" field. Its kind is found by
probing the structure in a fixed order, first match wins:

1. ``list``  - ``isListFile`` flag is non-zero
2. ``sino``  - the ``/SegmentData/Segment2`` group exists
3. ``norm``  - the crystal-efficiency dataset exists (implies ``geo``)
4. ``geo``   - the first geometric-correction slice exists

The order matters: normalization files contain the geometry data, so the
norm probe has to run before the geo probe.
"""

from __future__ import annotations

import h5py

from . import constants as C
from .container import HDF5Container
from .errors import FormatError, NotFoundError, DatasetTypeError
from .errors import UnrecognizedFileKindError, UnsupportedEncodingError
from .errors import UnsupportedVersionError

__all__ = [
    "Classification",
    "verify_signature",
    "check_signature",
    "check_file",
    "determine_geo_dimensionality",
    "PROBES",
]


class Classification:
    """
    Result of classifying an RDF file.

    Attributes
    ----------
    is_list, is_sino, is_geo, is_norm : bool
        Kind flags. A norm file is also a geo file.
    format_version : int
        RDF major revision.
    geo_dims : int or None
        2 or 3 for geo/norm files, None otherwise.
    """
    def __init__(self, is_list=False, is_sino=False, is_geo=False,
                 is_norm=False, format_version=0, geo_dims=None):
        self.is_list = bool(is_list)
        self.is_sino = bool(is_sino)
        self.is_geo = bool(is_geo) or bool(is_norm)
        self.is_norm = bool(is_norm)
        self.format_version = int(format_version)
        self.geo_dims = geo_dims

        if self.is_list + self.is_sino + self.is_geo > 1:
            raise ValueError(
                "A file can only be one of list, sinogram or geo/norm.")

    @property
    def kind(self):
        if self.is_list:
            return "list"
        if self.is_sino:
            return "sino"
        if self.is_norm:
            return "norm"
        if self.is_geo:
            return "geo"
        return "unknown"

    def __eq__(self, other):
        if not isinstance(other, Classification):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return (f"Classification(kind={self.kind!r}, "
                f"format_version={self.format_version}, "
                f"geo_dims={self.geo_dims})")


# -----------------------------------------------------------------------------
# Signature and revision
# -----------------------------------------------------------------------------

def verify_signature(container):
    """
    Return True iff the manufacturer field equals ``"GE MEDICAL SYSTEMS"``.

    The comparison is exact and case-sensitive. A missing or non-string
    manufacturer field gives False instead of raising, so arbitrary HDF5
    files can be probed cheaply.
    """
    try:
        manufacturer = container.read_string(C.MANUFACTURER_PATH)
    except (NotFoundError, DatasetTypeError):
        return False
    return manufacturer == C.MANUFACTURER


def check_signature(filename):
    """
    Probe a path for a GE RDF signature without raising.

    Returns False for missing, non-HDF5 or unreadable files.
    """
    try:
        if not h5py.is_hdf5(filename):
            return False
        with HDF5Container(filename) as container:
            return verify_signature(container)
    except (OSError, FormatError):
        return False


def read_format_version(container):
    return int(container.read_scalar(C.VERSION_PATH, "uint32"))


# -----------------------------------------------------------------------------
# Probes
# -----------------------------------------------------------------------------

def _probe_list(container, layout):
    return bool(container.read_scalar(layout["is_list_file"], "uint32"))


def _probe_sino(container, layout):
    return container.exists(layout["sino_group"])


def _probe_norm(container, layout):
    return container.exists(layout["norm_group"])


def _probe_geo(container, layout):
    return container.exists(layout["geo_group"])


PROBES = (
    (_probe_list, "list"),
    (_probe_sino, "sino"),
    (_probe_norm, "norm"),
    (_probe_geo, "geo"),
)
"""Ordered ``(predicate, kind)`` decision table, first match wins."""


def _check_list_encoding(container, layout):
    if not layout.get("check_list_compression", False):
        return
    compressed = container.read_scalar(layout["is_list_compressed"], "uint32")
    if compressed:
        raise UnsupportedEncodingError(
            "The RDF9 listmode file is compressed, it cannot be read. "
            "Please uncompress it and retry.")


def determine_geo_dimensionality(container, layout=None):
    """
    Return 3 for a 3-D geo/norm file (more than one axial segment), else 2.
    """
    layout = layout or C.RDF9
    size = container.read_scalar(layout["geo_dimension"], "uint32")
    return 3 if size > 1 else 2


def check_file(container):
    """
    Validate an open container and classify it.

    Parameters
    ----------
    container : HDF5Container
        Open container.

    Returns
    -------
    Classification
        Fresh classification; nothing from a previous call is reused.

    Raises
    ------
    FormatError
        The vendor signature does not match.
    UnsupportedVersionError
        The RDF major revision is not supported.
    UnsupportedEncodingError
        A list-mode payload is stored compressed.
    UnrecognizedFileKindError
        None of the probes matched.
    """
    if not verify_signature(container):
        raise FormatError("File is HDF5 but not GE data.")

    version = read_format_version(container)
    if version not in C.SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(
            f"RDF version {version} found; only RDF version(s) "
            f"{', '.join(str(v) for v in C.SUPPORTED_VERSIONS)} supported.")
    layout = C.get_layout(version)

    for probe, kind in PROBES:
        if not probe(container, layout):
            continue

        if kind == "list":
            _check_list_encoding(container, layout)
            return Classification(is_list=True, format_version=version)
        if kind == "sino":
            return Classification(is_sino=True, format_version=version)

        geo_dims = determine_geo_dimensionality(container, layout)
        return Classification(is_geo=True, is_norm=(kind == "norm"),
                              format_version=version, geo_dims=geo_dims)

    raise UnrecognizedFileKindError(
        f"{container.path} is not a list, sinogram, norm or geo RDF file.")
