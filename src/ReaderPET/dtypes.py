# -*- coding: utf-8 -*-
"""
ReaderPET.dtypes
================

Canonical NumPy dtypes used across ReaderPET for RDF payload I/O.

Each payload kind of an RDF container is read into one fixed in-memory
dtype, independent of the on-disk type, so consumers always see the same
numeric representation:

- list-mode streams are raw bytes, records are decoded downstream
- sinogram views are 8-bit counts
- geometric correction slices and singles samples are 32-bit unsigned
- crystal efficiency factors are 32-bit floats
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "LIST_DTYPE",
    "SINO_DTYPE",
    "GEO_DTYPE",
    "EFFICIENCY_DTYPE",
    "SINGLES_DTYPE",
    "REGION_DTYPE_MAP",
    "DTYPE_MAP",
]

# -----------------------------------------------------------------------------
# Payload dtypes
# -----------------------------------------------------------------------------

LIST_DTYPE = np.dtype(np.uint8)
"""Raw list-mode bytes (little-endian records of 6 to 16 bytes)."""

SINO_DTYPE = np.dtype(np.uint8)
"""Sinogram counts per view, read as unsigned 8-bit."""

GEO_DTYPE = np.dtype(np.uint32)
"""Geometric correction factors per slice."""

EFFICIENCY_DTYPE = np.dtype(np.float32)
"""Per-crystal efficiency factors."""

SINGLES_DTYPE = np.dtype(np.uint32)
"""Crystal singles counts per sample."""

REGION_DTYPE_MAP = {
    "list": LIST_DTYPE,
    "sino": SINO_DTYPE,
    "geo": GEO_DTYPE,
    "norm": EFFICIENCY_DTYPE,
    "singles": SINGLES_DTYPE,
}
"""
Mapping of region kind to the dtype its data is read into.
"""

DTYPE_MAP = {
    "int32": np.int32,
    "uint32": np.uint32,
    "int64": np.int64,
    "uint64": np.uint64,
    "float32": np.float32,
    "float64": np.float64,
}
"""
Mapping of dtype name strings to NumPy dtypes.

Lets callers of ``HDF5Container.read_scalar`` name the target type as a
string, e.g. ``"uint32"``.
"""
