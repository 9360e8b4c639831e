# -*- coding: utf-8 -*-
"""
ReaderPET.container
===================

Read-only access to one HDF5 container.

:class:`HDF5Container` is a thin layer over :class:`h5py.File` that turns
h5py lookups into typed reads and maps failures onto the ReaderPET error
hierarchy. It never writes and never retries.
"""

from __future__ import annotations

import os

import h5py
import numpy as np

from .dtypes import DTYPE_MAP
from .errors import DatasetTypeError, FormatError, NotAContainerError
from .errors import NotFoundError


class HDF5Container:
    """
    Owns one read-only HDF5 session.

    Parameters
    ----------
    path : str or None
        File to open immediately. If None, call :meth:`open` later.

    Attributes
    ----------
    path : str or None
        Path of the currently open file.
    state : str
        ``"unopened"``, ``"opened"`` or ``"closed"``.
    """
    def __init__(self, path=None):
        self.path = None
        self.state = "unopened"
        self._file = None

        if path is not None:
            self.open(path)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def open(self, path):
        """
        Open ``path`` read-only, closing any previously open file.

        Raises
        ------
        FileNotFoundError
            The path does not exist.
        NotAContainerError
            The file exists but is not HDF5.
        FormatError
            h5py could not open the file.
        """
        self.close()

        path = os.fspath(path)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"File not found: {path}")
        if not h5py.is_hdf5(path):
            raise NotAContainerError(f"The input file is not HDF5: {path}")

        try:
            self._file = h5py.File(path, "r")
        except OSError as e:
            raise FormatError(f"Could not open HDF5 file {path}: {e}") from e

        self.path = path
        self.state = "opened"
        return self

    def close(self):
        """Close the session if one is open."""
        if self._file is not None:
            self._file.close()
            self._file = None
            self.state = "closed"

    @property
    def is_open(self):
        return self._file is not None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return f"HDF5Container(path={self.path!r}, state={self.state!r})"

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def file(self):
        if self._file is None:
            raise FormatError("File is not open.")
        return self._file

    def exists(self, path):
        """
        Existence-only probe of a group or dataset link.

        Intermediate groups that are missing make the probe False rather
        than raising.
        """
        f = self.file
        parts = [p for p in path.split("/") if p]
        node = f
        for part in parts:
            if not isinstance(node, h5py.Group) or part not in node:
                return False
            node = node[part]
        return True

    def dataset(self, path):
        """
        Return the :class:`h5py.Dataset` at ``path``.

        Raises
        ------
        NotFoundError
            Nothing exists at ``path``.
        DatasetTypeError
            ``path`` names a group, not a dataset.
        """
        if not self.exists(path):
            raise NotFoundError(f"Dataset not found: {path}")
        obj = self.file[path]
        if not isinstance(obj, h5py.Dataset):
            raise DatasetTypeError(f"{path} is a group, not a dataset.")
        return obj

    def shape(self, path):
        """Extent of the dataset at ``path`` as a tuple."""
        return tuple(int(n) for n in self.dataset(path).shape)

    # -------------------------------------------------------------------------
    # Typed reads
    # -------------------------------------------------------------------------

    def read_scalar(self, path, dtype=np.uint32):
        """
        Read a single numeric value.

        Scalar datasets and one-element arrays are both accepted, as RDF
        files store header fields either way.

        Parameters
        ----------
        path : str
            Dataset path.
        dtype : numpy dtype or str
            Type the value is converted to (``"uint32"``, ``np.float32``...).

        Returns
        -------
        numpy scalar
        """
        dtype = np.dtype(DTYPE_MAP.get(dtype, dtype))
        ds = self.dataset(path)

        if ds.dtype.kind not in "biuf":
            raise DatasetTypeError(
                f"{path} holds {ds.dtype}, expected a numeric value.")
        if ds.size != 1:
            raise DatasetTypeError(
                f"{path} holds {ds.size} values, expected a scalar.")

        value = np.asarray(ds[()]).reshape(-1)[0]
        return dtype.type(value)

    def read_string(self, path):
        """
        Read a string dataset, decoded and stripped of trailing NULs.

        Both fixed-length and variable-length strings are accepted.
        """
        ds = self.dataset(path)
        kind = ds.dtype.kind
        if kind not in "SUO":
            raise DatasetTypeError(
                f"{path} holds {ds.dtype}, expected a string.")

        value = ds[()]
        if isinstance(value, np.ndarray):
            if value.size != 1:
                raise DatasetTypeError(
                    f"{path} holds {value.size} strings, expected one.")
            value = value.reshape(-1)[0]
        if isinstance(value, (bytes, np.bytes_)):
            value = bytes(value).decode("utf-8", errors="replace")
        if not isinstance(value, str):
            raise DatasetTypeError(f"{path} does not hold a string.")

        # C-string semantics: the value ends at the first NUL
        return value.split("\x00", 1)[0]

    def read_subarray(self, path, offset, count, dtype=None):
        """
        Read a rectangular hyperslab.

        Parameters
        ----------
        path : str
            Dataset path.
        offset : sequence of int
            Start index per dimension.
        count : sequence of int
            Number of elements per dimension.
        dtype : numpy dtype or None
            Output type; the on-disk type if None.

        Returns
        -------
        numpy.ndarray
            Array of shape ``count``.
        """
        ds = self.dataset(path)
        offset = tuple(int(o) for o in offset)
        count = tuple(int(c) for c in count)

        if len(offset) != ds.ndim or len(count) != ds.ndim:
            raise ValueError(
                f"Selection rank {len(offset)}/{len(count)} does not match "
                f"dataset rank {ds.ndim} of {path}.")
        for o, c, n in zip(offset, count, ds.shape):
            if o < 0 or c < 0 or o + c > n:
                raise ValueError(
                    f"Selection offset={offset} count={count} exceeds "
                    f"extent {ds.shape} of {path}.")

        sel = tuple(slice(o, o + c) for o, c in zip(offset, count))
        if dtype is None:
            return ds[sel]

        return np.asarray(ds[sel]).astype(dtype, copy=False)

    def read_dataset(self, path, dtype=None):
        """Read a whole dataset."""
        shape = self.shape(path)
        return self.read_subarray(path, (0,) * len(shape), shape, dtype)
