# -*- coding: utf-8 -*-
"""
ReaderPET.regions
=================

Purpose-specific extraction of the large payloads of an RDF file.

Every read goes through two steps:

1. ``initialise_<purpose>()`` checks that the file is of the right kind,
   resolves the dataset path and records its extent in a
   :class:`RegionDescriptor`, which is returned to the caller.
2. ``read_<purpose>(container, region, ...)`` reads the full extent of that
   region into a temporary array and copies it into logical axis order.

On-disk vs. logical layout
--------------------------
GE stores the tangential axis (the last on-disk axis) in reversed order, so
every read reverses the last axis::

    logical[..., j] = raw[..., N - 1 - j]

Sinogram views are additionally transposed from the on-disk
``(NX, NY, NZ)`` to the logical ``(NZ, NY, NX)``.

Only the full-extent selection is supported: offsets must be 0 and strides
1, anything else raises :class:`UnsupportedSelectionError`.
"""

from __future__ import annotations

import numpy as np
from tqdm import tqdm

from . import constants as C
from .dtypes import REGION_DTYPE_MAP
from .errors import EmptyDatasetError, RegionError, UnsupportedEncodingError
from .errors import UnsupportedSelectionError, WrongFileKindError

MAX_DATASET_DIMS = 3


class RegionDescriptor:
    """
    Selection of one payload dataset.

    Attributes
    ----------
    kind : str
        ``"list"``, ``"singles"``, ``"sino"``, ``"geo"`` or ``"norm"``.
    path : str
        Dataset path. For singles, the path of sample 1.
    base_path : str
        Path without the view/slice/sample number.
    dims : tuple[int, int, int]
        Selected extent ``(NX_SUB, NY_SUB, NZ_SUB)``; NZ_SUB is 1 for 2-D
        datasets.
    rank : int
        Rank of the on-disk dataset.
    index : int or None
        View or slice number the region was initialised for.
    num_samples : int or None
        Number of valid singles samples (list and singles regions).
    list_size : int or None
        Element count of the list-mode payload's first dimension.
    size_of_record_signature, max_size_of_record : int or None
        Vendor list-mode record constants.
    dtype : numpy.dtype
        Type the region is read into; ``REGION_DTYPE_MAP[kind]`` unless
        given.
    """
    def __init__(self, kind, path, dims, rank, base_path=None,
                 index=None, num_samples=None, list_size=None,
                 size_of_record_signature=None, max_size_of_record=None,
                 dtype=None):
        self.kind = kind
        self.path = path
        self.base_path = base_path if base_path is not None else path
        self.dims = tuple(int(d) for d in dims)
        self.rank = int(rank)
        if dtype is None:
            dtype = REGION_DTYPE_MAP[kind]
        self.dtype = np.dtype(dtype)
        self.index = index
        self.num_samples = num_samples
        self.list_size = list_size
        self.size_of_record_signature = size_of_record_signature
        self.max_size_of_record = max_size_of_record

    @property
    def shape(self):
        """Extent of the selection with the on-disk rank."""
        return self.dims[:self.rank] if self.rank < 3 else self.dims

    def __repr__(self):
        return (f"RegionDescriptor(kind={self.kind!r}, path={self.path!r}, "
                f"dims={self.dims})")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _layout(classification):
    return C.get_layout(classification.format_version)


def _dims(shape, path):
    rank = len(shape)
    if rank == 0 or rank > MAX_DATASET_DIMS:
        raise ValueError(
            f"Dataset dimensions ({rank}) of {path} outside 1 to "
            f"{MAX_DATASET_DIMS}. This is unexpected.")
    nx = shape[0]
    ny = shape[1] if rank > 1 else 1
    nz = shape[2] if rank > 2 else 1
    return (nx, ny, nz), rank


def _num_valid_samples(container, layout):
    n = int(container.read_scalar(layout["num_valid_samples"], "uint32"))
    if n == 0:
        raise EmptyDatasetError(
            "Zero number of valid singles samples in data.")
    return n


def _require_region(region, kind):
    if region is None:
        raise WrongFileKindError(
            f"No region initialised; call initialise for '{kind}' first.")
    if region.kind != kind:
        raise WrongFileKindError(
            f"Region was initialised for '{region.kind}' data, "
            f"not '{kind}'.")


def check_selection(offset, stride, rank):
    """
    Accept only the canonical selection: all offsets 0, all strides 1.

    ``None`` means canonical.
    """
    offset = (0,) * rank if offset is None else tuple(offset)
    stride = (1,) * rank if stride is None else tuple(stride)

    if len(offset) != rank or any(o != 0 for o in offset):
        raise UnsupportedSelectionError(
            f"Only {(0,) * rank} offset supported, got {offset}.")
    if len(stride) != rank or any(s != 1 for s in stride):
        raise UnsupportedSelectionError(
            f"Only {(1,) * rank} stride supported, got {stride}.")


def flip_tangential(raw):
    """Reverse the last axis: ``out[..., j] = raw[..., N - 1 - j]``."""
    return np.ascontiguousarray(raw[..., ::-1])


# -----------------------------------------------------------------------------
# List mode
# -----------------------------------------------------------------------------

def initialise_listmode(container, classification):
    """
    Prepare reading of the list-mode byte stream.

    Returns
    -------
    RegionDescriptor or None
        None when the RDF revision has no list-mode layout.
    """
    if not classification.is_list:
        raise WrongFileKindError("The file provided is not listmode.")

    L = _layout(classification)
    if L is None:
        return None

    num_samples = _num_valid_samples(container, L)
    path = L["list_data"]
    dims, rank = _dims(container.shape(path), path)

    return RegionDescriptor(
        "list", path, dims, rank,
        num_samples=num_samples,
        list_size=dims[0],
        size_of_record_signature=L["size_of_record_signature"],
        max_size_of_record=L["max_size_of_record"])


def read_list_data(container, region, buffer, byte_offset, byte_count):
    """
    Copy a byte range of the list-mode stream.

    No record is interpreted here.

    Parameters
    ----------
    container : HDF5Container
    region : RegionDescriptor
        From :func:`initialise_listmode`.
    buffer : writable buffer or None
        Destination (``bytearray``, ``numpy`` array, ``memoryview``) of at
        least ``byte_count`` bytes. If None a new array is returned.
    byte_offset : int
        First byte to read.
    byte_count : int
        Number of bytes to read.

    Returns
    -------
    numpy.ndarray
        uint8 view of the bytes read (into ``buffer`` if given).
    """
    _require_region(region, "list")

    byte_offset = int(byte_offset)
    byte_count = int(byte_count)
    if byte_offset < 0 or byte_count < 0 or \
            byte_offset + byte_count > region.list_size:
        raise RegionError(
            f"Byte range [{byte_offset}, {byte_offset + byte_count}) "
            f"outside list data of {region.list_size} bytes.")

    data = container.read_subarray(region.path, (byte_offset,),
                                   (byte_count,), region.dtype)
    if buffer is None:
        return data

    out = np.frombuffer(buffer, dtype=np.uint8) \
        if not isinstance(buffer, np.ndarray) else buffer.view(np.uint8)
    out = out.reshape(-1)
    if out.size < byte_count:
        raise ValueError(
            f"Buffer of {out.size} bytes too small for {byte_count} bytes.")
    out[:byte_count] = data
    return out[:byte_count]


def iter_list_chunks(container, region, chunk_bytes=16 * 1024 * 1024,
                     progress=True):
    """
    Stream the whole list-mode payload in chunks.

    Chunk boundaries are byte-based and may split records.

    Yields
    ------
    (byte_offset, numpy.ndarray)
    """
    _require_region(region, "list")
    chunk_bytes = max(1, int(chunk_bytes))
    total = region.list_size

    steps = (total + chunk_bytes - 1) // chunk_bytes
    for start in tqdm(range(0, total, chunk_bytes), total=steps,
                      desc="Reading list data", unit="chunk",
                      leave=False, disable=not progress):
        count = min(chunk_bytes, total - start)
        yield start, read_list_data(container, region, None, start, count)


# -----------------------------------------------------------------------------
# Singles
# -----------------------------------------------------------------------------

def initialise_singles(container, classification):
    """
    Prepare reading of the per-sample crystal singles.

    Returns
    -------
    RegionDescriptor or None
    """
    if not (classification.is_list or classification.is_sino):
        raise WrongFileKindError(
            "The file provided is not listmode or sinogram data.")

    L = _layout(classification)
    if L is None:
        return None

    base = L["singles_sample"]
    path = base + "1"
    dims, rank = _dims(container.shape(path), path)
    num_samples = _num_valid_samples(container, L)

    return RegionDescriptor("singles", path, dims, rank, base_path=base,
                            num_samples=num_samples)


def read_singles(container, region, sample):
    """
    Read singles sample number ``sample`` (1-based).

    Returns
    -------
    numpy.ndarray
        uint32 array with the on-disk extent and the last axis reversed.
    """
    _require_region(region, "singles")

    sample = int(sample)
    if sample < 1 or sample > region.num_samples:
        raise RegionError(
            f"Singles sample {sample} is incorrect, valid samples are "
            f"1 to {region.num_samples}.")

    path = region.base_path + str(sample)
    shape = container.shape(path)
    if shape != region.shape:
        raise ValueError(
            f"Singles sample {sample} has extent {shape}, expected "
            f"{region.shape}.")

    raw = container.read_subarray(path, (0,) * region.rank, region.shape,
                                  region.dtype)
    return flip_tangential(raw)


# -----------------------------------------------------------------------------
# Sinograms
# -----------------------------------------------------------------------------

def initialise_sinogram(container, classification, view, num_views):
    """
    Prepare reading of one sinogram view.

    Parameters
    ----------
    view : int
        View number, 1-based.
    num_views : int
        Number of views of the projection geometry.

    Returns
    -------
    RegionDescriptor or None
    """
    if not classification.is_sino:
        raise WrongFileKindError("The file provided is not sinogram data.")

    L = _layout(classification)
    if L is None:
        return None

    compressed = container.read_scalar(L["sino_compressed"], "uint32")
    if compressed:
        raise UnsupportedEncodingError(
            "The RDF9 sinogram is compressed, it cannot be read. "
            "Please uncompress it and retry.")

    view = int(view)
    if view < 1 or view > num_views:
        raise RegionError(
            f"View number {view} is incorrect, valid views are "
            f"1 to {num_views}.")

    num_tof_bins = int(container.read_scalar(L["num_tof_bins"], "uint32"))
    base = L["sino_tof_view"] if num_tof_bins > 1 else L["sino_view"]
    path = base + str(view)
    dims, rank = _dims(container.shape(path), path)

    return RegionDescriptor("sino", path, dims, rank, base_path=base,
                            index=view)


def read_sinogram(container, region, offset=(0, 0, 0), stride=(1, 1, 1)):
    """
    Read the sinogram view of ``region``.

    Returns
    -------
    numpy.ndarray
        uint8 array of shape ``(NZ, NY, NX)``, the on-disk last axis
        reversed before the transpose.
    """
    _require_region(region, "sino")
    check_selection(offset, stride, 3)

    raw = container.read_subarray(region.path, (0,) * region.rank,
                                  region.shape, region.dtype)
    raw = flip_tangential(raw).reshape(region.dims)
    return np.ascontiguousarray(raw.transpose(2, 1, 0))


def read_all_sinogram_views(container, classification, num_views,
                            progress=True):
    """
    Read every view, stacked along a leading view axis.

    Returns
    -------
    numpy.ndarray
        Shape ``(num_views, NZ, NY, NX)``.
    """
    views = []
    for view in tqdm(range(1, num_views + 1), desc="Reading views",
                     unit="view", leave=False, disable=not progress):
        region = initialise_sinogram(container, classification, view,
                                     num_views)
        views.append(read_sinogram(container, region))
    return np.stack(views)


# -----------------------------------------------------------------------------
# Geometric and efficiency factors
# -----------------------------------------------------------------------------

def initialise_geo_factors(container, classification, slice_num):
    """
    Prepare reading of geometric correction slice ``slice_num`` (1-based).

    Returns
    -------
    RegionDescriptor or None
    """
    if not classification.is_geo:
        raise WrongFileKindError("The file provided is not geometry data.")

    slice_num = int(slice_num)
    if slice_num < 1:
        raise RegionError(f"Slice number {slice_num} is incorrect.")

    L = _layout(classification)
    if L is None:
        return None

    base = L["geo_slice"]
    path = base + str(slice_num)
    if not container.exists(path):
        raise RegionError(f"Slice number {slice_num} not in file ({path}).")
    dims, rank = _dims(container.shape(path), path)

    return RegionDescriptor("geo", path, dims, rank, base_path=base,
                            index=slice_num)


def read_geometric_factors(container, region, offset=None, stride=None):
    """
    Read the geometric correction slice of ``region``.

    Returns
    -------
    numpy.ndarray
        uint32 array with the on-disk extent and the last axis reversed.
    """
    _require_region(region, "geo")
    check_selection(offset, stride, len(region.shape))

    raw = container.read_subarray(region.path, (0,) * region.rank,
                                  region.shape, region.dtype)
    return flip_tangential(raw)


def count_geo_slices(container, classification):
    """Number of consecutive ``slice<N>`` datasets, starting at 1."""
    base = _layout(classification)["geo_slice"]
    n = 0
    while container.exists(base + str(n + 1)):
        n += 1
    return n


def read_all_geometric_factors(container, classification, progress=True):
    """
    Read every geometric correction slice, stacked along a leading axis.
    """
    num_slices = count_geo_slices(container, classification)
    slices = []
    for slice_num in tqdm(range(1, num_slices + 1), desc="Reading slices",
                          unit="slice", leave=False, disable=not progress):
        region = initialise_geo_factors(container, classification, slice_num)
        slices.append(read_geometric_factors(container, region))
    return np.stack(slices)


def initialise_efficiency_factors(container, classification):
    """
    Prepare reading of the crystal efficiency factors.

    The second dimension of the on-disk dataset is twice the number of
    detectors per ring; only the first half is selected.

    Returns
    -------
    RegionDescriptor or None
    """
    if not classification.is_norm:
        raise WrongFileKindError("The file provided is not norm data.")

    L = _layout(classification)
    if L is None:
        return None

    path = L["efficiency"]
    (nx, ny, nz), rank = _dims(container.shape(path), path)
    if rank < 2:
        raise ValueError(f"Efficiency dataset {path} must be at least 2-D.")

    # TODO: confirm with vendor documentation why the on-disk extent is
    # doubled; only the first half has been checked against scanner data.
    ny = ny // 2

    return RegionDescriptor("norm", path, (nx, ny, nz), rank)


def read_efficiency_factors(container, region, offset=None, stride=None):
    """
    Read the crystal efficiency factors of ``region``.

    Returns
    -------
    numpy.ndarray
        float32 array of shape ``(NX, NY // 2[, NZ])`` with the last axis
        reversed.
    """
    _require_region(region, "norm")
    check_selection(offset, stride, len(region.shape))

    raw = container.read_subarray(region.path, (0,) * region.rank,
                                  region.shape, region.dtype)
    return flip_tangential(raw)
