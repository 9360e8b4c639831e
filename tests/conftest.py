from __future__ import annotations

from pathlib import Path

import h5py
import numpy as np
import pytest

from ReaderPET import constants as C
from ReaderPET.config import ReaderConfig
from ReaderPET.radionuclides import RadionuclideDB
from ReaderPET.scanners import Scanner, ScannerCatalog


# Small scanner: 2 rings of 8 detectors, 4 views, 6 tangential bins
SMALL_GEOMETRY = {
    "scanner_name": "Test PET",
    "effective_ring_diameter": 210.0,
    "axial_blocks_per_module": 1,
    "radial_blocks_per_module": 2,
    "axial_blocks_per_unit": 1,
    "radial_blocks_per_unit": 1,
    "axial_units_per_module": 1,
    "radial_units_per_module": 1,
    "axial_modules_per_system": 1,
    "radial_modules_per_system": 2,
    "detector_axial_size": 8.0,
    "intrinsic_tilt": 0.0,
    "axial_crystals_per_block": 2,
    "radial_crystals_per_block": 2,
    "timing_resolution": 400.0,
    "pos_coincidence_window": 2,
    "neg_coincidence_window": 2,
    "coinc_timing_precision": 0.05,
}

# GE Signa PET/MR as stored by the scanner, matches the packaged catalog
SIGNA_GEOMETRY = {
    "scanner_name": "GE Signa PET/MR",
    "effective_ring_diameter": 642.4,
    "axial_blocks_per_module": 5,
    "radial_blocks_per_module": 4,
    "axial_blocks_per_unit": 1,
    "radial_blocks_per_unit": 1,
    "axial_units_per_module": 5,
    "radial_units_per_module": 4,
    "axial_modules_per_system": 1,
    "radial_modules_per_system": 28,
    "detector_axial_size": 249.75,
    "intrinsic_tilt": -5.23,
    "axial_crystals_per_block": 9,
    "radial_crystals_per_block": 4,
    "timing_resolution": 390.0,
    "pos_coincidence_window": 175,
    "neg_coincidence_window": 175,
    "coinc_timing_precision": 0.0089,
}

EXAM = {
    "patient_entry": 0,
    "patient_position": 0,
    "lower_energy_limit": 425,
    "upper_energy_limit": 650,
    "scan_start_time": 1_600_000_000,
    "frame_start_time": 1_600_000_010,
    "frame_duration": 60_500,
    "radionuclide_name": "F-18",
    "positron_fraction": 0.97,
    "half_life": 6586.2,
    "bed_horizontal": -12345,
    "bed_vertical": 250,
}

FLOAT_FIELDS = {
    "effective_ring_diameter", "detector_axial_size", "intrinsic_tilt",
    "timing_resolution", "coinc_timing_precision", "positron_fraction",
    "half_life",
}
INT_FIELDS = {
    "pos_coincidence_window", "neg_coincidence_window", "bed_horizontal",
    "bed_vertical",
}
STRING_FIELDS = {"scanner_name", "radionuclide_name"}

SINO_SHAPE = (3, 5, 7)
GEO_SHAPE = (4, 6)
EFF_SHAPE = (2, 16)
SINGLES_SHAPE = (3, 8)
LIST_BYTES = 1000


def small_scanner(**changes):
    fields = dict(
        num_rings=2,
        num_detectors_per_ring=8,
        inner_ring_radius=100.0,
        average_depth_of_interaction=5.0,
        ring_spacing=4.0,
        default_bin_size=2.0,
        num_axial_blocks_per_bucket=1,
        num_transaxial_blocks_per_bucket=2,
        num_axial_crystals_per_block=2,
        num_transaxial_crystals_per_block=2,
        max_num_non_arccorrected_bins=6,
        default_num_arccorrected_bins=6,
        energy_resolution=0.1,
        max_num_timing_poss=5,
        size_of_timing_pos=50.0,
        timing_resolution=400.0,
    )
    fields.update(changes)
    return Scanner("Test PET", **fields)


def _write(f, path, value):
    if path in f:
        del f[path]
    f.create_dataset(path, data=value)


def _header_value(key, value):
    if key in STRING_FIELDS:
        return np.bytes_(value)
    if key in FLOAT_FIELDS:
        return np.float32(value)
    if key in INT_FIELDS:
        return np.int32(value)
    return np.uint32(value)


def payload(shape, dtype, seed):
    rng = np.random.default_rng(seed)
    if np.dtype(dtype).kind == "f":
        return rng.random(shape).astype(dtype)
    return rng.integers(0, 200, size=shape).astype(dtype)


def write_rdf(path, kind="list", geometry=None, num_views=4, num_slices=3,
              num_samples=3, geo_dims=2, num_tof_bins=1,
              sino_shape=SINO_SHAPE, geo_shape=GEO_SHAPE,
              singles_shape=SINGLES_SHAPE, **overrides):
    """
    Write a synthetic RDF9 file of ``kind`` list/sino/geo/norm/none.

    ``overrides`` are keyed by the RDF9 layout keys (``is_list_compressed``,
    ``scanner_name``...) or ``manufacturer``/``version``; a value of None
    deletes the field.
    """
    geometry = dict(SMALL_GEOMETRY if geometry is None else geometry)
    L = C.RDF9

    header = {}
    header.update(geometry)
    header.update(EXAM)
    header["is_list_file"] = 1 if kind == "list" else 0
    header["num_tof_bins"] = num_tof_bins
    header["num_valid_samples"] = 1000 if kind == "list" else num_samples
    header["max_bins_sino"] = 6 if kind == "sino" else 13
    header["max_bins_other"] = 13 if kind == "sino" else 6
    if kind == "list":
        header["is_list_compressed"] = 0
    if kind == "sino":
        header["sino_compressed"] = 0
    if kind in ("geo", "norm"):
        header["geo_dimension"] = 5 if geo_dims == 3 else 1

    manufacturer = overrides.pop("manufacturer", C.MANUFACTURER)
    version = overrides.pop("version", 9)
    header.update(overrides)

    with h5py.File(path, "w") as f:
        if manufacturer is not None:
            _write(f, C.MANUFACTURER_PATH, np.bytes_(manufacturer))
        if version is not None:
            _write(f, C.VERSION_PATH, np.uint32(version))
        for key, value in header.items():
            if value is not None:
                _write(f, L[key], _header_value(key, value))

        if kind == "list":
            _write(f, L["list_data"],
                   (np.arange(LIST_BYTES) % 251).astype(np.uint8))
        if kind in ("list", "sino"):
            for n in range(1, num_samples + 1):
                _write(f, L["singles_sample"] + str(n),
                       payload(singles_shape, np.uint32, 100 + n))
        if kind == "sino":
            base = L["sino_tof_view"] if num_tof_bins > 1 else L["sino_view"]
            for v in range(1, num_views + 1):
                _write(f, base + str(v), payload(sino_shape, np.uint8, v))
        if kind in ("geo", "norm"):
            for s in range(1, num_slices + 1):
                _write(f, L["geo_slice"] + str(s),
                       payload(geo_shape, np.uint32, 50 + s))
        if kind == "norm":
            _write(f, L["efficiency"], payload(EFF_SHAPE, np.float32, 7))

    return Path(path)


@pytest.fixture
def rdf_file(tmp_path):
    counter = {"n": 0}

    def make(kind="list", **kwargs):
        counter["n"] += 1
        return write_rdf(tmp_path / f"rdf_{kind}_{counter['n']}.h5",
                         kind, **kwargs)

    return make


@pytest.fixture
def catalog():
    return ScannerCatalog([(small_scanner(), ["TPET"])])


@pytest.fixture
def config():
    return ReaderConfig(verbose=0)


@pytest.fixture
def radionuclide_db():
    return RadionuclideDB.default()


@pytest.fixture
def open_rdf(rdf_file, catalog, config, radionuclide_db):
    from ReaderPET import RDFWrapper

    opened = []

    def make(kind="list", **kwargs):
        rdf = RDFWrapper(rdf_file(kind, **kwargs), config=config,
                         catalog=catalog, radionuclide_db=radionuclide_db)
        opened.append(rdf)
        return rdf

    yield make
    for rdf in opened:
        rdf.close()
