# -*- coding: utf-8 -*-
"""
ReaderPET.geometry
==================

Scanner geometry resolution and the derived projection geometry.

:func:`resolve_scanner` starts from the catalog entry named in the file and
fills it with the geometry and timing stored in the RDF header. Where the
catalog and the file disagree by more than a tolerance, the file wins and a
warning is emitted. :func:`build_projection_geometry` turns the resolved
scanner into the sinogram layout consumers work with.
"""

from __future__ import annotations

import math

from . import constants as C
from .config import ReaderConfig


def _warn(messages, msg, verbose):
    messages.append(msg)
    if verbose:
        print(f"[WARNING] {msg}")


def reconcile(catalog_value, measured_value, tolerance=0.1):
    """
    Pick between a catalog value and a value measured in the file.

    Parameters
    ----------
    catalog_value, measured_value : float
    tolerance : float, default 0.1

    Returns
    -------
    (resolved, overridden) : (float, bool)
        ``(measured_value, True)`` if the values differ by more than
        ``tolerance``, otherwise ``(catalog_value, False)``.
    """
    if abs(catalog_value - measured_value) > tolerance:
        return measured_value, True
    return catalog_value, False


# -----------------------------------------------------------------------------
# Scanner
# -----------------------------------------------------------------------------

def read_scanner_fields(container, classification, layout=None):
    """
    Read the raw geometry and timing fields of the RDF header.

    Returns
    -------
    dict
        Field values as stored (tilt in degrees, timing precision in ns),
        plus the derived ``num_tof_bins``. ``max_num_non_arccorrected_bins``
        is None for list-mode files.
    """
    L = layout or C.get_layout(classification.format_version)
    u32 = lambda key: int(container.read_scalar(L[key], "uint32"))
    i32 = lambda key: int(container.read_scalar(L[key], "int32"))
    f32 = lambda key: float(container.read_scalar(L[key], "float32"))

    fields = {
        "scanner_name": container.read_string(L["scanner_name"]),
        "effective_ring_diameter": f32("effective_ring_diameter"),
        "num_axial_blocks_per_bucket": u32("axial_blocks_per_module"),
        "num_transaxial_blocks_per_bucket": u32("radial_blocks_per_module"),
        "axial_blocks_per_unit": u32("axial_blocks_per_unit"),
        "radial_blocks_per_unit": u32("radial_blocks_per_unit"),
        "axial_units_per_module": u32("axial_units_per_module"),
        "radial_units_per_module": u32("radial_units_per_module"),
        "axial_modules_per_system": u32("axial_modules_per_system"),
        "radial_modules_per_system": u32("radial_modules_per_system"),
        "detector_axial_size": f32("detector_axial_size"),
        "intrinsic_tilt": f32("intrinsic_tilt"),
        "num_axial_crystals_per_block": u32("axial_crystals_per_block"),
        "num_transaxial_crystals_per_block": u32("radial_crystals_per_block"),
        "timing_resolution": f32("timing_resolution"),
        "pos_coincidence_window": i32("pos_coincidence_window"),
        "neg_coincidence_window": i32("neg_coincidence_window"),
        "coinc_timing_precision": f32("coinc_timing_precision"),
        "max_num_non_arccorrected_bins": None,
    }

    if not classification.is_list:
        key = "max_bins_sino" if classification.is_sino else "max_bins_other"
        fields["max_num_non_arccorrected_bins"] = u32(key)

    fields["num_tof_bins"] = (fields["pos_coincidence_window"]
                              + fields["neg_coincidence_window"] + 1)
    return fields


def resolve_scanner(container, classification, catalog, config=None):
    """
    Build the scanner model of an RDF file.

    Parameters
    ----------
    container : HDF5Container
        Open, classified container.
    classification : Classification
    catalog : ScannerCatalog
    config : ReaderConfig or None
        Tolerance, default DOI and verbosity.

    Returns
    -------
    scanner : Scanner
        Catalog entry updated with the file geometry.
    warnings : list of str
        Messages for every override and every unset field.

    Raises
    ------
    UnknownScannerError
        The scanner name is not in the catalog.
    """
    config = config or ReaderConfig()
    tol = config.tolerance
    messages = []
    warn = lambda msg: _warn(messages, msg, config.verbose)

    f = read_scanner_fields(container, classification)
    scanner = catalog.get_scanner(f["scanner_name"])

    # Ring and crystal layout
    num_rings = (f["num_axial_blocks_per_bucket"]
                 * f["num_axial_crystals_per_block"]
                 * f["axial_modules_per_system"])
    num_detectors_per_ring = (f["num_transaxial_blocks_per_bucket"]
                              * f["num_transaxial_crystals_per_block"]
                              * f["radial_modules_per_system"])
    if num_rings <= 0 or num_detectors_per_ring <= 0:
        raise ValueError(
            f"Invalid detector layout in file: {num_rings} rings, "
            f"{num_detectors_per_ring} detectors per ring.")

    scanner.num_rings = num_rings
    scanner.num_detectors_per_ring = num_detectors_per_ring
    scanner.ring_spacing = f["detector_axial_size"] / num_rings
    scanner.intrinsic_tilt = math.radians(f["intrinsic_tilt"])
    scanner.num_axial_blocks_per_bucket = f["num_axial_blocks_per_bucket"]
    scanner.num_transaxial_blocks_per_bucket = \
        f["num_transaxial_blocks_per_bucket"]
    scanner.num_axial_crystals_per_block = f["num_axial_crystals_per_block"]
    scanner.num_transaxial_crystals_per_block = \
        f["num_transaxial_crystals_per_block"]
    scanner.num_detector_layers = 1
    scanner.reference_energy = C.REFERENCE_ENERGY_KEV
    if f["max_num_non_arccorrected_bins"] is not None:
        scanner.max_num_non_arccorrected_bins = \
            f["max_num_non_arccorrected_bins"]

    # Ring radius
    radius = f["effective_ring_diameter"] / 2
    _, overridden = reconcile(scanner.effective_ring_radius, radius, tol)
    if overridden:
        warn(f"default effective ring radius is "
             f"{scanner.effective_ring_radius:.4f}, while RDF says "
             f"{radius:.4f}. Will adjust scanner info to fit with the RDF "
             f"file using default average DOI of {config.default_doi} mm")
        scanner.inner_ring_radius = radius - config.default_doi
        scanner.average_depth_of_interaction = config.default_doi

    # Timing resolution, zero means the field was not filled in
    timing = f["timing_resolution"]
    if timing > 0:
        resolved, overridden = reconcile(scanner.timing_resolution,
                                         timing, tol)
        if overridden:
            warn(f"default timing resolution is "
                 f"{scanner.timing_resolution}, while RDF says {timing}. "
                 f"Will adjust scanner info to fit with the RDF file")
            scanner.timing_resolution = resolved

    # TOF bin width and count
    tof_width = f["coinc_timing_precision"] * C.PS_PER_NS
    resolved, overridden = reconcile(scanner.size_of_timing_pos,
                                     tof_width, tol)
    if overridden:
        warn(f"default size of (unmashed) TOF bins is "
             f"{scanner.size_of_timing_pos}, while RDF says {tof_width}. "
             f"Will adjust scanner info to fit with the RDF file")
        scanner.size_of_timing_pos = resolved

    num_tof_bins = f["num_tof_bins"]
    if scanner.max_num_timing_poss != num_tof_bins:
        warn(f"default number of (unmashed) TOF bins is "
             f"{scanner.max_num_timing_poss}, while RDF says "
             f"{num_tof_bins}. Will adjust scanner info to fit with the RDF "
             f"file")
        scanner.max_num_timing_poss = num_tof_bins

    # Fields later stages need but the file does not carry
    if scanner.default_bin_size <= 0:
        warn("default bin-size is not set. This will create trouble for "
             "FBP etc")
    if scanner.default_num_arccorrected_bins <= 0:
        warn("default num_arccorrected bins is not set. This will create "
             "trouble for FBP etc")
    if scanner.energy_resolution <= 0:
        warn("energy resolution is not set. This will create trouble for "
             "scatter estimation")

    return scanner, messages


# -----------------------------------------------------------------------------
# Projection geometry
# -----------------------------------------------------------------------------

class ProjectionGeometry:
    """
    Sinogram layout of an RDF acquisition. Read-only once built.

    Attributes
    ----------
    scanner : Scanner
    span : int
    max_ring_difference : int
    num_views : int
    num_tangential_poss : int
    arc_corrected : bool
    num_tof_bins : int
        Number of TOF bins data are read with (1 means non-TOF).
    bed_position_horizontal, bed_position_vertical : float
        Bed offsets in mm.
    """
    _FIELDS = ("scanner", "span", "max_ring_difference", "num_views",
               "num_tangential_poss", "arc_corrected", "num_tof_bins",
               "bed_position_horizontal", "bed_position_vertical")

    def __init__(self, scanner, span, max_ring_difference, num_views,
                 num_tangential_poss, arc_corrected=False, num_tof_bins=1,
                 bed_position_horizontal=0.0, bed_position_vertical=0.0):
        values = dict(
            scanner=scanner,
            span=int(span),
            max_ring_difference=int(max_ring_difference),
            num_views=int(num_views),
            num_tangential_poss=int(num_tangential_poss),
            arc_corrected=bool(arc_corrected),
            num_tof_bins=int(num_tof_bins),
            bed_position_horizontal=float(bed_position_horizontal),
            bed_position_vertical=float(bed_position_vertical),
        )
        for key, value in values.items():
            object.__setattr__(self, key, value)

    def __setattr__(self, key, value):
        raise AttributeError("ProjectionGeometry is read-only.")

    def __delattr__(self, key):
        raise AttributeError("ProjectionGeometry is read-only.")

    @property
    def is_tof(self):
        return self.num_tof_bins > 1

    def to_dict(self):
        d = {key: getattr(self, key) for key in self._FIELDS}
        d["scanner"] = self.scanner.name
        return d

    def __repr__(self):
        return (f"ProjectionGeometry(views={self.num_views}, "
                f"tangential={self.num_tangential_poss}, "
                f"max_ring_difference={self.max_ring_difference}, "
                f"tof_bins={self.num_tof_bins})")


def build_projection_geometry(container, scanner, classification,
                              verbose=1):
    """
    Derive the projection geometry from a resolved scanner.

    The layout policy is fixed for RDF data: span 2, all ring differences,
    half the detectors per ring as views, the maximum number of
    non-arc-corrected bins as tangential positions, not arc-corrected.
    Only list-mode data keep TOF; sinograms are read as non-TOF.

    Returns
    -------
    geometry : ProjectionGeometry
    warnings : list of str
    """
    L = C.get_layout(classification.format_version)
    messages = []

    num_tof_bins = int(container.read_scalar(L["num_tof_bins"], "uint32"))
    if num_tof_bins > 1:
        _warn(messages, "GE RDF data currently still read as non-TOF",
              verbose)

    horizontal = int(container.read_scalar(L["bed_horizontal"], "int32"))
    vertical = int(container.read_scalar(L["bed_vertical"], "int32"))

    geometry = ProjectionGeometry(
        scanner=scanner,
        span=C.SPAN,
        max_ring_difference=scanner.num_rings - 1,
        num_views=scanner.num_detectors_per_ring // 2,
        num_tangential_poss=scanner.max_num_non_arccorrected_bins,
        arc_corrected=C.ARC_CORRECTED,
        num_tof_bins=(scanner.max_num_timing_poss
                      if classification.is_list else 1),
        bed_position_horizontal=horizontal / C.TENTHS_MM_PER_MM,
        bed_position_vertical=vertical / C.TENTHS_MM_PER_MM,
    )
    return geometry, messages
