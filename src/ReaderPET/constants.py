# -*- coding: utf-8 -*-
"""
ReaderPET.constants
===================

Fixed vendor knowledge about the GE RDF (Raw Data File) HDF5 layout.

Dataset paths, literals and record sizes are grouped per RDF major revision
in :data:`RDF_LAYOUTS`. Only revision 9 is supported; the dict is the place
where another revision's layout would be added.
"""

# -----------------------------------------------------------------------------
# Vendor identity and revisions
# -----------------------------------------------------------------------------

MANUFACTURER = "GE MEDICAL SYSTEMS"
MANUFACTURER_PATH = "/HeaderData/ExamData/manufacturer"
VERSION_PATH = "/HeaderData/RDFConfiguration/fileVersion/majorVersion"

SUPPORTED_VERSIONS = (9,)

# -----------------------------------------------------------------------------
# RDF9 layout
# -----------------------------------------------------------------------------

RDF9 = {
    # classification probes
    "is_list_file": "/HeaderData/RDFConfiguration/isListFile",
    "is_list_compressed": "/HeaderData/ListHeader/isListCompressed",
    "sino_group": "/SegmentData/Segment2",
    "norm_group": "/3DCrystalEfficiency/crystalEfficiency",
    "geo_group": "/SegmentData/Segment4/3D_Norm_Correction/slice1",
    "geo_dimension": "/HeaderData/Sorter/Segment4/dimension3Size",

    # scanner geometry
    "scanner_name": "/HeaderData/ExamData/scannerDesc",
    "effective_ring_diameter":
        "/HeaderData/SystemGeometry/effectiveRingDiameter",
    "axial_blocks_per_module":
        "/HeaderData/SystemGeometry/axialBlocksPerModule",
    "radial_blocks_per_module":
        "/HeaderData/SystemGeometry/radialBlocksPerModule",
    "axial_blocks_per_unit": "/HeaderData/SystemGeometry/axialBlocksPerUnit",
    "radial_blocks_per_unit":
        "/HeaderData/SystemGeometry/radialBlocksPerUnit",
    "axial_units_per_module":
        "/HeaderData/SystemGeometry/axialUnitsPerModule",
    "radial_units_per_module":
        "/HeaderData/SystemGeometry/radialUnitsPerModule",
    "axial_modules_per_system":
        "/HeaderData/SystemGeometry/axialModulesPerSystem",
    "radial_modules_per_system":
        "/HeaderData/SystemGeometry/radialModulesPerSystem",
    "detector_axial_size": "/HeaderData/SystemGeometry/detectorAxialSize",
    "intrinsic_tilt":
        "/HeaderData/SystemGeometry/transaxial_crystal_0_offset",
    "axial_crystals_per_block":
        "/HeaderData/SystemGeometry/axialCrystalsPerBlock",
    "radial_crystals_per_block":
        "/HeaderData/SystemGeometry/radialCrystalsPerBlock",
    # RDF9 stores the sinogram bin count under dimension2Size
    # instead of dimension1Size. Other file kinds use dimension1Size.
    "max_bins_sino": "/HeaderData/Sorter/dimension2Size",
    "max_bins_other": "/HeaderData/Sorter/dimension1Size",

    # TOF
    "timing_resolution": "/HeaderData/SystemGeometry/timingResolutionInPico",
    "pos_coincidence_window":
        "/HeaderData/AcqParameters/EDCATParameters/posCoincidenceWindow",
    "neg_coincidence_window":
        "/HeaderData/AcqParameters/EDCATParameters/negCoincidenceWindow",
    "coinc_timing_precision":
        "/HeaderData/AcqParameters/EDCATParameters/coincTimingPrecision",
    "num_tof_bins": "/HeaderData/Sorter/numTOF_bins",

    # bed
    "bed_horizontal":
        "/HeaderData/AcqParameters/LandmarkParameters/absTableLongitude",
    "bed_vertical":
        "/HeaderData/AcqParameters/LandmarkParameters/tableElevation",

    # exam
    "patient_entry":
        "/HeaderData/AcqParameters/LandmarkParameters/patientEntry",
    "patient_position":
        "/HeaderData/AcqParameters/LandmarkParameters/patientPosition",
    "lower_energy_limit":
        "/HeaderData/AcqParameters/EDCATParameters/lower_energy_limit",
    "upper_energy_limit":
        "/HeaderData/AcqParameters/EDCATParameters/upper_energy_limit",
    "scan_start_time": "/HeaderData/AcqStats/scanStartTime",
    "frame_start_time": "/HeaderData/AcqStats/frameStartTime",
    "frame_duration": "/HeaderData/AcqStats/frameDuration",
    "radionuclide_name": "/HeaderData/ExamData/radionuclideName",
    "positron_fraction": "/HeaderData/ExamData/positronFraction",
    "half_life": "/HeaderData/ExamData/halfLife",

    # payloads
    "list_data": "/ListData/listData",
    "num_valid_samples": "/HeaderData/SinglesHeader/numValidSamples",
    "singles_sample": "/Singles/CrystalSingles/sample",
    "sino_compressed": "/HeaderData/Sorter/Segment2/compDataSegSize",
    "sino_view": "/SegmentData/Segment2/3D_Sinogram/view",
    "sino_tof_view": "/SegmentData/Segment2/3D_TOF_Sinogram/view",
    "geo_slice": "/SegmentData/Segment4/3D_Norm_Correction/slice",
    "efficiency": "/3DCrystalEfficiency/crystalEfficiency",

    # list-mode records, documented by the vendor, not stored in the file
    "size_of_record_signature": 6,
    "max_size_of_record": 16,

    # the list-mode payload must be checked for compression
    "check_list_compression": True,
}

RDF_LAYOUTS = {9: RDF9}

# -----------------------------------------------------------------------------
# Patient position codes (LandmarkParameters)
# -----------------------------------------------------------------------------

ACQ_HEAD_FIRST = 0
ACQ_FEET_FIRST = 1

ACQ_SUPINE = 0
ACQ_PRONE = 1
ACQ_LEFT_DECUB = 2
ACQ_RIGHT_DECUB = 3

# -----------------------------------------------------------------------------
# Units and fixed values
# -----------------------------------------------------------------------------

TENTHS_MM_PER_MM = 10.0
MS_PER_S = 1000.0
# coincTimingPrecision is stored in ns, the scanner model keeps ps
PS_PER_NS = 1000.0
REFERENCE_ENERGY_KEV = 511.0

# projection-geometry policy for RDF9 data
SPAN = 2
ARC_CORRECTED = False


def get_layout(version):
    """
    Return the path/constant table for an RDF major revision.

    Parameters
    ----------
    version : int
        RDF major revision as read from the file.

    Returns
    -------
    dict or None
        Layout table, or None when the revision has no known layout.
    """
    return RDF_LAYOUTS.get(int(version))
