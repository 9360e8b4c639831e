# -*- coding: utf-8 -*-
"""
Created on Wed Oct  7 14:21:09 2026

@author: p-sik
"""
from . import classifier as clf
from . import regions as reg
from .config import ReaderConfig
from .container import HDF5Container
from .errors import FormatError, WrongFileKindError
from .exam import build_exam_info
from .geometry import build_projection_geometry, resolve_scanner
from .radionuclides import RadionuclideDB
from .scanners import ScannerCatalog


class RDFWrapper:
    """
    Reader for one GE RDF (HDF5) raw-data file of a PET scanner.

    Opening a file validates the GE signature and RDF revision, classifies
    the file (list mode, sinogram, geometry or normalization), reads the exam
    metadata and resolves the scanner and projection geometry. Payloads are
    then read on demand through the ``initialise_*`` / ``read_*`` pairs.

    Parameters
    ----------
    filename : str or pathlib.Path or None
        File to open. If None, call :meth:`open` later.
    config : ReaderConfig or None
        Tolerance, default DOI, verbosity and catalog locations. Defaults
        to ``ReaderConfig()``.
    catalog : ScannerCatalog or None
        Scanner catalog. Loaded from ``config.scanner_catalog`` if None.
    radionuclide_db : RadionuclideDB or None
        Radionuclide table. Loaded from ``config.radionuclide_table`` if
        None.
    verbose : int or None
        Overrides ``config.verbose`` when given.
    print_header : bool, default False
        If True, pretty-prints the header summary after opening.

    Attributes
    ----------
    state : str
        ``"unopened"``, ``"opened"``, ``"classified"`` or ``"failed"``.
    classification : Classification or None
    scanner : Scanner or None
    exam_info : ExamInfo or None
    proj_data_info : ProjectionGeometry or None
    region : RegionDescriptor or None
        Region of the last ``initialise_*`` call; None if that call failed.
    warnings : list of str
        Soft failures collected while resolving the scanner/geometry.

    Notes
    -----
    One instance owns one open file and one current region. Do not share
    an instance between threads; separate instances are independent.
    """
    def __init__(self,
                 filename        = None,
                 config          = None,
                 catalog         = None,
                 radionuclide_db = None,
                 verbose         = None,
                 print_header    = False
                 ):

        ## Initialize input attributes ---------------------------------------
        self.config = config or ReaderConfig()
        self.verbose = self.config.verbose if verbose is None else verbose
        self.catalog = catalog
        self.radionuclide_db = radionuclide_db

        ## Session state ------------------------------------------------------
        self.container = HDF5Container()
        self.filename = None
        self.state = "unopened"
        self.classification = None
        self.scanner = None
        self.exam_info = None
        self.proj_data_info = None
        self.region = None
        self._num_singles_samples = 0
        self.warnings = []

        if filename is not None:
            self.open(filename)
            if print_header:
                self.print_header()

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def open(self, filename):
        """
        Open and fully initialise an RDF file.

        Any previously open file is closed first. On failure the instance is
        left closed in state ``"failed"`` and the error propagates.
        """
        self.close()

        try:
            if self.verbose:
                print(f"[INFO] Opening {filename} ...")
            self.container.open(filename)
            self.filename = self.container.path
            self.state = "opened"

            self.check_file()
            self.initialise_exam_info()
            self.initialise_proj_data_info()
        except Exception:
            self.container.close()
            self.state = "failed"
            raise

        if self.verbose:
            print(f"[INFO] {self.classification.kind} file, "
                  f"scanner {self.scanner.name}")
            print("[DONE]")
        return True

    def close(self):
        """Close the file and forget everything derived from it."""
        self.container.close()
        self.filename = None
        self.state = "unopened"
        self.classification = None
        self.scanner = None
        self.exam_info = None
        self.proj_data_info = None
        self.region = None
        self._num_singles_samples = 0
        self.warnings = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        kind = self.classification.kind if self.classification else None
        return (f"RDFWrapper(filename={self.filename!r}, state={self.state!r},"
                f" kind={kind!r})")

    def _require_open(self):
        if not self.container.is_open:
            raise FormatError("File is not open.")

    def _require_classified(self):
        self._require_open()
        if self.classification is None:
            raise FormatError("File has not been checked; call check_file().")

    # -------------------------------------------------------------------------
    # Signature and classification
    # -------------------------------------------------------------------------

    @staticmethod
    def check_GE_signature(filename):
        """True if ``filename`` is an HDF5 file carrying the GE signature."""
        return clf.check_signature(filename)

    def verify_signature(self):
        """True iff the open file's manufacturer is exactly the GE literal."""
        self._require_open()
        return clf.verify_signature(self.container)

    def check_file(self):
        """
        Validate and classify the open file, replacing any earlier result.

        Returns
        -------
        Classification
        """
        self._require_open()
        self.classification = None
        try:
            self.classification = clf.check_file(self.container)
        except Exception:
            self.state = "failed"
            raise
        self.state = "classified"
        return self.classification

    @property
    def format_version(self):
        self._require_classified()
        return self.classification.format_version

    @property
    def geo_dims(self):
        self._require_classified()
        return self.classification.geo_dims

    def is_list_file(self):
        self._require_classified()
        return self.classification.is_list

    def is_sino_file(self):
        self._require_classified()
        return self.classification.is_sino

    def is_geo_file(self):
        """True for geometry and normalization files."""
        self._require_classified()
        return self.classification.is_geo

    def is_norm_file(self):
        self._require_classified()
        return self.classification.is_norm

    # -------------------------------------------------------------------------
    # Metadata and geometry
    # -------------------------------------------------------------------------

    def _get_catalog(self):
        if self.catalog is None:
            self.catalog = ScannerCatalog.default(self.config)
        return self.catalog

    def _get_radionuclide_db(self):
        if self.radionuclide_db is None:
            self.radionuclide_db = RadionuclideDB.default(self.config)
        return self.radionuclide_db

    def initialise_exam_info(self):
        self._require_classified()
        self.exam_info = build_exam_info(self.container,
                                         self._get_radionuclide_db())
        return self.exam_info

    def resolve_scanner(self):
        """Resolve the scanner model against the catalog."""
        self._require_classified()
        config = self.config
        if config.verbose != self.verbose:
            config = ReaderConfig(config.tolerance, config.default_doi,
                                  self.verbose, config.scanner_catalog,
                                  config.radionuclide_table)
        scanner, messages = resolve_scanner(self.container,
                                            self.classification,
                                            self._get_catalog(), config)
        self.warnings.extend(messages)
        return scanner

    def initialise_proj_data_info(self):
        self._require_classified()
        self.scanner = self.resolve_scanner()
        self.proj_data_info, messages = build_projection_geometry(
            self.container, self.scanner, self.classification,
            verbose=self.verbose)
        self.warnings.extend(messages)
        return self.proj_data_info

    def get_scanner(self):
        return self.scanner

    def get_exam_info(self):
        return self.exam_info

    def get_proj_data_info(self):
        return self.proj_data_info

    # -------------------------------------------------------------------------
    # Regions
    # -------------------------------------------------------------------------

    def _set_region(self, initialise, *args):
        # a failed initialise must not leave the previous selection behind
        self.region = None
        self.region = initialise(self.container, self.classification, *args)
        if self.region is None:
            return False
        if self.region.num_samples is not None:
            self._num_singles_samples = self.region.num_samples
        return True

    def initialise_listmode_data(self):
        """Select the list-mode stream. Returns True on success."""
        self._require_classified()
        return self._set_region(reg.initialise_listmode)

    def initialise_singles_data(self):
        """Select the crystal singles. Returns True on success."""
        self._require_classified()
        return self._set_region(reg.initialise_singles)

    def initialise_proj_data(self, view_num):
        """Select sinogram view ``view_num`` (1-based)."""
        self._require_classified()
        return self._set_region(reg.initialise_sinogram, view_num,
                                self.proj_data_info.num_views)

    def initialise_geo_factors_data(self, slice_num):
        """Select geometric correction slice ``slice_num`` (1-based)."""
        self._require_classified()
        return self._set_region(reg.initialise_geo_factors, slice_num)

    def initialise_efficiency_factors(self):
        """Select the crystal efficiency factors."""
        self._require_classified()
        return self._set_region(reg.initialise_efficiency_factors)

    @property
    def num_singles_samples(self):
        """Valid singles samples, known once list or singles data is set up."""
        return self._num_singles_samples

    def get_num_singles_samples(self):
        return self.num_singles_samples

    @property
    def list_size(self):
        return self.region.list_size if self.region is not None else None

    def _current(self, kind):
        if self.region is None or self.region.kind != kind:
            raise WrongFileKindError(
                f"Call the matching initialise_* method before reading "
                f"'{kind}' data.")
        return self.region

    def read_list_data(self, buffer, byte_offset, byte_count):
        """Copy ``byte_count`` raw list-mode bytes from ``byte_offset``."""
        return reg.read_list_data(self.container, self._current("list"),
                                  buffer, byte_offset, byte_count)

    def iter_list_data(self, chunk_bytes=16 * 1024 * 1024, progress=None):
        progress = bool(self.verbose) if progress is None else progress
        return reg.iter_list_chunks(self.container, self._current("list"),
                                    chunk_bytes, progress)

    def read_sinogram(self, offset=(0, 0, 0), stride=(1, 1, 1)):
        return reg.read_sinogram(self.container, self._current("sino"),
                                 offset, stride)

    def read_geometric_factors(self, offset=None, stride=None):
        return reg.read_geometric_factors(self.container,
                                          self._current("geo"),
                                          offset, stride)

    def read_efficiency_factors(self, offset=None, stride=None):
        return reg.read_efficiency_factors(self.container,
                                           self._current("norm"),
                                           offset, stride)

    def read_singles(self, sample):
        return reg.read_singles(self.container, self._current("singles"),
                                sample)

    def read_all_sinogram_views(self, progress=None):
        self._require_classified()
        progress = bool(self.verbose) if progress is None else progress
        return reg.read_all_sinogram_views(
            self.container, self.classification,
            self.proj_data_info.num_views, progress)

    def read_all_geometric_factors(self, progress=None):
        self._require_classified()
        progress = bool(self.verbose) if progress is None else progress
        return reg.read_all_geometric_factors(
            self.container, self.classification, progress)

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def print_header(self):
        """Pretty-print the classification, scanner and exam summary."""
        self._require_classified()
        c = self.classification
        s = self.scanner
        e = self.exam_info
        p = self.proj_data_info

        print("[INFO] RDF Header: ")
        print(" * Basic information: ")
        print(f"      file          : {self.filename}")
        print(f"      RDF version   : {c.format_version}")
        print(f"      kind          : {c.kind}")
        if c.geo_dims is not None:
            print(f"      geo dims      : {c.geo_dims}-D")

        if s is not None:
            print(" * Scanner information: ")
            print(f"      name          : {s.name}")
            print(f"      rings         : {s.num_rings}")
            print(f"      det. per ring : {s.num_detectors_per_ring}")
            print(f"      detectors     : {s.num_detectors}")
            print(f"      ring spacing  : {s.ring_spacing:.4f} mm")
            print(f"      ring radius   : {s.effective_ring_radius:.4f} mm")
            print(f"      TOF bins      : {s.max_num_timing_poss} "
                  f"x {s.size_of_timing_pos} ps")

        if p is not None:
            print(" * Projection information: ")
            print(f"      views         : {p.num_views}")
            print(f"      tangential    : {p.num_tangential_poss}")
            print(f"      max ring diff : {p.max_ring_difference}")
            print(f"      bed (h, v)    : {p.bed_position_horizontal}, "
                  f"{p.bed_position_vertical} mm")

        if e is not None:
            print(" * Exam information: ")
            print(f"      position      : "
                  f"{e.patient_position.position_string}")
            print(f"      energy window : {e.low_energy_thres} - "
                  f"{e.high_energy_thres} keV")
            for tf in e.time_frames:
                print(f"      time frame    : [{tf.start}, {tf.end}) s")
            print(f"      radionuclide  : {e.radionuclide.name}")

        if self.warnings:
            print(f" * Warnings: {len(self.warnings)}")
