"""
ReaderPET is a lightweight Python toolkit for reading GE PET raw data files
(RDF, an HDF5 container) and exposing them to a reconstruction pipeline.

An RDF file has no explicit type field. ReaderPET classifies it by structure
into one of four kinds:

1) List mode
   - raw stream of coincidence events under ``/ListData/listData``
   - crystal singles under ``/Singles/CrystalSingles/sample<N>``

2) Sinogram
   - one 3-D array per view under ``/SegmentData/Segment2/3D_Sinogram``

3) Geometry
   - geometric correction slices under
     ``/SegmentData/Segment4/3D_Norm_Correction/slice<N>``

4) Normalization
   - crystal efficiencies under ``/3DCrystalEfficiency/crystalEfficiency``
     (a normalization file also contains the geometry data)

ReaderPET provides utilities for:
- validating the GE signature and RDF revision (only RDF9 is supported)
- resolving the scanner model against a catalog of known GE scanners,
  overriding catalog values the file disagrees with
- reading exam metadata (patient position, energy window, time frame,
  radionuclide)
- reading payloads with the vendor's reversed tangential axis flipped back
- quick visualization helpers for sinograms and correction factors

Typical workflow
----------------
Open a sinogram file and read the first view::

    from ReaderPET import RDFWrapper

    with RDFWrapper("rdf_sino.h5") as rdf:
        rdf.print_header()
        rdf.initialise_proj_data(1)
        view = rdf.read_sinogram()     # (NZ, NY, NX)

Stream list-mode bytes::

    with RDFWrapper("rdf_list.h5", verbose=0) as rdf:
        rdf.initialise_listmode_data()
        for offset, chunk in rdf.iter_list_data():
            ...

Modules
-------
- ``ReaderPET.container``    : read-only HDF5 access
- ``ReaderPET.classifier``   : signature, revision and file-kind checks
- ``ReaderPET.geometry``     : scanner resolution and projection geometry
- ``ReaderPET.exam``         : exam metadata
- ``ReaderPET.regions``      : payload extraction
- ``ReaderPET.wrapper``      : ``RDFWrapper`` tying everything together
- ``ReaderPET.scanners``     : scanner catalog
- ``ReaderPET.radionuclides``: radionuclide table
- ``ReaderPET.config``       : reader settings
- ``ReaderPET.dtypes``       : canonical payload dtypes
- ``ReaderPET.visualizer``   : plotting helpers

Version
-------
This package follows semantic versioning starting from the development series.
"""

__version__ = "0.0.1"


import ReaderPET.errors
import ReaderPET.dtypes
import ReaderPET.config
import ReaderPET.container
import ReaderPET.classifier
import ReaderPET.geometry
import ReaderPET.exam
import ReaderPET.regions
import ReaderPET.wrapper

from ReaderPET.wrapper import RDFWrapper
from ReaderPET.config import ReaderConfig, load_config
