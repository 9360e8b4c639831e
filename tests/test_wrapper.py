from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from ReaderPET import RDFWrapper
from ReaderPET.config import ReaderConfig
from ReaderPET.errors import FormatError, NotAContainerError, RegionError
from ReaderPET.errors import UnknownScannerError, UnsupportedEncodingError
from ReaderPET.errors import UnsupportedSelectionError, UnsupportedVersionError
from ReaderPET.errors import WrongFileKindError

from conftest import SIGNA_GEOMETRY


def test_listmode_scenario(open_rdf):
    rdf = open_rdf("list")
    assert rdf.state == "classified"
    assert rdf.is_list_file() is True
    assert rdf.is_sino_file() is False
    assert rdf.initialise_listmode_data() is True
    assert rdf.num_singles_samples == 1000
    assert rdf.get_num_singles_samples() == 1000

    buf = np.zeros(16, dtype=np.uint8)
    rdf.read_list_data(buf, 0, 16)
    np.testing.assert_array_equal(buf, np.arange(16, dtype=np.uint8))


def test_compressed_listmode_scenario(rdf_file, catalog, config):
    path = rdf_file("list", is_list_compressed=1)
    rdf = RDFWrapper(config=config, catalog=catalog)
    with pytest.raises(UnsupportedEncodingError):
        rdf.open(path)
    assert rdf.state == "failed"
    assert not rdf.container.is_open


def test_sinogram_selection_scenario(open_rdf):
    rdf = open_rdf("sino")
    assert rdf.initialise_proj_data(1) is True
    with pytest.raises(UnsupportedSelectionError):
        rdf.read_sinogram(offset=[0, 1, 0])
    out = rdf.read_sinogram()
    assert out.shape == (7, 5, 3)


def test_unknown_scanner_scenario(rdf_file, catalog, config):
    with pytest.raises(UnknownScannerError):
        RDFWrapper(rdf_file("list", scanner_name="ACME 3000"), config=config,
                   catalog=catalog)


def test_open_failures(rdf_file, catalog, config, tmp_path: Path):
    text = tmp_path / "x.h5"
    text.write_text("nope")
    with pytest.raises(NotAContainerError):
        RDFWrapper(text, config=config, catalog=catalog)
    with pytest.raises(FormatError):
        RDFWrapper(rdf_file("list", manufacturer="OTHER"), config=config,
                   catalog=catalog)
    with pytest.raises(UnsupportedVersionError):
        RDFWrapper(rdf_file("list", version=10), config=config,
                   catalog=catalog)


def test_classification_is_memoized(open_rdf, monkeypatch):
    rdf = open_rdf("norm")
    first = (rdf.is_list_file(), rdf.is_sino_file(), rdf.is_geo_file(),
             rdf.is_norm_file())

    def boom(*args, **kwargs):
        raise AssertionError("container probed again")

    monkeypatch.setattr(rdf.container, "read_scalar", boom)
    monkeypatch.setattr(rdf.container, "exists", boom)
    second = (rdf.is_list_file(), rdf.is_sino_file(), rdf.is_geo_file(),
              rdf.is_norm_file())
    assert first == second == (False, False, True, True)
    assert rdf.geo_dims == 2


def test_metadata_and_geometry(open_rdf):
    rdf = open_rdf("sino")
    assert rdf.warnings == []
    assert rdf.scanner.name == "Test PET"
    assert rdf.exam_info.patient_position.position_string == "HFS"
    p = rdf.proj_data_info
    assert (p.num_views, p.num_tangential_poss, p.max_ring_difference) == \
        (4, 6, 1)
    assert rdf.get_proj_data_info() is p


def test_initialise_requires_matching_kind(open_rdf):
    rdf = open_rdf("geo")
    with pytest.raises(WrongFileKindError):
        rdf.initialise_listmode_data()
    with pytest.raises(WrongFileKindError):
        rdf.initialise_proj_data(1)
    with pytest.raises(WrongFileKindError):
        rdf.initialise_efficiency_factors()
    with pytest.raises(WrongFileKindError):
        rdf.read_geometric_factors()
    assert rdf.initialise_geo_factors_data(1) is True
    assert rdf.read_geometric_factors().shape == (4, 6)


def test_region_is_replaced(open_rdf):
    rdf = open_rdf("norm")
    rdf.initialise_efficiency_factors()
    assert rdf.read_efficiency_factors().shape == (2, 8)
    rdf.initialise_geo_factors_data(1)
    with pytest.raises(WrongFileKindError):
        rdf.read_efficiency_factors()


def test_singles(open_rdf):
    rdf = open_rdf("sino")
    assert rdf.initialise_singles_data() is True
    assert rdf.num_singles_samples == 3
    assert rdf.read_singles(1).shape == (3, 8)


def test_failed_initialise_clears_region(open_rdf):
    rdf = open_rdf("sino")
    assert rdf.initialise_proj_data(1) is True
    with pytest.raises(RegionError):
        rdf.initialise_proj_data(99)
    assert rdf.region is None
    with pytest.raises(WrongFileKindError):
        rdf.read_sinogram()


def test_num_singles_samples_survives_other_regions(open_rdf):
    rdf = open_rdf("sino")
    assert rdf.num_singles_samples == 0
    rdf.initialise_singles_data()
    rdf.initialise_proj_data(1)
    assert rdf.num_singles_samples == 3
    rdf.close()
    assert rdf.num_singles_samples == 0


def test_failed_check_file_marks_failed(open_rdf, monkeypatch):
    from ReaderPET import classifier as clf

    rdf = open_rdf("sino")
    assert rdf.state == "classified"

    def broken(container):
        raise UnsupportedVersionError("RDF 10")

    monkeypatch.setattr(clf, "check_file", broken)
    with pytest.raises(UnsupportedVersionError):
        rdf.check_file()
    assert rdf.state == "failed"
    assert rdf.classification is None


def test_unsupported_revision_seam(open_rdf, monkeypatch):
    from ReaderPET import constants as C

    rdf = open_rdf("list")
    monkeypatch.setattr(C, "RDF_LAYOUTS", {})
    assert rdf.initialise_listmode_data() is False
    assert rdf.region is None


def test_reopen_resets_state(open_rdf, rdf_file):
    rdf = open_rdf("list")
    rdf.initialise_listmode_data()
    rdf.open(rdf_file("geo", geo_dims=3))
    assert rdf.region is None
    assert rdf.is_geo_file() and not rdf.is_list_file()
    assert rdf.geo_dims == 3


def test_close_and_context_manager(rdf_file, catalog, config):
    with RDFWrapper(rdf_file("sino"), config=config, catalog=catalog) as rdf:
        assert rdf.verify_signature()
    assert rdf.state == "unopened"
    with pytest.raises(FormatError):
        rdf.is_sino_file()


def test_check_GE_signature(rdf_file, tmp_path: Path):
    other = tmp_path / "x.txt"
    other.write_text("x")
    assert RDFWrapper.check_GE_signature(rdf_file("list")) is True
    assert RDFWrapper.check_GE_signature(other) is False


def test_packaged_catalog_and_header(rdf_file, capsys):
    rdf = RDFWrapper(rdf_file("list", geometry=SIGNA_GEOMETRY),
                     config=ReaderConfig(verbose=1), print_header=True)
    out = capsys.readouterr().out
    assert "[INFO] RDF Header" in out
    assert "GE Signa PET/MR" in out
    assert f"detectors     : {rdf.scanner.num_detectors}" in out
    assert rdf.scanner.num_detectors == 45 * 448
    assert "[DONE]" in out
    assert rdf.proj_data_info.num_views == 224
    rdf.close()


def test_override_warning_collected(rdf_file, catalog, config):
    rdf = RDFWrapper(rdf_file("list", effective_ring_diameter=300.0),
                     config=config, catalog=catalog)
    assert len(rdf.warnings) == 1
    assert rdf.scanner.effective_ring_radius == pytest.approx(150.0)
    rdf.close()
