from __future__ import annotations

from pathlib import Path

import h5py
import pytest

from ReaderPET import classifier as clf
from ReaderPET.classifier import Classification
from ReaderPET.container import HDF5Container
from ReaderPET.errors import FormatError, UnrecognizedFileKindError
from ReaderPET.errors import UnsupportedEncodingError, UnsupportedVersionError


def _classify(path: Path) -> Classification:
    with HDF5Container(path) as c:
        return clf.check_file(c)


@pytest.mark.parametrize("manufacturer, expected", [
    ("GE MEDICAL SYSTEMS", True),
    ("ge medical systems", False),
    ("GE MEDICAL SYSTEMS ", False),
    ("GE MEDICAL SYSTEMS\x00 rev 2", True),
    ("SIEMENS", False),
])
def test_verify_signature_is_exact(rdf_file, manufacturer, expected):
    path = rdf_file("list", manufacturer=manufacturer)
    with HDF5Container(path) as c:
        assert clf.verify_signature(c) is expected


def test_verify_signature_missing_field(rdf_file):
    with HDF5Container(rdf_file("list", manufacturer=None)) as c:
        assert clf.verify_signature(c) is False


def test_check_signature_never_raises(rdf_file, tmp_path: Path):
    text = tmp_path / "x.txt"
    text.write_text("hello")
    assert clf.check_signature(rdf_file("sino")) is True
    assert clf.check_signature(text) is False
    assert clf.check_signature(tmp_path / "missing.h5") is False


def test_check_file_rejects_wrong_vendor(rdf_file):
    with pytest.raises(FormatError):
        _classify(rdf_file("list", manufacturer="SIEMENS"))


def test_check_file_rejects_other_versions(rdf_file):
    with pytest.raises(UnsupportedVersionError):
        _classify(rdf_file("list", version=10))


@pytest.mark.parametrize("kind", ["list", "sino", "geo", "norm"])
def test_classification_kinds(rdf_file, kind):
    c = _classify(rdf_file(kind))
    assert c.kind == kind
    assert c.format_version == 9
    assert c.is_list + c.is_sino + (c.is_geo and not c.is_norm) <= 1
    if c.is_norm:
        assert c.is_geo
    if kind in ("geo", "norm"):
        assert c.geo_dims == 2
    else:
        assert c.geo_dims is None


def test_geo_dimensionality(rdf_file):
    assert _classify(rdf_file("geo", geo_dims=3)).geo_dims == 3
    assert _classify(rdf_file("norm", geo_dims=3)).geo_dims == 3


def test_compressed_list_file(rdf_file):
    with pytest.raises(UnsupportedEncodingError):
        _classify(rdf_file("list", is_list_compressed=1))


def test_unrecognized_kind(rdf_file):
    with pytest.raises(UnrecognizedFileKindError):
        _classify(rdf_file("none"))


def test_list_flag_wins_over_structure(rdf_file):
    # a list file that also carries a Segment2 group is still a list file
    path = rdf_file("list")
    with h5py.File(path, "a") as f:
        f.create_group("/SegmentData/Segment2")
    assert _classify(path).kind == "list"


def test_classification_invariant():
    with pytest.raises(ValueError):
        Classification(is_list=True, is_sino=True)
    c = Classification(is_norm=True, format_version=9, geo_dims=2)
    assert c.is_geo and c.kind == "norm"
