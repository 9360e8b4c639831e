from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from ReaderPET import visualizer as visu


def test_show_sinogram_view_saves(tmp_path: Path, open_rdf):
    rdf = open_rdf("sino")
    rdf.initialise_proj_data(2)
    sino = rdf.read_sinogram()

    fig = visu.show_sinogram_view(sino, percentile=(1, 99), save=True,
                                  filename="view2.png", output_dir=tmp_path,
                                  show=False, verbose=0)
    assert (tmp_path / "view2.png").is_file()
    assert len(fig.axes) == 3


def test_show_sinogram_view_checks_input():
    with pytest.raises(ValueError):
        visu.show_sinogram_view(np.zeros((4, 4)), show=False)
    with pytest.raises(IndexError):
        visu.show_sinogram_view(np.zeros((2, 4, 4)), planes=[5], show=False)
    with pytest.raises(ValueError):
        visu.show_sinogram_view(np.zeros((2, 4, 4)), save=True, show=False)


def test_show_factors(tmp_path: Path, open_rdf):
    rdf = open_rdf("norm")
    rdf.initialise_efficiency_factors()
    fig = visu.show_factors(rdf.read_efficiency_factors(), save=True,
                            filename="eff.png", output_dir=tmp_path,
                            show=False, verbose=0)
    assert (tmp_path / "eff.png").is_file()
    assert fig.axes
    with pytest.raises(ValueError):
        visu.show_factors(np.zeros(5), show=False)
