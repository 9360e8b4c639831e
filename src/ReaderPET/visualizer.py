# -*- coding: utf-8 -*-
"""
Created on Thu Oct  8 09:47:52 2026

@author: p-sik

Quick-look plots of arrays read from RDF files.
"""
import os

import matplotlib.pyplot as plt
import numpy as np


def _save(fig, filename, output_dir, verbose=1):
    if filename is None:
        raise ValueError("If 'save' is True, you must provide a filename.")
    if output_dir is None:
        output_dir = os.getcwd()
    os.makedirs(output_dir, exist_ok=True)

    path = os.path.join(output_dir, filename)
    fig.savefig(path, bbox_inches="tight")
    if verbose:
        print(f"[INFO] Saved: {path}")
    return path


def show_sinogram_view(sino,
                       planes=None,
                       title="Sinogram view",
                       cmap="gray",
                       percentile=None,
                       save=False,
                       filename=None,
                       output_dir=None,
                       show=True,
                       verbose=1):
    """
    Display planes of one sinogram view as read by ``read_sinogram``.

    Parameters
    ----------
    sino : numpy.ndarray
        Array of shape (NZ, NY, NX).
    planes : sequence of int or None
        Indices along the first axis to show. If None, the first, middle
        and last plane.
    title : str
        Figure title.
    cmap : str
        Colormap to use.
    percentile : tuple[int, int] or None
        Percentile scaling for display contrast, e.g. (1, 99).
    save : bool
        If True, save the figure to ``output_dir/filename``.
    filename, output_dir : str or None
        Target of ``save``; ``output_dir`` defaults to the working directory.
    show : bool
        If True, display the figure.

    Returns
    -------
    matplotlib.figure.Figure
    """
    sino = np.asarray(sino)
    if sino.ndim != 3:
        raise ValueError(f"Expected a (NZ, NY, NX) array, got {sino.shape}")

    nz = sino.shape[0]
    if planes is None:
        planes = sorted({0, nz // 2, nz - 1})
    for p in planes:
        if not 0 <= p < nz:
            raise IndexError(f"plane={p} out of range [0, {nz})")

    fig, axes = plt.subplots(1, len(planes), figsize=(len(planes) * 4, 4))
    axes = np.asarray(axes).ravel()

    for ax, p in zip(axes, planes):
        img = sino[p]
        if percentile is not None:
            vmin, vmax = np.percentile(img, percentile)
            ax.imshow(img, cmap=cmap, origin="lower", aspect="auto",
                      vmin=vmin, vmax=vmax)
        else:
            ax.imshow(img, cmap=cmap, origin="lower", aspect="auto")
        ax.set_title(f"Plane {p}")
        ax.axis("off")

    fig.suptitle(title)
    fig.tight_layout()

    if save:
        _save(fig, filename, output_dir, verbose)
    if show:
        plt.show()
    return fig


def show_factors(factors,
                 title="Correction factors",
                 cmap="viridis",
                 colorbar=True,
                 save=False,
                 filename=None,
                 output_dir=None,
                 show=True,
                 verbose=1):
    """
    Display a 2-D array of geometric or efficiency factors.

    3-D arrays are shown as their sum over the last axis.

    Returns
    -------
    matplotlib.figure.Figure
    """
    img = np.asarray(factors)
    if img.ndim == 3:
        img = img.sum(axis=-1)
    if img.ndim != 2:
        raise ValueError(f"Expected a 2-D or 3-D array, got {img.shape}")

    fig, ax = plt.subplots(figsize=(6, 6))
    im = ax.imshow(img, cmap=cmap, origin="lower", aspect="auto")
    ax.set_title(title)
    if colorbar:
        fig.colorbar(im, ax=ax)
    fig.tight_layout()

    if save:
        _save(fig, filename, output_dir, verbose)
    if show:
        plt.show()
    return fig
