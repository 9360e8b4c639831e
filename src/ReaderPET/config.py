# -*- coding: utf-8 -*-
"""
Created on Tue Oct  6 09:12:41 2026

@author: p-sik

Reader configuration: reconciliation tolerance, default depth of
interaction, verbosity and the location of the scanner/radionuclide
catalogs. Values can be overridden from a TOML file with a ``[reader]``
table, e.g.::

    [reader]
    tolerance = 0.1
    default_doi = 0.0
    verbose = 1
    scanner_catalog = "/path/to/scanners.toml"
"""
import os

# Import tomlib packages
try:
    import tomllib
    def _read_toml(path):
        with open(path, "rb") as f:
            return tomllib.load(f)
except ImportError:
    import toml
    def _read_toml(path):
        return toml.load(path)


DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
CONFIG_ENV = "READERPET_CONFIG_DIR"
CONFIG_FILENAME = "readerpet.toml"


class ReaderConfig:
    """
    Settings shared by the scanner resolver and the wrapper.

    Parameters
    ----------
    tolerance : float, default 0.1
        Catalog values differing from the file by more than this are
        overridden by the file value.
    default_doi : float, default 0.0
        Average depth of interaction (mm) used when the ring radius from the
        file overrides the catalog radius.
    verbose : int, default 1
        Verbosity level; >0 prints status and warning messages.
    scanner_catalog : str or None
        TOML file with scanner definitions. Packaged catalog if None.
    radionuclide_table : str or None
        TOML file with radionuclide definitions. Packaged table if None.
    """
    def __init__(self,
                 tolerance          = 0.1,
                 default_doi        = 0.0,
                 verbose            = 1,
                 scanner_catalog    = None,
                 radionuclide_table = None):

        self.tolerance = float(tolerance)
        self.default_doi = float(default_doi)
        self.verbose = int(verbose)

        if scanner_catalog is None:
            scanner_catalog = os.path.join(DATA_DIR, "scanners.toml")
        if radionuclide_table is None:
            radionuclide_table = os.path.join(DATA_DIR, "radionuclides.toml")

        self.scanner_catalog = scanner_catalog
        self.radionuclide_table = radionuclide_table

    def __repr__(self):
        return (f"ReaderConfig(tolerance={self.tolerance}, "
                f"default_doi={self.default_doi}, verbose={self.verbose}, "
                f"scanner_catalog={self.scanner_catalog!r}, "
                f"radionuclide_table={self.radionuclide_table!r})")


def find_config_file(filename=CONFIG_FILENAME):
    """
    Locate a config file in the directory named by ``READERPET_CONFIG_DIR``.

    Returns
    -------
    str or None
        Full path when the variable is set and the file exists, else None.
    """
    folder = os.environ.get(CONFIG_ENV)
    if not folder:
        return None

    path = os.path.join(folder, filename)
    if not os.path.isfile(path):
        return None
    return path


def load_config(path=None, **overrides):
    """
    Build a :class:`ReaderConfig` from a TOML file plus keyword overrides.

    Parameters
    ----------
    path : str or None
        TOML file with a ``[reader]`` table. If None, the file found by
        :func:`find_config_file` is used; if none is found the defaults
        apply.
    **overrides
        Keyword values that take precedence over the file.

    Returns
    -------
    ReaderConfig
    """
    settings = {}

    if path is None:
        path = find_config_file()
    elif not os.path.isfile(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    if path is not None:
        cfg = _read_toml(path)
        settings.update(cfg.get("reader", {}))

        # relative catalog paths are relative to the config file
        base = os.path.dirname(os.path.abspath(path))
        for key in ("scanner_catalog", "radionuclide_table"):
            if key in settings and not os.path.isabs(settings[key]):
                settings[key] = os.path.join(base, settings[key])

    settings.update(overrides)
    unknown = set(settings) - {"tolerance", "default_doi", "verbose",
                               "scanner_catalog", "radionuclide_table"}
    if unknown:
        raise ValueError(f"Unknown reader settings: {sorted(unknown)}")

    return ReaderConfig(**settings)
