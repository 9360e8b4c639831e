# -*- coding: utf-8 -*-
"""
Created on Tue Oct  6 10:02:17 2026

@author: p-sik

Scanner definitions and the catalog they are looked up in.

The catalog is a TOML file with one ``[[scanner]]`` table per model (see
``data/scanners.toml``). The geometry resolver starts from the catalog entry
named in the RDF file and overrides fields where the file disagrees.
"""
import copy
import math
import re

from .config import ReaderConfig, _read_toml
from .errors import UnknownScannerError


# Fields of a catalog entry and their defaults (unset values are <= 0)
SCANNER_FIELDS = {
    "num_rings": 0,
    "num_detectors_per_ring": 0,
    "inner_ring_radius": 0.0,
    "average_depth_of_interaction": 0.0,
    "ring_spacing": 0.0,
    "default_bin_size": 0.0,
    "intrinsic_tilt": 0.0,
    "num_axial_blocks_per_bucket": 0,
    "num_transaxial_blocks_per_bucket": 0,
    "num_axial_crystals_per_block": 0,
    "num_transaxial_crystals_per_block": 0,
    "num_detector_layers": 1,
    "max_num_non_arccorrected_bins": 0,
    "default_num_arccorrected_bins": 0,
    "energy_resolution": -1.0,
    "reference_energy": 511.0,
    "max_num_timing_poss": 1,
    "size_of_timing_pos": 0.0,
    "timing_resolution": 0.0,
}


def _normalize_name(name):
    return re.sub(r"\s+", " ", str(name)).strip().lower()


class Scanner:
    """
    Scanner model used by the projection geometry.

    Parameters
    ----------
    name : str
        Catalog name of the model.
    **fields
        Any key of :data:`SCANNER_FIELDS`. Units: mm for distances, radians
        for ``intrinsic_tilt``, ps for timing, keV for energy.

    Notes
    -----
    The effective ring radius is ``inner_ring_radius +
    average_depth_of_interaction``.
    """
    def __init__(self, name, **fields):
        unknown = set(fields) - set(SCANNER_FIELDS)
        if unknown:
            raise TypeError(f"Unknown scanner fields: {sorted(unknown)}")

        self.name = name
        for key, default in SCANNER_FIELDS.items():
            value = fields.get(key, default)
            setattr(self, key, type(default)(value))

    @property
    def effective_ring_radius(self):
        return self.inner_ring_radius + self.average_depth_of_interaction

    @property
    def num_detectors(self):
        return self.num_rings * self.num_detectors_per_ring

    def copy(self):
        return copy.deepcopy(self)

    def to_dict(self):
        d = {"name": self.name}
        d.update({key: getattr(self, key) for key in SCANNER_FIELDS})
        return d

    def __eq__(self, other):
        if not isinstance(other, Scanner):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Scanner(name={self.name!r}, rings={self.num_rings}, "
                f"detectors_per_ring={self.num_detectors_per_ring}, "
                f"radius={self.effective_ring_radius:.2f})")


class ScannerCatalog:
    """
    Name-keyed collection of :class:`Scanner` definitions.

    Parameters
    ----------
    scanners : iterable of (Scanner, aliases)
        Entries to register; ``aliases`` is a list of alternative names.
    """
    def __init__(self, scanners=()):
        self._scanners = {}
        self._names = {}
        for scanner, aliases in scanners:
            self.add(scanner, aliases)

    @classmethod
    def from_toml(cls, path):
        """
        Load a catalog from a TOML file with ``[[scanner]]`` tables.

        ``intrinsic_tilt`` is given in degrees in the file and stored in
        radians.
        """
        cfg = _read_toml(path)
        entries = []
        for table in cfg.get("scanner", []):
            table = dict(table)
            name = table.pop("name", None)
            if not name:
                raise ValueError(f"Scanner entry without a name in {path}")
            aliases = table.pop("aliases", [])
            if "intrinsic_tilt" in table:
                table["intrinsic_tilt"] = math.radians(table["intrinsic_tilt"])
            entries.append((Scanner(name, **table), aliases))
        return cls(entries)

    @classmethod
    def default(cls, config=None):
        """Catalog named by ``config.scanner_catalog`` (packaged default)."""
        config = config or ReaderConfig()
        return cls.from_toml(config.scanner_catalog)

    def add(self, scanner, aliases=()):
        key = _normalize_name(scanner.name)
        self._scanners[key] = scanner
        for name in (scanner.name, *aliases):
            self._names[_normalize_name(name)] = key

    def __contains__(self, name):
        return _normalize_name(name) in self._names

    def __len__(self):
        return len(self._scanners)

    def names(self):
        return [s.name for s in self._scanners.values()]

    def get_scanner(self, name):
        """
        Return a fresh copy of the scanner registered under ``name``.

        Raises
        ------
        UnknownScannerError
            ``name`` is neither a scanner name nor an alias.
        """
        key = self._names.get(_normalize_name(name))
        if key is None:
            raise UnknownScannerError(
                f"Scanner read from RDF file is '{name}', but this is not "
                f"supported yet. Known scanners: {', '.join(self.names())}")
        return self._scanners[key].copy()
