# -*- coding: utf-8 -*-
"""
Created on Tue Oct  6 11:40:05 2026

@author: p-sik

Radionuclide records and a name-keyed lookup table.
"""
import re

from .config import ReaderConfig, _read_toml


class Radionuclide:
    """
    Radionuclide properties.

    Parameters
    ----------
    name : str
        Name as given, e.g. ``"F-18"``.
    energy : float
        Photon energy in keV.
    positron_fraction : float
        Branching ratio for positron emission.
    half_life : float
        Half-life in s. Negative for an unknown nuclide.
    modality : str, default "PT"
    """
    def __init__(self, name, energy=-1.0, positron_fraction=-1.0,
                 half_life=-1.0, modality="PT"):
        self.name = name
        self.energy = float(energy)
        self.positron_fraction = float(positron_fraction)
        self.half_life = float(half_life)
        self.modality = modality

    @property
    def is_known(self):
        return self.half_life >= 0

    def __eq__(self, other):
        if not isinstance(other, Radionuclide):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return (f"Radionuclide(name={self.name!r}, energy={self.energy}, "
                f"positron_fraction={self.positron_fraction}, "
                f"half_life={self.half_life})")


def _nuclide_key(name):
    """
    Canonical key: element symbol plus mass number, e.g. ``"f18"``.

    ``"F-18"``, ``"F18"``, ``"18F"`` and ``"18-F"`` share one key.
    """
    s = re.sub(r"[^0-9a-z]", "", str(name).lower())
    m = re.fullmatch(r"([a-z]+)(\d+)", s) or re.fullmatch(r"(\d+)([a-z]+)", s)
    if m is None:
        return s
    a, b = m.groups()
    return f"{a}{b}" if a.isalpha() else f"{b}{a}"


class RadionuclideDB:
    """
    Lookup table of radionuclides.

    A miss returns a record with half-life ``-1``; callers decide how to
    fill it in.
    """
    def __init__(self, radionuclides=()):
        self._table = {}
        for rn in radionuclides:
            self._table[_nuclide_key(rn.name)] = rn

    @classmethod
    def from_toml(cls, path):
        cfg = _read_toml(path)
        return cls(Radionuclide(**dict(t))
                   for t in cfg.get("radionuclide", []))

    @classmethod
    def default(cls, config=None):
        config = config or ReaderConfig()
        return cls.from_toml(config.radionuclide_table)

    def __len__(self):
        return len(self._table)

    def get_radionuclide(self, name, modality="PT"):
        rn = self._table.get(_nuclide_key(name))
        if rn is None:
            return Radionuclide(name, modality=modality)
        return Radionuclide(rn.name, rn.energy, rn.positron_fraction,
                            rn.half_life, modality)
