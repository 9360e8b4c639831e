# -*- coding: utf-8 -*-
"""
Created on Wed Oct  7 08:55:31 2026

@author: p-sik

Exam-level metadata of an RDF file: patient position, energy window,
time frame and radionuclide.
"""
from . import constants as C
from .radionuclides import Radionuclide


ORIENTATIONS = ("head_in", "feet_in", "other_orientation",
                "unknown_orientation")
ROTATIONS = ("supine", "prone", "right", "left", "other_rotation",
             "unknown_rotation")

_ENTRY_CODES = {
    C.ACQ_HEAD_FIRST: "head_in",
    C.ACQ_FEET_FIRST: "feet_in",
}
_POSITION_CODES = {
    C.ACQ_SUPINE: "supine",
    C.ACQ_PRONE: "prone",
    C.ACQ_LEFT_DECUB: "left",
    C.ACQ_RIGHT_DECUB: "right",
}
_POSITION_STRINGS = {
    ("head_in", "supine"): "HFS",
    ("head_in", "prone"): "HFP",
    ("head_in", "right"): "HFDR",
    ("head_in", "left"): "HFDL",
    ("feet_in", "supine"): "FFS",
    ("feet_in", "prone"): "FFP",
    ("feet_in", "right"): "FFDR",
    ("feet_in", "left"): "FFDL",
}


class PatientPosition:
    """
    Patient orientation (head/feet first) and rotation (supine, prone...).
    """
    def __init__(self, orientation="unknown_orientation",
                 rotation="unknown_rotation"):
        if orientation not in ORIENTATIONS:
            raise ValueError(f"Unknown orientation: {orientation}")
        if rotation not in ROTATIONS:
            raise ValueError(f"Unknown rotation: {rotation}")
        self.orientation = orientation
        self.rotation = rotation

    @classmethod
    def from_codes(cls, entry, position):
        """
        Map the RDF ``patientEntry``/``patientPosition`` codes.

        Unrecognized codes give the unknown value instead of failing.
        """
        return cls(_ENTRY_CODES.get(int(entry), "unknown_orientation"),
                   _POSITION_CODES.get(int(position), "unknown_rotation"))

    @property
    def position_string(self):
        """DICOM-style code such as ``"HFS"``, or ``"unknown"``."""
        return _POSITION_STRINGS.get((self.orientation, self.rotation),
                                     "unknown")

    def __eq__(self, other):
        if not isinstance(other, PatientPosition):
            return NotImplemented
        return (self.orientation, self.rotation) == \
            (other.orientation, other.rotation)

    def __repr__(self):
        return f"PatientPosition({self.orientation!r}, {self.rotation!r})"


class TimeFrame:
    """Half-open interval ``[start, end)`` in s relative to scan start."""
    def __init__(self, start, end):
        if end < start:
            raise ValueError(f"Time frame ends before it starts: "
                             f"[{start}, {end})")
        self.start = float(start)
        self.end = float(end)

    @property
    def duration(self):
        return self.end - self.start

    def __eq__(self, other):
        if not isinstance(other, TimeFrame):
            return NotImplemented
        return (self.start, self.end) == (other.start, other.end)

    def __repr__(self):
        return f"TimeFrame({self.start}, {self.end})"


class ExamInfo:
    """
    Exam metadata.

    Attributes
    ----------
    modality : str
        Always ``"PT"``.
    patient_position : PatientPosition
    low_energy_thres, high_energy_thres : float
        Energy window in keV.
    start_time_in_secs_since_1970 : float
    time_frames : list of TimeFrame
        Exactly one frame for RDF files.
    radionuclide : Radionuclide
    """
    def __init__(self, patient_position=None, low_energy_thres=-1.0,
                 high_energy_thres=-1.0, start_time_in_secs_since_1970=0.0,
                 time_frames=(), radionuclide=None):
        self.modality = "PT"
        self.patient_position = patient_position or PatientPosition()
        self.low_energy_thres = float(low_energy_thres)
        self.high_energy_thres = float(high_energy_thres)
        self.start_time_in_secs_since_1970 = \
            float(start_time_in_secs_since_1970)
        self.time_frames = list(time_frames)
        self.radionuclide = radionuclide or Radionuclide("unknown")

    def __repr__(self):
        return (f"ExamInfo(position={self.patient_position.position_string}, "
                f"energy=[{self.low_energy_thres}, "
                f"{self.high_energy_thres}], frames={self.time_frames}, "
                f"radionuclide={self.radionuclide.name!r})")


def build_exam_info(container, radionuclide_db, layout=None):
    """
    Read the exam metadata of an open RDF container.

    Parameters
    ----------
    container : HDF5Container
    radionuclide_db : RadionuclideDB
        Lookup table; on a miss the radionuclide is built from the
        ``positronFraction`` and ``halfLife`` fields with 511 keV.
    layout : dict or None
        RDF path table, RDF9 if None.

    Returns
    -------
    ExamInfo
    """
    L = layout or C.RDF9
    u32 = lambda key: int(container.read_scalar(L[key], "uint32"))
    f32 = lambda key: float(container.read_scalar(L[key], "float32"))

    position = PatientPosition.from_codes(u32("patient_entry"),
                                          u32("patient_position"))

    low = float(u32("lower_energy_limit"))
    high = float(u32("upper_energy_limit"))

    # frameStartTime and scanStartTime are both s since 1970
    scan_start = u32("scan_start_time")
    frame_start = float(u32("frame_start_time") - scan_start)
    frame_duration = u32("frame_duration") / C.MS_PER_S
    frames = [TimeFrame(frame_start, frame_start + frame_duration)]

    name = container.read_string(L["radionuclide_name"])
    radionuclide = radionuclide_db.get_radionuclide(name)
    if not radionuclide.is_known:
        radionuclide = Radionuclide(name, C.REFERENCE_ENERGY_KEV,
                                    f32("positron_fraction"),
                                    f32("half_life"))

    return ExamInfo(patient_position=position,
                    low_energy_thres=low,
                    high_energy_thres=high,
                    start_time_in_secs_since_1970=float(scan_start),
                    time_frames=frames,
                    radionuclide=radionuclide)
