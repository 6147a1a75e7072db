from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from typing import Dict

from .errors import UnsupportedSinkTypeError
from .sinks import LabeledPointList, PointCloudMesh, PointSink

@dataclass
class PointBatch:
    """Collected points with per-point attributes, ready for export."""
    xyz: np.ndarray                       # (N, 3)
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz, dtype=np.float64).reshape(-1, 3)
        n = len(self.xyz)
        for k, v in list(self.attrs.items()):
            v = np.asarray(v)
            if v.shape[0] != n:
                raise ValueError(f"Attribute '{k}' length {v.shape[0]} != {n}")
            self.attrs[k] = v

    @staticmethod
    def from_sink(sink: PointSink) -> "PointBatch":
        if isinstance(sink, LabeledPointList):
            xyz = sink.points()
            attrs = {"label": np.asarray(sink.labels(), dtype=str).reshape(-1)}
        elif isinstance(sink, PointCloudMesh):
            xyz = sink.points
            attrs = {}
        else:
            raise UnsupportedSinkTypeError(f"Cannot export points from '{type(sink).__name__}'")
        attrs["capture_index"] = np.arange(len(xyz), dtype=np.uint32)
        return PointBatch(xyz=xyz, attrs=attrs)
