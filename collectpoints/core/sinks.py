from __future__ import annotations
from enum import Enum
from typing import List, Optional, Protocol, Sequence, runtime_checkable
import numpy as np

from .errors import UnsupportedSinkTypeError
from .utils import as_point

try:
    import vtk  # type: ignore
    from vtk.util.numpy_support import numpy_to_vtk, numpy_to_vtkIdTypeArray
    _HAVE_VTK = True
except Exception:
    vtk = None  # type: ignore
    _HAVE_VTK = False


class SinkKind(str, Enum):
    LABELED_LIST = "markups"
    MESH = "model"


@runtime_checkable
class PointSink(Protocol):
    kind: SinkKind

    def count(self) -> int: ...
    def last_point(self) -> Optional[np.ndarray]: ...
    def append(self, point: np.ndarray, label: Optional[str] = None) -> int: ...
    def remove_last(self) -> None: ...
    def remove_all(self) -> None: ...


class LabeledPointList:
    """Ordered (point, label) pairs; index order is capture order."""

    kind = SinkKind.LABELED_LIST

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._points: List[np.ndarray] = []
        self._labels: List[str] = []

    def __repr__(self) -> str:
        return f"LabeledPointList(name={self.name!r}, count={self.count()})"

    def count(self) -> int:
        return len(self._points)

    def last_point(self) -> Optional[np.ndarray]:
        if not self._points:
            return None
        return self._points[-1].copy()

    def append(self, point: np.ndarray, label: Optional[str] = None) -> int:
        p = as_point(point)
        self._points.append(p)
        self._labels.append("" if label is None else str(label))
        return len(self._points) - 1

    def remove_last(self) -> None:
        if not self._points:
            return
        self._points.pop()
        self._labels.pop()

    def remove_all(self) -> None:
        self._points = []
        self._labels = []

    # -- read access --
    def point(self, index: int) -> np.ndarray:
        return self._points[index].copy()

    def label(self, index: int) -> str:
        return self._labels[index]

    def labels(self) -> List[str]:
        return list(self._labels)

    def points(self) -> np.ndarray:
        if not self._points:
            return np.zeros((0, 3), dtype=np.float64)
        return np.vstack(self._points)


class PointCloudMesh:
    """Point buffer plus singleton-vertex topology.

    Cell arrays use the legacy VTK connectivity layout (``[n, id0, .., idn-1, ...]``).
    Vertex cells are rebuilt from scratch after every structural change; lines
    and polys are dropped at that point and never regenerated.
    """

    kind = SinkKind.MESH

    def __init__(
        self,
        points: Optional[np.ndarray] = None,
        lines: Optional[np.ndarray] = None,
        polys: Optional[np.ndarray] = None,
        name: str = "",
    ) -> None:
        self.name = name
        if points is None:
            self._points = np.zeros((0, 3), dtype=np.float64)
        else:
            pts = np.asarray(points, dtype=np.float64)
            if pts.ndim != 2 or pts.shape[1] != 3:
                raise ValueError(f"points must have shape (N, 3), got {pts.shape}")
            self._points = pts.copy()
        self._verts = _singleton_vertex_cells(len(self._points))
        self._lines = _cell_array(lines)
        self._polys = _cell_array(polys)

    def __repr__(self) -> str:
        return f"PointCloudMesh(name={self.name!r}, count={self.count()})"

    @property
    def points(self) -> np.ndarray:
        return self._points.copy()

    @property
    def verts(self) -> np.ndarray:
        return self._verts.copy()

    @property
    def lines(self) -> np.ndarray:
        return self._lines.copy()

    @property
    def polys(self) -> np.ndarray:
        return self._polys.copy()

    def number_of_vertex_cells(self) -> int:
        return _count_cells(self._verts)

    def count(self) -> int:
        return len(self._points)

    def last_point(self) -> Optional[np.ndarray]:
        if len(self._points) == 0:
            return None
        return self._points[-1].copy()

    def append(self, point: np.ndarray, label: Optional[str] = None) -> int:
        p = as_point(point)
        new_points = np.vstack([self._points, p[None, :]])
        self._replace_points(new_points)
        return len(new_points) - 1

    def remove_last(self) -> None:
        if len(self._points) == 0:
            return
        new_points = self._points[:-1].copy()
        self._replace_points(new_points)

    def remove_all(self) -> None:
        self._points = np.zeros((0, 3), dtype=np.float64)
        self._verts = _singleton_vertex_cells(0)
        self._lines = _cell_array(None)
        self._polys = _cell_array(None)

    def _replace_points(self, new_points: np.ndarray) -> None:
        verts = _singleton_vertex_cells(len(new_points))
        empty = _cell_array(None)
        # assign only once every array is built
        self._points = new_points
        self._verts = verts
        self._lines = empty
        self._polys = empty.copy()

    def to_vtk_polydata(self) -> "vtk.vtkPolyData":
        if not _HAVE_VTK:
            raise RuntimeError("VTK is required to build vtkPolyData.")
        poly = vtk.vtkPolyData()
        pts = vtk.vtkPoints()
        pts.SetData(numpy_to_vtk(self._points.copy(), deep=True))
        poly.SetPoints(pts)
        verts = vtk.vtkCellArray()
        verts.ImportLegacyFormat(numpy_to_vtkIdTypeArray(self._verts.astype(np.int64), deep=True))
        poly.SetVerts(verts)
        return poly


def _singleton_vertex_cells(n: int) -> np.ndarray:
    cells = np.empty((n, 2), dtype=np.int64)
    cells[:, 0] = 1
    cells[:, 1] = np.arange(n, dtype=np.int64)
    return cells.reshape(-1)


def _cell_array(cells: Optional[Sequence[int]]) -> np.ndarray:
    if cells is None:
        return np.zeros((0,), dtype=np.int64)
    return np.asarray(cells, dtype=np.int64).reshape(-1).copy()


def _count_cells(cells: np.ndarray) -> int:
    n = 0
    i = 0
    while i < len(cells):
        i += int(cells[i]) + 1
        n += 1
    return n


def resolve_sink(target: object) -> PointSink:
    """Return ``target`` as a point sink or raise :class:`UnsupportedSinkTypeError`."""
    if isinstance(target, (LabeledPointList, PointCloudMesh)):
        return target
    raise UnsupportedSinkTypeError(
        f"Unsupported output type '{type(target).__name__}'; expected LabeledPointList or PointCloudMesh"
    )


def make_sink(kind: SinkKind | str, name: str = "") -> PointSink:
    kind = SinkKind(kind)
    if kind is SinkKind.LABELED_LIST:
        return LabeledPointList(name=name)
    return PointCloudMesh(name=name)
