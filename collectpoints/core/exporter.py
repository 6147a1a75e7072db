from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, List
import csv
import numpy as np
import pathlib

import laspy  # type: ignore
from .pointcloud import PointBatch
from .sinks import PointCloudMesh
from .utils import get_logger

_log = get_logger()


class _BufferedWriter:
    """Collects batches and writes them in one go on close."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write(path, self._batches)
        self._batches.clear()

    def _write(self, path: pathlib.Path, batches: List[PointBatch]) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    @staticmethod
    def _stack(batches: List[PointBatch]) -> np.ndarray:
        if not batches:
            return np.zeros((0, 3), dtype=np.float64)
        return np.vstack([b.xyz for b in batches])

    @staticmethod
    def _labels(batches: List[PointBatch]) -> List[str]:
        labels: List[str] = []
        for b in batches:
            if "label" in b.attrs:
                labels.extend(str(v) for v in b.attrs["label"])
            else:
                labels.extend("" for _ in range(len(b.xyz)))
        return labels


class CsvWriter(_BufferedWriter):
    """``label,x,y,z`` rows, one per collected point."""

    def _write(self, path: pathlib.Path, batches: List[PointBatch]) -> None:
        xyz = self._stack(batches)
        labels = self._labels(batches)
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(["label", "x", "y", "z"])
            for label, (x, y, z) in zip(labels, xyz):
                w.writerow([label, repr(float(x)), repr(float(y)), repr(float(z))])
        _log.info("Wrote %d points to %s", len(xyz), path.name)


class PlyWriter(_BufferedWriter):
    """ASCII PLY with xyz vertices and no faces."""

    def _write(self, path: pathlib.Path, batches: List[PointBatch]) -> None:
        xyz = self._stack(batches)
        with open(path, "w", encoding="utf-8") as f:
            n = len(xyz)
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {n}\n")
            f.write("property double x\nproperty double y\nproperty double z\n")
            f.write("end_header\n")
            for x, y, z in xyz:
                f.write(f"{float(x)} {float(y)} {float(z)}\n")
        _log.info("Wrote %d points to %s", len(xyz), path.name)


class NpzWriter(_BufferedWriter):
    def _write(self, path: pathlib.Path, batches: List[PointBatch]) -> None:
        xyz = self._stack(batches)
        out = {"xyz": xyz, "label": np.asarray(self._labels(batches), dtype=str)}
        np.savez_compressed(path, **out)
        _log.info("Wrote %d points to %s", len(xyz), path.name)


@dataclass
class LasWriter:
    """LAS/LAZ writer using laspy (v2+).

    Coordinates keep 1e-3 precision by default. Capture order is stored in a
    ``capture_index`` extra dimension.
    """
    path: str
    point_format: int = 6
    compress: bool = False
    scale: tuple[float, float, float] = (1e-3, 1e-3, 1e-3)
    offset: Optional[tuple[float, float, float]] = None

    def __post_init__(self) -> None:
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        xyz = np.vstack([b.xyz for b in self._batches]) if self._batches else np.zeros((0, 3))
        hdr = laspy.LasHeader(point_format=laspy.PointFormat(self.point_format), version="1.4")
        hdr.scales = self.scale
        if self.offset is None:
            mn = np.min(xyz, axis=0) if len(xyz) else np.zeros(3)
            hdr.offsets = (float(mn[0]), float(mn[1]), float(mn[2]))
        else:
            hdr.offsets = self.offset
        hdr.add_extra_dim(laspy.ExtraBytesParams(name="capture_index", type="uint32"))

        las = laspy.LasData(hdr)
        las.x = xyz[:, 0]
        las.y = xyz[:, 1]
        las.z = xyz[:, 2]
        las.capture_index = np.arange(len(xyz), dtype=np.uint32)

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        las.write(str(path), do_compress=self.compress)
        self._batches.clear()
        _log.info("Wrote %d points to %s (PF=%d, compress=%s)", len(xyz), path.name, self.point_format, self.compress)


class VtpWriter(_BufferedWriter):
    """VTK XML polydata with one vertex cell per point."""

    def _write(self, path: pathlib.Path, batches: List[PointBatch]) -> None:
        xyz = self._stack(batches)
        poly = PointCloudMesh(points=xyz).to_vtk_polydata()

        import vtk  # local import
        writer = vtk.vtkXMLPolyDataWriter()
        writer.SetFileName(str(path))
        writer.SetInputData(poly)
        writer.Write()
        _log.info("Wrote %d points to %s", len(xyz), path.name)
