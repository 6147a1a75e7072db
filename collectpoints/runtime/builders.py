from __future__ import annotations

from ..config import SessionConfig
from ..core.exporter import CsvWriter, LasWriter, NpzWriter, PlyWriter, VtpWriter
from ..core.sinks import PointSink, SinkKind, make_sink
from ..motion.frames import FrameTree
from ..motion.pose import Pose
from ..motion.trajectory import PolylineTrajectory, StaticTrajectory, Trajectory


def build_frames(cfg: SessionConfig) -> FrameTree:
    tree = FrameTree()
    for frame_cfg in cfg.frames:
        pose = Pose.from_xyz_rpy(frame_cfg.xyz, frame_cfg.rpy_deg)
        tree.add(frame_cfg.name, pose.as_matrix(), parent=frame_cfg.parent)
    return tree


def build_sink(cfg: SessionConfig) -> PointSink:
    return make_sink(SinkKind(cfg.output.kind), name=cfg.output.path.stem)


def build_trajectory(cfg: SessionConfig) -> Trajectory:
    motion_cfg = cfg.motion
    if motion_cfg.kind == "static":
        pose = Pose.from_xyz_rpy(motion_cfg.xyz, motion_cfg.rpy_deg)
        return StaticTrajectory(pose, hold_s=motion_cfg.hold_s)
    if motion_cfg.kind == "polyline":
        return PolylineTrajectory(
            motion_cfg.waypoints,
            speed_mm_s=motion_cfg.speed_mm_s,
            rpy_deg=motion_cfg.rpy_deg,
        )
    raise ValueError(f"Unsupported motion kind: {motion_cfg.kind}")


def build_writer(cfg: SessionConfig):
    out_cfg = cfg.output
    format_lower = out_cfg.format.lower()
    if format_lower in {"las", "laz"}:
        return LasWriter(str(out_cfg.path), compress=format_lower == "laz")
    if format_lower == "csv":
        return CsvWriter(str(out_cfg.path))
    if format_lower == "npz":
        return NpzWriter(str(out_cfg.path))
    if format_lower == "ply":
        return PlyWriter(str(out_cfg.path))
    if format_lower == "vtp":
        return VtpWriter(str(out_cfg.path))
    raise ValueError(f"Unsupported output format: {out_cfg.format}")
