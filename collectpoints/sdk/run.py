from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from ..config import SessionConfig, apply_settings, load_config
from ..core.collection import CollectionConfig, CollectMode
from ..core.controller import CollectionController
from ..core.pointcloud import PointBatch
from ..core.sinks import PointSink
from ..core.utils import get_logger
from ..runtime.builders import build_frames, build_sink, build_trajectory, build_writer

_log = get_logger()

_FORMAT_BY_SUFFIX = {".csv": "csv", ".ply": "ply", ".npz": "npz", ".las": "las", ".laz": "laz", ".vtp": "vtp"}


@dataclass(frozen=True)
class SessionResult:
    """Summary of a collection session replayed from a configuration."""

    stats: Dict[str, int]
    output_path: Path
    config: SessionConfig
    sink: PointSink


def collect_from_config(
    config: Union[str, Path, SessionConfig],
    *,
    output: Optional[Path] = None,
    mode: Optional[str] = None,
) -> SessionResult:
    """Replay the scripted sampling-frame motion and collect points.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~collectpoints.config.schema.SessionConfig`.
    output:
        Optional override for the output file. The extension drives the format.
    mode:
        Optional override for the collection mode (``"manual"`` or ``"automatic"``).
        In automatic mode points are captured through the sampling frame's
        change notifications; in manual mode one capture is requested per step.

    Returns
    -------
    SessionResult
        Step/point/label statistics, the resolved output path, the resolved
        configuration and the filled sink.
    """

    cfg = load_config(config) if not isinstance(config, SessionConfig) else config.model_copy(deep=True)

    if mode is not None:
        cfg.collection.mode = CollectMode(mode).value
    if output is not None:
        out_path = Path(output).resolve()
        ext = out_path.suffix.lower()
        if ext not in _FORMAT_BY_SUFFIX:
            raise ValueError(f"Unsupported output extension '{ext}'")
        cfg.output.path = out_path
        cfg.output.format = _FORMAT_BY_SUFFIX[ext]
        # re-run the output validators
        cfg.output = type(cfg.output).model_validate(cfg.output.model_dump())
    else:
        cfg.output.path = Path(cfg.output.path).resolve()

    frames = build_frames(cfg)
    sink = build_sink(cfg)
    trajectory = build_trajectory(cfg)
    writer = build_writer(cfg)

    collection = CollectionConfig(output=sink)
    apply_settings(collection, cfg.collection)
    sampling = frames.get(cfg.sampling_frame)
    if cfg.anchor_frame is not None:
        collection.set_anchor_frame(frames.get(cfg.anchor_frame))

    controller = CollectionController()
    steps = 0
    # attach the sampling frame before watching so binding does not capture
    sampling.set_pose(trajectory.sample(trajectory.start_time_s))
    collection.set_sampling_frame(sampling)
    controller.watch(collection)
    try:
        for t in trajectory.sample_times(cfg.motion.rate_hz):
            steps += 1
            sampling.set_pose(trajectory.sample(float(t)))
            if collection.mode == CollectMode.MANUAL:
                controller.add_point(collection)
    finally:
        controller.unwatch(collection)

    writer.write_batch(PointBatch.from_sink(sink))
    writer.close()

    stats = {
        "steps": steps,
        "points": controller.number_of_points_in_output(collection),
        "label_counter": collection.label_counter,
    }
    _log.info("Session finished: %d steps → %d points", steps, stats["points"])
    return SessionResult(stats=stats, output_path=Path(cfg.output.path), config=cfg, sink=sink)
