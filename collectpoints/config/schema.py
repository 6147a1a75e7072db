from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.collection import (
    DEFAULT_LABEL_BASE,
    DEFAULT_MINIMUM_DISTANCE_MM,
    CollectionConfig,
    CollectMode,
)
from ..core.errors import UnrecognizedPersistedValueError
from ..core.utils import get_logger
from ..motion.frames import FrameTree

_log = get_logger()


class CollectionSettings(BaseModel):
    """Persisted scalar fields and references of a collection session."""

    mode: Literal["manual", "automatic"] = "manual"
    label_base: str = DEFAULT_LABEL_BASE
    label_counter: int = Field(default=0, ge=0)
    minimum_distance_mm: float = Field(default=DEFAULT_MINIMUM_DISTANCE_MM, ge=0.0)
    sampling_frame: Optional[str] = None
    anchor_frame: Optional[str] = None
    output: Optional[str] = None

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: object) -> str:
        if isinstance(value, CollectMode):
            return value.value
        try:
            return CollectMode.from_string(str(value)).value
        except UnrecognizedPersistedValueError:
            _log.warning("Unrecognized collect mode read from settings: %r. Setting to manual.", value)
            return CollectMode.MANUAL.value

    @model_validator(mode="after")
    def _distinct_frames(self) -> "CollectionSettings":
        if self.sampling_frame is not None and self.sampling_frame == self.anchor_frame:
            raise ValueError("Anchor and sampling transforms cannot be the same.")
        return self


class FrameConfig(BaseModel):
    name: str
    parent: Optional[str] = None
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)


class StaticMotionConfig(BaseModel):
    kind: Literal["static"]
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)
    hold_s: float = Field(default=0.0, ge=0.0)
    rate_hz: float = Field(default=1.0, gt=0.0)


class PolylineMotionConfig(BaseModel):
    kind: Literal["polyline"]
    waypoints: List[tuple[float, float, float]]
    speed_mm_s: float = Field(gt=0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rate_hz: float = Field(default=10.0, gt=0.0)

    @model_validator(mode="after")
    def _enough_waypoints(self) -> "PolylineMotionConfig":
        if len(self.waypoints) < 2:
            raise ValueError("polyline motion requires at least two waypoints")
        return self


MotionConfig = Annotated[
    Union[StaticMotionConfig, PolylineMotionConfig],
    Field(discriminator="kind"),
]


OutputFormat = Literal["csv", "ply", "npz", "las", "laz", "vtp"]


class OutputConfig(BaseModel):
    kind: Literal["markups", "model"] = "markups"
    path: Path
    format: OutputFormat = "csv"

    @model_validator(mode="after")
    def _validate_format(self) -> "OutputConfig":
        if self.kind == "markups" and self.format not in {"csv", "npz"}:
            raise ValueError(f"markups output supports csv or npz, not '{self.format}'")
        return self


class SessionConfig(BaseModel):
    frames: List[FrameConfig] = Field(default_factory=list)
    sampling_frame: str
    anchor_frame: Optional[str] = None
    collection: CollectionSettings = CollectionSettings()
    motion: MotionConfig
    output: OutputConfig

    @model_validator(mode="after")
    def _check_references(self) -> "SessionConfig":
        names = [f.name for f in self.frames]
        if len(set(names)) != len(names):
            raise ValueError("Frame names must be unique")
        if self.sampling_frame not in names:
            raise ValueError(f"Sampling frame '{self.sampling_frame}' is not declared in frames")
        if self.anchor_frame is not None:
            if self.anchor_frame not in names:
                raise ValueError(f"Anchor frame '{self.anchor_frame}' is not declared in frames")
            if self.anchor_frame == self.sampling_frame:
                raise ValueError("Anchor and sampling transforms cannot be the same.")
        # frame references may be repeated under collection, but must agree
        for key, top in (("sampling_frame", self.sampling_frame), ("anchor_frame", self.anchor_frame)):
            nested = getattr(self.collection, key)
            if nested is not None and nested != top:
                raise ValueError(f"collection.{key} '{nested}' does not match {key} '{top}'")
        return self


def load_config(path: str | Path) -> SessionConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = SessionConfig.model_validate(data)
    if not cfg.output.path.is_absolute():
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg


def load_settings(path: str | Path) -> CollectionSettings:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Settings root must be a mapping.")
    return CollectionSettings.model_validate(data)


def save_settings(settings: CollectionSettings, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.model_dump(mode="json"), f, sort_keys=False)


def settings_from_config(config: CollectionConfig, output_name: Optional[str] = None) -> CollectionSettings:
    return CollectionSettings(
        mode=config.mode.value,
        label_base=config.label_base,
        label_counter=config.label_counter,
        minimum_distance_mm=config.minimum_distance_mm,
        sampling_frame=config.sampling_frame.name if config.sampling_frame is not None else None,
        anchor_frame=config.anchor_frame.name if config.anchor_frame is not None else None,
        output=output_name,
    )


def apply_settings(config: CollectionConfig, settings: CollectionSettings, frames: Optional[FrameTree] = None) -> None:
    """Copy persisted values onto ``config``.

    Frame references are only applied when a :class:`FrameTree` is given;
    names missing from the tree are logged and left unset.
    """
    config.set_mode(settings.mode)
    config.label_base = settings.label_base
    config.set_label_counter(settings.label_counter)
    config.set_minimum_distance_mm(settings.minimum_distance_mm)
    if frames is None:
        return
    for name, setter in (
        (settings.sampling_frame, config.set_sampling_frame),
        (settings.anchor_frame, config.set_anchor_frame),
    ):
        if name is None:
            continue
        if name not in frames:
            _log.warning("Frame '%s' referenced by settings does not exist.", name)
            continue
        setter(frames.get(name))
