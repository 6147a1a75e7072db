from __future__ import annotations
from enum import Enum
from typing import Callable, List, Optional

from ..motion.frames import TransformNode
from .errors import (
    CollectPointsError,
    InvalidConfigurationError,
    UnrecognizedPersistedValueError,
)
from .sinks import PointSink, resolve_sink
from .utils import get_logger

_log = get_logger()

DEFAULT_LABEL_BASE = "P"
DEFAULT_MINIMUM_DISTANCE_MM = 10.0


class CollectMode(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"

    @classmethod
    def from_string(cls, value: str) -> "CollectMode":
        for mode in cls:
            if mode.value == value:
                return mode
        raise UnrecognizedPersistedValueError(f"Unrecognized collect mode '{value}'")


InputObserver = Callable[["CollectionConfig"], None]


class CollectionConfig:
    """Parameters of one collection session.

    Frame and output references are changed through the ``set_*`` methods,
    which refuse (and log) assignments that would break an invariant and
    return ``False`` in that case. Observers registered with
    :meth:`add_input_observer` are called whenever the sampling frame is
    reassigned or moves.
    """

    def __init__(
        self,
        sampling_frame: Optional[TransformNode] = None,
        anchor_frame: Optional[TransformNode] = None,
        output: Optional[object] = None,
        mode: CollectMode | str = CollectMode.MANUAL,
        minimum_distance_mm: float = DEFAULT_MINIMUM_DISTANCE_MM,
        label_base: str = DEFAULT_LABEL_BASE,
        label_counter: int = 0,
    ) -> None:
        self._sampling_frame: Optional[TransformNode] = None
        self._anchor_frame: Optional[TransformNode] = None
        self._output_sink: Optional[PointSink] = None
        self._input_observers: List[InputObserver] = []
        self.mode = CollectMode(mode)
        self.label_base = label_base
        if minimum_distance_mm < 0:
            raise InvalidConfigurationError("minimum_distance_mm must be non-negative")
        self._minimum_distance_mm = float(minimum_distance_mm)
        if label_counter < 0:
            raise InvalidConfigurationError("label_counter must be non-negative")
        self._label_counter = int(label_counter)

        if anchor_frame is not None and anchor_frame is sampling_frame:
            raise InvalidConfigurationError("Anchor and sampling transforms cannot be the same.")
        self._sampling_frame = sampling_frame
        self._anchor_frame = anchor_frame
        if sampling_frame is not None:
            sampling_frame.add_observer(self._on_sampling_frame_moved)
        if output is not None:
            self._output_sink = resolve_sink(output)

    def __repr__(self) -> str:
        return (
            f"CollectionConfig(sampling={_frame_name(self._sampling_frame)!r}, "
            f"anchor={_frame_name(self._anchor_frame)!r}, output={self._output_sink!r}, "
            f"mode={self.mode.value!r}, minimum_distance_mm={self._minimum_distance_mm}, "
            f"label_base={self.label_base!r}, label_counter={self._label_counter})"
        )

    # -- references --
    @property
    def sampling_frame(self) -> Optional[TransformNode]:
        return self._sampling_frame

    @property
    def anchor_frame(self) -> Optional[TransformNode]:
        return self._anchor_frame

    @property
    def output_sink(self) -> Optional[PointSink]:
        return self._output_sink

    def set_sampling_frame(self, frame: Optional[TransformNode]) -> bool:
        if frame is self._sampling_frame:
            return True
        if frame is not None and frame is self._anchor_frame:
            _log.error("Anchor and sampling transforms cannot be the same.")
            return False
        if self._sampling_frame is not None:
            self._sampling_frame.remove_observer(self._on_sampling_frame_moved)
        self._sampling_frame = frame
        if frame is not None:
            frame.add_observer(self._on_sampling_frame_moved)
        self._fire_input_changed()
        return True

    def set_anchor_frame(self, frame: Optional[TransformNode]) -> bool:
        if frame is self._anchor_frame:
            return True
        if frame is not None and frame is self._sampling_frame:
            _log.error("Anchor and sampling transforms cannot be the same.")
            return False
        self._anchor_frame = frame
        return True

    def set_output(self, target: Optional[object]) -> bool:
        if target is None:
            self._output_sink = None
            return True
        try:
            sink = resolve_sink(target)
        except CollectPointsError as exc:
            _log.error("%s Output left unchanged.", exc)
            return False
        self._output_sink = sink
        return True

    # -- scalar fields --
    @property
    def minimum_distance_mm(self) -> float:
        return self._minimum_distance_mm

    def set_minimum_distance_mm(self, value: float) -> bool:
        if value < 0:
            _log.error("Minimum distance must be non-negative, got %s.", value)
            return False
        self._minimum_distance_mm = float(value)
        return True

    @property
    def label_counter(self) -> int:
        return self._label_counter

    def set_label_counter(self, value: int) -> bool:
        if value < 0:
            _log.error("Label counter must be non-negative, got %s.", value)
            return False
        self._label_counter = int(value)
        return True

    def next_label(self) -> str:
        return f"{self.label_base}{self._label_counter}"

    def advance_label_counter(self) -> None:
        self._label_counter += 1

    def set_mode(self, mode: CollectMode | str) -> None:
        self.mode = CollectMode(mode)

    def set_mode_to_manual(self) -> None:
        self.mode = CollectMode.MANUAL

    def set_mode_to_automatic(self) -> None:
        self.mode = CollectMode.AUTOMATIC

    # -- notifications --
    def add_input_observer(self, callback: InputObserver) -> None:
        if callback not in self._input_observers:
            self._input_observers.append(callback)

    def remove_input_observer(self, callback: InputObserver) -> None:
        if callback in self._input_observers:
            self._input_observers.remove(callback)

    def _on_sampling_frame_moved(self, frame: TransformNode) -> None:
        if frame is self._sampling_frame:
            self._fire_input_changed()

    def _fire_input_changed(self) -> None:
        for cb in list(self._input_observers):
            cb(self)


def _frame_name(frame: Optional[TransformNode]) -> Optional[str]:
    return frame.name if frame is not None else None
