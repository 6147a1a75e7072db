from __future__ import annotations
from typing import Optional
import numpy as np

from .collection import CollectionConfig, CollectMode
from .errors import CollectPointsError, MissingInputError
from .policy import effective_minimum_distance, should_capture
from .resolver import resolve_point
from .sinks import LabeledPointList, PointCloudMesh, PointSink, SinkKind
from .utils import get_logger

_log = get_logger()


class CollectionController:
    """Adds and removes collected points for a :class:`CollectionConfig`.

    Public operations never raise for configuration problems: failures are
    logged and reported as a ``False`` return, and the output is left as it
    was. A point rejected by the distance gate is not a failure either, but
    still returns ``False`` because nothing was appended.
    """

    def add_point(self, config: Optional[CollectionConfig]) -> bool:
        try:
            return self._add_point(config)
        except CollectPointsError as exc:
            _log.error("%s Will not add any points.", exc)
            return False

    def remove_last_point(self, config: Optional[CollectionConfig]) -> bool:
        try:
            sink = self._require_sink(config)
        except CollectPointsError as exc:
            _log.error("%s Will not remove any points.", exc)
            return False
        sink.remove_last()
        return True

    def remove_all_points(self, config: Optional[CollectionConfig]) -> bool:
        try:
            sink = self._require_sink(config)
        except CollectPointsError as exc:
            _log.error("%s Will not remove any points.", exc)
            return False
        sink.remove_all()
        return True

    def on_input_changed(self, config: Optional[CollectionConfig]) -> None:
        """Capture a point when the sampling input moved in automatic mode."""
        if config is None:
            _log.error("No collection configuration set. Aborting.")
            return
        if config.mode != CollectMode.AUTOMATIC:
            return
        if config.output_sink is None or config.sampling_frame is None:
            _log.warning("Collection is not fully set up. Setting to manual collection.")
            config.set_mode_to_manual()
            return
        self.add_point(config)

    def number_of_points_in_output(self, config: Optional[CollectionConfig]) -> int:
        if config is None or config.output_sink is None:
            return 0
        return config.output_sink.count()

    # -- wiring --
    def watch(self, config: CollectionConfig) -> None:
        config.add_input_observer(self.on_input_changed)

    def unwatch(self, config: CollectionConfig) -> None:
        config.remove_input_observer(self.on_input_changed)

    # -- internals --
    def _require_sink(self, config: Optional[CollectionConfig]) -> PointSink:
        if config is None:
            raise MissingInputError("No collection configuration set.")
        if config.output_sink is None:
            raise MissingInputError("No output set.")
        return config.output_sink

    def _add_point(self, config: Optional[CollectionConfig]) -> bool:
        if config is None:
            raise MissingInputError("No collection configuration set.")
        if config.sampling_frame is None:
            raise MissingInputError("No sampling transform set.")
        sink = self._require_sink(config)

        point = resolve_point(config)
        if sink.kind is SinkKind.LABELED_LIST:
            return self._add_point_to_labeled_list(config, sink, point)  # type: ignore[arg-type]
        return self._add_point_to_mesh(config, sink, point)  # type: ignore[arg-type]

    def _add_point_to_labeled_list(self, config: CollectionConfig, sink: LabeledPointList, point: np.ndarray) -> bool:
        min_mm = effective_minimum_distance(config)
        if not should_capture(config.mode, min_mm, point, sink.last_point()):
            _log.debug("Point %s closer than %.3f mm to previous point; skipped.", point, min_mm)
            return False
        label = config.next_label()
        index = sink.append(point, label)
        # counter advances only when a point was actually appended
        config.advance_label_counter()
        _log.debug("Added %s at index %d: %s", label, index, point)
        return True

    def _add_point_to_mesh(self, config: CollectionConfig, sink: PointCloudMesh, point: np.ndarray) -> bool:
        min_mm = effective_minimum_distance(config)
        if not should_capture(config.mode, min_mm, point, sink.last_point()):
            _log.debug("Point %s closer than %.3f mm to previous point; skipped.", point, min_mm)
            return False
        index = sink.append(point)
        _log.debug("Added mesh point %d: %s", index, point)
        return True
