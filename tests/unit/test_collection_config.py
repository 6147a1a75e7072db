import logging

import pytest

from collectpoints.core.collection import CollectionConfig, CollectMode
from collectpoints.core.errors import (
    InvalidConfigurationError,
    UnrecognizedPersistedValueError,
    UnsupportedSinkTypeError,
)
from collectpoints.core.sinks import LabeledPointList, PointCloudMesh
from collectpoints.motion.frames import FrameTree


@pytest.fixture
def tree() -> FrameTree:
    t = FrameTree()
    t.add("stylus")
    t.add("reference")
    return t


def test_defaults() -> None:
    cfg = CollectionConfig()
    assert cfg.mode == CollectMode.MANUAL
    assert cfg.label_base == "P"
    assert cfg.label_counter == 0
    assert cfg.minimum_distance_mm == 10.0
    assert cfg.sampling_frame is None
    assert cfg.anchor_frame is None
    assert cfg.output_sink is None
    assert cfg.next_label() == "P0"


def test_anchor_equal_to_sampling_is_rejected(tree: FrameTree, caplog) -> None:
    stylus, reference = tree.get("stylus"), tree.get("reference")
    cfg = CollectionConfig(sampling_frame=stylus, anchor_frame=reference)
    with caplog.at_level(logging.ERROR, logger="collectpoints"):
        assert not cfg.set_anchor_frame(stylus)
    assert cfg.anchor_frame is reference
    assert "cannot be the same" in caplog.text


def test_sampling_equal_to_anchor_is_rejected(tree: FrameTree) -> None:
    stylus, reference = tree.get("stylus"), tree.get("reference")
    cfg = CollectionConfig(sampling_frame=stylus, anchor_frame=reference)
    assert not cfg.set_sampling_frame(reference)
    assert cfg.sampling_frame is stylus


def test_constructor_rejects_identical_frames(tree: FrameTree) -> None:
    with pytest.raises(InvalidConfigurationError):
        CollectionConfig(sampling_frame=tree.get("stylus"), anchor_frame=tree.get("stylus"))


def test_constructor_rejects_unsupported_output() -> None:
    with pytest.raises(UnsupportedSinkTypeError):
        CollectionConfig(output=object())


def test_set_output_rejects_unsupported_target() -> None:
    sink = LabeledPointList()
    cfg = CollectionConfig(output=sink)
    assert not cfg.set_output("not a sink")
    assert cfg.output_sink is sink
    mesh = PointCloudMesh()
    assert cfg.set_output(mesh)
    assert cfg.output_sink is mesh
    assert cfg.set_output(None)
    assert cfg.output_sink is None


def test_scalar_setters_reject_negative_values() -> None:
    cfg = CollectionConfig(minimum_distance_mm=2.0, label_counter=3)
    assert not cfg.set_minimum_distance_mm(-1.0)
    assert cfg.minimum_distance_mm == 2.0
    assert not cfg.set_label_counter(-1)
    assert cfg.label_counter == 3
    with pytest.raises(InvalidConfigurationError):
        CollectionConfig(minimum_distance_mm=-0.5)


def test_mode_from_string() -> None:
    assert CollectMode.from_string("automatic") is CollectMode.AUTOMATIC
    with pytest.raises(UnrecognizedPersistedValueError):
        CollectMode.from_string("continuous")
    cfg = CollectionConfig()
    cfg.set_mode("automatic")
    assert cfg.mode == CollectMode.AUTOMATIC
    cfg.set_mode_to_manual()
    assert cfg.mode == CollectMode.MANUAL


def test_sampling_assignment_and_motion_fire_input_changed(tree: FrameTree) -> None:
    stylus, reference = tree.get("stylus"), tree.get("reference")
    cfg = CollectionConfig()
    events: list[CollectionConfig] = []
    cfg.add_input_observer(events.append)

    assert cfg.set_sampling_frame(stylus)
    assert len(events) == 1
    # unchanged reference is not an event
    assert cfg.set_sampling_frame(stylus)
    assert len(events) == 1

    stylus.set_matrix(stylus.matrix)
    assert len(events) == 2

    # anchor motion is not an input change
    cfg.set_anchor_frame(reference)
    reference.set_matrix(reference.matrix)
    assert len(events) == 2


def test_replaced_sampling_frame_is_no_longer_observed(tree: FrameTree) -> None:
    stylus, reference = tree.get("stylus"), tree.get("reference")
    cfg = CollectionConfig(sampling_frame=stylus)
    events: list[CollectionConfig] = []
    cfg.add_input_observer(events.append)
    cfg.set_sampling_frame(reference)
    events.clear()
    stylus.set_matrix(stylus.matrix)
    assert events == []
    reference.set_matrix(reference.matrix)
    assert events == [cfg]
    cfg.remove_input_observer(events.append)
    reference.set_matrix(reference.matrix)
    assert events == [cfg]
