import numpy as np
import pytest

from collectpoints.core.errors import UnsupportedSinkTypeError
from collectpoints.core.sinks import (
    LabeledPointList,
    PointCloudMesh,
    PointSink,
    SinkKind,
    make_sink,
    resolve_sink,
)


def test_labeled_list_append_and_remove_order() -> None:
    sink = LabeledPointList()
    assert sink.last_point() is None
    assert sink.append(np.array([1.0, 2.0, 3.0]), "A") == 0
    assert sink.append([4.0, 5.0, 6.0], "B") == 1
    assert sink.count() == 2
    np.testing.assert_allclose(sink.last_point(), [4.0, 5.0, 6.0])
    assert sink.labels() == ["A", "B"]

    sink.remove_last()
    assert sink.labels() == ["A"]
    np.testing.assert_allclose(sink.points(), [[1.0, 2.0, 3.0]])

    sink.remove_all()
    assert sink.count() == 0
    assert sink.points().shape == (0, 3)


def test_labeled_list_remove_last_on_empty_is_noop() -> None:
    sink = LabeledPointList()
    sink.remove_last()
    assert sink.count() == 0


def test_labeled_list_rejects_bad_point_without_mutation() -> None:
    sink = LabeledPointList()
    sink.append([0.0, 0.0, 0.0], "P0")
    with pytest.raises(ValueError):
        sink.append([1.0, 2.0], "P1")
    assert sink.count() == 1
    assert sink.labels() == ["P0"]


def test_last_point_is_a_copy() -> None:
    sink = LabeledPointList()
    sink.append([1.0, 1.0, 1.0], "P0")
    p = sink.last_point()
    p[0] = 99.0
    np.testing.assert_allclose(sink.point(0), [1.0, 1.0, 1.0])


def test_mesh_topology_tracks_points() -> None:
    mesh = PointCloudMesh()
    for i in range(4):
        assert mesh.append([float(i), 0.0, 0.0]) == i
        assert mesh.number_of_vertex_cells() == mesh.count()
    np.testing.assert_array_equal(mesh.verts, [1, 0, 1, 1, 1, 2, 1, 3])

    mesh.remove_last()
    assert mesh.count() == 3
    assert mesh.number_of_vertex_cells() == 3
    np.testing.assert_allclose(mesh.last_point(), [2.0, 0.0, 0.0])


def test_mesh_drops_edges_and_faces_on_change() -> None:
    points = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    mesh = PointCloudMesh(points=points, lines=[2, 0, 1], polys=[3, 0, 1, 2])
    assert mesh.lines.size == 3
    assert mesh.polys.size == 4

    mesh.append([5.0, 5.0, 5.0])
    assert mesh.lines.size == 0
    assert mesh.polys.size == 0
    assert mesh.number_of_vertex_cells() == 4


def test_mesh_remove_last_rebuilds_topology() -> None:
    mesh = PointCloudMesh(points=np.eye(3), polys=[3, 0, 1, 2])
    mesh.remove_last()
    assert mesh.count() == 2
    assert mesh.number_of_vertex_cells() == 2
    assert mesh.polys.size == 0


def test_mesh_remove_all_clears_everything() -> None:
    mesh = PointCloudMesh(points=np.eye(3), lines=[2, 0, 1])
    mesh.remove_all()
    assert mesh.count() == 0
    assert mesh.last_point() is None
    assert mesh.verts.size == 0
    assert mesh.lines.size == 0
    assert mesh.polys.size == 0


def test_mesh_remove_last_on_empty_is_noop() -> None:
    mesh = PointCloudMesh()
    mesh.remove_last()
    assert mesh.count() == 0
    assert mesh.number_of_vertex_cells() == 0


def test_mesh_rejects_bad_points_shape() -> None:
    with pytest.raises(ValueError):
        PointCloudMesh(points=np.zeros((3, 2)))


def test_resolve_sink_accepts_known_variants() -> None:
    for sink in (LabeledPointList(), PointCloudMesh()):
        assert resolve_sink(sink) is sink
        assert isinstance(sink, PointSink)


@pytest.mark.parametrize("target", [object(), [], "markups", np.zeros((2, 3))])
def test_resolve_sink_rejects_unknown_targets(target) -> None:
    with pytest.raises(UnsupportedSinkTypeError):
        resolve_sink(target)


def test_make_sink_by_kind() -> None:
    assert isinstance(make_sink("markups"), LabeledPointList)
    assert isinstance(make_sink(SinkKind.MESH), PointCloudMesh)


def test_mesh_to_vtk_polydata() -> None:
    pytest.importorskip("vtk")
    mesh = PointCloudMesh()
    mesh.append([1.0, 2.0, 3.0])
    mesh.append([4.0, 5.0, 6.0])
    poly = mesh.to_vtk_polydata()
    assert poly.GetNumberOfPoints() == 2
    assert poly.GetNumberOfVerts() == 2
    assert poly.GetNumberOfLines() == 0
    assert poly.GetNumberOfPolys() == 0
