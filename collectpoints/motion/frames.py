"""Named coordinate frames arranged in a parent/child tree.

This is the stand-in for a host application's transform hierarchy. Each
:class:`TransformNode` stores a local-to-parent 4x4 matrix and refers to its
parent by name, so removing a frame from the tree leaves its children with a
broken chain that fails to resolve.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Optional

import numpy as np

from ..core.errors import TransformUnresolvedError
from ..core.utils import as_homogeneous, get_logger
from .pose import Pose

_log = get_logger()

FrameObserver = Callable[["TransformNode"], None]


class TransformNode:
    """A single frame in a :class:`FrameTree`."""

    def __init__(self, tree: "FrameTree", name: str, matrix: Optional[np.ndarray] = None,
                 parent_name: Optional[str] = None) -> None:
        self._tree: Optional[FrameTree] = tree
        self.name = name
        self.parent_name = parent_name
        self._matrix = as_homogeneous(np.eye(4) if matrix is None else matrix)
        self._observers: List[FrameObserver] = []

    def __repr__(self) -> str:
        return f"TransformNode(name={self.name!r}, parent={self.parent_name!r})"

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    @property
    def tree(self) -> Optional["FrameTree"]:
        return self._tree

    def set_matrix(self, matrix: np.ndarray) -> None:
        self._matrix = as_homogeneous(matrix)
        self._notify_subtree()

    def set_pose(self, pose: Pose) -> None:
        self.set_matrix(pose.as_matrix())

    def set_parent(self, parent_name: Optional[str]) -> None:
        if parent_name == self.parent_name:
            return
        self.parent_name = parent_name
        self._notify_subtree()

    # -- observers --
    def add_observer(self, callback: FrameObserver) -> None:
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: FrameObserver) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self) -> None:
        for cb in list(self._observers):
            cb(self)

    def _notify_subtree(self) -> None:
        if self._tree is None:
            self._notify()
            return
        for node in self._tree.subtree(self.name):
            node._notify()

    # -- resolution --
    def matrix_to_world(self) -> np.ndarray:
        if self._tree is None:
            raise TransformUnresolvedError(f"Frame '{self.name}' is not part of a frame tree")
        return self._tree.matrix_to_world(self.name)

    def matrix_to_node(self, other: "TransformNode") -> np.ndarray:
        """Matrix mapping this frame's coordinates into ``other``'s coordinates."""
        to_world = self.matrix_to_world()
        other_to_world = other.matrix_to_world()
        try:
            world_to_other = np.linalg.inv(other_to_world)
        except np.linalg.LinAlgError:
            raise TransformUnresolvedError(f"Transform of frame '{other.name}' is not invertible") from None
        return world_to_other @ to_world


class FrameTree:
    def __init__(self) -> None:
        self._nodes: Dict[str, TransformNode] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def names(self) -> List[str]:
        return list(self._nodes)

    def add(self, name: str, matrix: Optional[np.ndarray] = None, parent: Optional[str] = None) -> TransformNode:
        if not name:
            raise ValueError("Frame name must be non-empty")
        if name in self._nodes:
            raise ValueError(f"Frame '{name}' already exists")
        node = TransformNode(self, name, matrix=matrix, parent_name=parent)
        self._nodes[name] = node
        return node

    def get(self, name: str) -> TransformNode:
        try:
            return self._nodes[name]
        except KeyError:
            raise KeyError(f"Unknown frame '{name}'") from None

    def remove(self, name: str) -> None:
        node = self._nodes.pop(name, None)
        if node is None:
            return
        node._tree = None
        _log.debug("Removed frame '%s'", name)

    def subtree(self, name: str) -> Iterator[TransformNode]:
        """Yield ``name`` and every frame whose parent chain passes through it."""
        for node in list(self._nodes.values()):
            if node.name == name or name in self._ancestors(node):
                yield node

    def _ancestors(self, node: TransformNode) -> List[str]:
        seen: List[str] = []
        parent = node.parent_name
        while parent is not None and parent in self._nodes and parent not in seen:
            seen.append(parent)
            parent = self._nodes[parent].parent_name
        return seen

    def matrix_to_world(self, name: str) -> np.ndarray:
        if name not in self._nodes:
            raise TransformUnresolvedError(f"Frame '{name}' is not registered")
        m = np.eye(4)
        visited: set[str] = set()
        current: Optional[str] = name
        while current is not None:
            if current in visited:
                raise TransformUnresolvedError(f"Cycle in parent chain of frame '{name}'")
            visited.add(current)
            node = self._nodes.get(current)
            if node is None:
                raise TransformUnresolvedError(
                    f"Frame '{name}' depends on missing parent frame '{current}'"
                )
            m = node._matrix @ m
            current = node.parent_name
        return m
