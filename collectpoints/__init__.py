"""collectpoints – incremental point collection from a tracked coordinate frame.

This package contains:
- FrameTree / TransformNode (motion.frames)
- Transform resolver & capture policy (core.resolver, core.policy)
- Point sinks: LabeledPointList and PointCloudMesh (core.sinks)
- CollectionConfig & CollectionController (core.collection, core.controller)
- CSV/PLY/NPZ/LAS/VTP writers (core.exporter)
- Scripted session replay (sdk, cli)
"""

from .core.errors import (
    CollectPointsError, MissingInputError, TransformUnresolvedError,
    UnsupportedSinkTypeError, InvalidConfigurationError, UnrecognizedPersistedValueError,
)
from .core.sinks import SinkKind, PointSink, LabeledPointList, PointCloudMesh, resolve_sink
from .core.collection import CollectMode, CollectionConfig
from .core.resolver import resolve_point
from .core.policy import should_capture, effective_minimum_distance
from .core.controller import CollectionController
from .core.pointcloud import PointBatch
from .core.exporter import CsvWriter, PlyWriter, NpzWriter, LasWriter, VtpWriter
from .motion.frames import FrameTree, TransformNode
from .motion.pose import Pose
from .motion.trajectory import Trajectory, StaticTrajectory, PolylineTrajectory
