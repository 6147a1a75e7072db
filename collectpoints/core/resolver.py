from __future__ import annotations
import numpy as np

from .errors import MissingInputError


def resolve_point(config) -> np.ndarray:
    """Position of the sampling frame origin, expressed in the anchor frame.

    Without an anchor the position is in world coordinates. Both transforms are
    read at call time; nothing is cached between calls.

    Raises
    ------
    MissingInputError
        ``config`` or its sampling frame is unset.
    TransformUnresolvedError
        A frame chain is broken (detached frame, missing parent, cycle).
    """
    if config is None:
        raise MissingInputError("No collection configuration set. Cannot compute point coordinates.")
    sampling = config.sampling_frame
    if sampling is None:
        raise MissingInputError("No sampling transform set. Cannot compute point coordinates.")

    anchor = config.anchor_frame
    if anchor is None:
        m = sampling.matrix_to_world()
    else:
        m = sampling.matrix_to_node(anchor)
    return translation_of(m)


def translation_of(m: np.ndarray) -> np.ndarray:
    return np.array([m[0, 3], m[1, 3], m[2, 3]], dtype=np.float64)
