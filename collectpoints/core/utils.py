from __future__ import annotations
import numpy as np
import logging

def get_logger(name: str = "collectpoints") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def as_point(p) -> np.ndarray:
    """Coerce anything array-like into a float64 (3,) point."""
    arr = np.asarray(p, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Point must have exactly 3 coordinates, got shape {arr.shape}")
    return arr

def as_homogeneous(m) -> np.ndarray:
    arr = np.array(m, dtype=np.float64)
    if arr.shape != (4, 4):
        raise ValueError(f"Transform must be a 4x4 matrix, got shape {arr.shape}")
    if not np.allclose(arr[3], (0.0, 0.0, 0.0, 1.0)):
        raise ValueError("Transform last row must be [0, 0, 0, 1]")
    return arr

def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))
