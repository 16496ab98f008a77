"""Utility functions for composite operations."""

from typing import Union

import numpy as np


def divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Safe division for color ops."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = 1.0
    return c


def union(
    backdrop: Union[float, np.ndarray], source: Union[float, np.ndarray]
) -> Union[float, np.ndarray]:
    """Generalized union of shape. Exactly 1 where the backdrop is opaque."""
    return backdrop + source * (1.0 - backdrop)


def clip(x: np.ndarray) -> np.ndarray:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)
