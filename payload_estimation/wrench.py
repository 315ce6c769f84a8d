"""
Wrench - 6-component spatial force [fx, fy, fz, tx, ty, tz]

A wrench set holds one wrench per movable joint of the chain. Each wrench
acts on the last link moved by that joint, at the link origin, expressed in
the link frame.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .errors import DimensionError


@dataclass(frozen=True)
class Wrench:
    force: Sequence[float] = (0.0, 0.0, 0.0)
    torque: Sequence[float] = (0.0, 0.0, 0.0)

    def as_vector(self):
        return np.concatenate([
            np.asarray(self.force, dtype=float).reshape(3),
            np.asarray(self.torque, dtype=float).reshape(3),
        ])


def zero_wrenches(dof):
    """All-zero wrench set, shape (dof, 6)"""
    return np.zeros((dof, 6))


def as_wrench_array(wrenches, dof):
    """
    Normalize a wrench set to a (dof, 6) float array.

    Args:
        wrenches: None, a sequence of Wrench, or anything array-like of
            shape (dof, 6)
        dof: number of joints N

    Raises:
        DimensionError: wrong number of wrenches, or a wrench without
            exactly 6 components
    """
    if wrenches is None:
        return zero_wrenches(dof)

    if len(wrenches) != dof:
        raise DimensionError('wrenches', dof, len(wrenches))

    rows = []
    for i, wrench in enumerate(wrenches):
        row = wrench.as_vector() if isinstance(wrench, Wrench) else np.asarray(wrench, dtype=float)
        if row.ndim != 1:
            raise DimensionError(f'wrenches[{i}]', 6, row.shape)
        if row.shape[0] != 6:
            raise DimensionError(f'wrenches[{i}]', 6, row.shape[0])
        rows.append(row)
    return np.array(rows, dtype=float).reshape(dof, 6)
