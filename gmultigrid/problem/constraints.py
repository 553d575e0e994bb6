"""
Concrete constraint families. All of them are linear in the unknowns,

    g(x) = B x == targets

and hold the current values x on which the constraint function is evaluated.
"""

import abc
import typing

import numpy as np
import scipy.sparse as sparse

from gmultigrid.numeric.constraints import DomainConstraints
from gmultigrid.numeric.sparse import Triplet


class LinearConstraints(DomainConstraints):
    """Constraints evaluated on the current values of the unknowns they span."""

    values: np.ndarray

    @abc.abstractmethod
    def set_values(self, values: np.ndarray): ...


class SumConstraint(LinearConstraints):
    """A weighted sum of (some of) the unknowns equals a fixed target."""

    def __init__(
            self, nb_cols: int, target: float,
            indices: typing.Sequence[int] | None = None,
            weights: typing.Sequence[float] | None = None,
            values: np.ndarray | None = None):
        self.nb_cols = nb_cols
        self.target = float(target)
        self.indices = np.arange(nb_cols) if indices is None else np.asarray(indices, dtype=int)
        self.weights = np.ones(self.indices.size) if weights is None else np.asarray(weights, dtype=float)
        assert self.weights.shape == self.indices.shape
        self.values = np.zeros(nb_cols)
        if values is not None:
            self.set_values(values)

    def set_values(self, values: np.ndarray):
        assert np.shape(values) == (self.nb_cols,)
        self.values = np.asarray(values, dtype=float)

    def num_constraint_rows(self) -> int:
        return 1

    def num_expected_cols(self) -> int:
        return self.nb_cols

    def add_triplets(self, triplets: list[Triplet]):
        triplets.extend((0, int(i), float(w)) for [i, w] in zip(self.indices, self.weights))

    def set_target_values(self, targets: np.ndarray):
        targets[0] = self.target

    def negative_constraint_values(self, b: np.ndarray, targets: np.ndarray):
        b[0] = targets[0] - np.dot(self.weights, self.values[self.indices])


class BarycenterConstraint(LinearConstraints):
    """The mass-weighted mean of the values stays where it was at construction."""

    def __init__(self, masses: np.ndarray, values: np.ndarray):
        self.masses = np.asarray(masses, dtype=float)
        assert self.masses.ndim == 1 and np.all(self.masses > 0)
        self.total_mass = self.masses.sum()
        self.set_values(values)
        self.barycenter = self.current_barycenter()

    def set_values(self, values: np.ndarray):
        assert np.shape(values) == self.masses.shape
        self.values = np.asarray(values, dtype=float)

    def current_barycenter(self) -> float:
        return np.dot(self.masses, self.values) / self.total_mass

    def num_constraint_rows(self) -> int:
        return 1

    def num_expected_cols(self) -> int:
        return self.masses.size

    def add_triplets(self, triplets: list[Triplet]):
        weights = self.masses / self.total_mass
        triplets.extend((0, i, float(w)) for [i, w] in enumerate(weights))

    def set_target_values(self, targets: np.ndarray):
        targets[0] = self.barycenter

    def negative_constraint_values(self, b: np.ndarray, targets: np.ndarray):
        b[0] = targets[0] - self.current_barycenter()


class PinConstraint(LinearConstraints):
    """Some unknowns keep the values they had at construction."""

    def __init__(self, values: np.ndarray, indices: typing.Sequence[int]):
        self.indices = np.asarray(indices, dtype=int)
        assert self.indices.ndim == 1
        self.nb_cols = np.size(values)
        assert np.all((self.indices >= 0) & (self.indices < self.nb_cols))
        self.set_values(values)
        self.pinned_values = self.values[self.indices].copy()

    def set_values(self, values: np.ndarray):
        assert np.shape(values) == (self.nb_cols,)
        self.values = np.asarray(values, dtype=float)

    def num_constraint_rows(self) -> int:
        return self.indices.size

    def num_expected_cols(self) -> int:
        return self.nb_cols

    def add_triplets(self, triplets: list[Triplet]):
        triplets.extend((row, int(i), 1.0) for [row, i] in enumerate(self.indices))

    def set_target_values(self, targets: np.ndarray):
        targets[:] = self.pinned_values

    def negative_constraint_values(self, b: np.ndarray, targets: np.ndarray):
        b[:] = targets - self.values[self.indices]


class ConstraintStack(LinearConstraints):
    """Several constraint sets over the same unknowns, their rows stacked in order."""

    def __init__(self, parts: typing.Sequence[LinearConstraints]):
        assert len(parts) >= 1
        self.parts = list(parts)
        nb_cols = self.parts[0].num_expected_cols()
        assert all(part.num_expected_cols() == nb_cols for part in self.parts), \
            "All stacked constraints must span the same columns"
        self.row_offsets = np.cumsum([0] + [part.num_constraint_rows() for part in self.parts])

    @property
    def values(self) -> np.ndarray:
        return self.parts[0].values

    def set_values(self, values: np.ndarray):
        for part in self.parts:
            part.set_values(values)

    def num_constraint_rows(self) -> int:
        return int(self.row_offsets[-1])

    def num_expected_cols(self) -> int:
        return self.parts[0].num_expected_cols()

    def add_triplets(self, triplets: list[Triplet]):
        for [part, offset] in zip(self.parts, self.row_offsets):
            part_triplets: list[Triplet] = []
            part.add_triplets(part_triplets)
            triplets.extend((int(offset) + row, col, val) for [row, col, val] in part_triplets)

    def _slices(self):
        for [part, start, stop] in zip(self.parts, self.row_offsets[:-1], self.row_offsets[1:]):
            yield part, slice(start, stop)

    def set_target_values(self, targets: np.ndarray):
        # slices are views, parts write in place
        for [part, rows] in self._slices():
            part.set_target_values(targets[rows])

    def negative_constraint_values(self, b: np.ndarray, targets: np.ndarray):
        for [part, rows] in self._slices():
            part.negative_constraint_values(b[rows], targets[rows])


class TransferredConstraints(LinearConstraints):
    """Constraints of a fine level seen by the unknowns of a coarser level.

    With the prolongation P, the coarse constraint block is B P and the targets are those of
    the fine level.
    """

    def __init__(self, fine: DomainConstraints, prolongation: sparse.spmatrix, values: np.ndarray | None = None):
        assert prolongation.shape[0] == fine.num_expected_cols()
        self.fine = fine
        self.prolongation = sparse.csr_matrix(prolongation)
        self.block = sparse.csr_matrix(fine.fill_constraint_matrix() @ self.prolongation)
        self.values = np.zeros(self.prolongation.shape[1])
        if values is not None:
            self.set_values(values)

    def set_values(self, values: np.ndarray):
        assert np.shape(values) == (self.num_expected_cols(),)
        self.values = np.asarray(values, dtype=float)

    def num_constraint_rows(self) -> int:
        return self.fine.num_constraint_rows()

    def num_expected_cols(self) -> int:
        return self.prolongation.shape[1]

    def add_triplets(self, triplets: list[Triplet]):
        block = self.block.tocoo()
        triplets.extend((int(r), int(c), float(v)) for [r, c, v] in zip(block.row, block.col, block.data))

    def set_target_values(self, targets: np.ndarray):
        self.fine.set_target_values(targets)

    def negative_constraint_values(self, b: np.ndarray, targets: np.ndarray):
        b[:] = targets - self.block @ self.values
