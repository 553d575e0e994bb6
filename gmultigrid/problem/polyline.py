"""
A scalar field on the vertices of an open polyline, as one level of a multigrid hierarchy.
"""

import logging

import numpy as np
import scipy.sparse as sparse

from gmultigrid.errors import CoarseningError, SingularSaddleSystemError
from gmultigrid.multigrid.domain import MultigridDomain
from gmultigrid.numeric.direct import solve_dense_saddle
from gmultigrid.numeric.multiplier import MatrixMultiplier
from gmultigrid.numeric.operator import MultigridOperator
from gmultigrid.numeric.projector import NullSpaceProjector
from gmultigrid.problem.constraints import LinearConstraints, TransferredConstraints
from gmultigrid.problem.geometry import arclength, laplacian_kernel


logger = logging.getLogger(__name__)


class PolylineDomain(MultigridDomain[MatrixMultiplier, MultigridOperator]):
    """Saddle problem on a polyline.

    [ K   B^T ]
    [ B   0   ]

    K is the regularized graph Laplacian of the polyline unless another kernel is given; B comes
    from the constraints, which must span one column per vertex.
    """

    positions: np.ndarray
    constraints: LinearConstraints
    kernel: sparse.csr_matrix

    def __init__(
            self, positions: np.ndarray, constraints: LinearConstraints,
            kernel: sparse.spmatrix | None = None, regularization: float = 1e-2):
        positions = np.asarray(positions, dtype=float)
        if positions.ndim == 1:
            positions = positions[:, np.newaxis]
        self.positions = positions

        nb_vertices = len(positions)
        assert constraints.num_expected_cols() == nb_vertices, \
            f"Constraints span {constraints.num_expected_cols()} columns, the polyline has {nb_vertices} vertices"
        self.constraints = constraints

        if kernel is None:
            kernel = laplacian_kernel(positions, regularization)
        assert kernel.shape == (nb_vertices, nb_vertices)
        self.kernel = sparse.csr_matrix(kernel)

        self._multiplier = MatrixMultiplier(self.kernel)
        self._projector = None

    def set_values(self, values: np.ndarray):
        """Update the current values the constraints are evaluated on."""
        self.constraints.set_values(values)

    def num_vertices(self) -> int:
        return len(self.positions)

    def num_rows(self) -> int:
        return self.num_vertices() + self.constraints.num_constraint_rows()

    def get_multiplier(self) -> MatrixMultiplier:
        return self._multiplier

    def make_new_operator(self) -> MultigridOperator:
        return MultigridOperator()

    def get_constraint_projector(self) -> NullSpaceProjector:
        # built on first use, then kept as long as the domain lives
        if self._projector is None:
            self._projector = NullSpaceProjector.from_constraints(self.constraints)
        return self._projector

    def get_full_matrix(self) -> np.ndarray:
        nb_vertices = self.num_vertices()
        nb_rows = self.num_rows()
        assert nb_rows == self.constraints.saddle_num_rows()

        A = np.zeros((nb_rows, nb_rows))
        A[:nb_vertices, :nb_vertices] = self.get_multiplier().to_dense()
        self.constraints.fill_dense_block(A)
        return A

    def direct_solve(self, b: np.ndarray) -> np.ndarray:
        assert np.shape(b) == (self.num_rows(),), f"Expect a right-hand side of size {self.num_rows()}, got {np.shape(b)}"
        return solve_dense_saddle(self.get_full_matrix(), b)

    def coarsen(self, prolong_op: MultigridOperator) -> "PolylineDomain":
        nb_vertices = self.num_vertices()
        if nb_vertices < 3:
            raise CoarseningError(f"A polyline of {nb_vertices} vertices cannot be coarsened")

        kept = coarse_vertex_indices(nb_vertices)
        nb_constrs = self.constraints.num_constraint_rows()
        if nb_constrs >= kept.size:
            raise CoarseningError(f"{kept.size} coarse vertices cannot carry {nb_constrs} constraint rows")
        P = polyline_prolongation(self.positions, kept)

        coarse_kernel = P.T @ self.kernel @ P
        coarse_constraints = TransferredConstraints(self.constraints, P, values=self.constraints.values[kept])
        coarse = PolylineDomain(self.positions[kept], coarse_constraints, kernel=coarse_kernel)

        upper_projector = self.get_constraint_projector()
        try:
            lower_projector = coarse.get_constraint_projector()
        except SingularSaddleSystemError as err:
            raise CoarseningError(f"Constraint rows become dependent on {kept.size} vertices") from err

        prolong_op.set_matrix(
            P, nb_constraint_rows=nb_constrs,
            upper_projector=upper_projector,
            lower_projector=lower_projector)

        logger.debug(f"Coarsen polyline from {nb_vertices} to {kept.size} vertices")
        return coarse


def coarse_vertex_indices(nb_vertices: int) -> np.ndarray:
    """Every other vertex, both end points included."""
    kept = np.arange(0, nb_vertices, 2)
    if kept[-1] != nb_vertices - 1:
        kept = np.append(kept, nb_vertices - 1)
    return kept


def polyline_prolongation(positions: np.ndarray, kept: np.ndarray) -> sparse.csr_matrix:
    """Linear interpolation along the arclength from the kept vertices to all vertices.

    The matrix has shape (nb_vertices, nb_kept).
    """
    nb_vertices = len(positions)
    s = arclength(positions)
    fine = np.arange(nb_vertices)

    # the coarse vertex at or before each fine vertex
    left = np.searchsorted(kept, fine, side="right") - 1
    on_coarse = kept[left] == fine

    rows = [fine[on_coarse]]
    cols = [left[on_coarse]]
    vals = [np.ones(np.count_nonzero(on_coarse))]

    between = fine[~on_coarse]
    a = left[~on_coarse]
    b = a + 1
    span = s[kept[b]] - s[kept[a]]
    assert np.all(span > 0), "Polyline has coincident vertices"
    t = (s[between] - s[kept[a]]) / span
    rows += [between, between]
    cols += [a, b]
    vals += [1 - t, t]

    return sparse.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(nb_vertices, kept.size)).tocsr()
