"""
Transfer between two adjacent multigrid levels.

The prolongation P maps coarse unknowns to fine unknowns; its transpose restricts. Both levels
carry the same constraint rows, so saddle vectors can pass their multiplier part through as is.
"""

import enum

import numpy as np
import scipy.sparse as sparse

from gmultigrid.numeric.projector import NullSpaceProjector


class ProlongationMode(enum.Enum):
    MATRIX_ONLY = "matrix_only"
    MATRIX_AND_PROJECTOR = "matrix_and_projector"
    MATRIX_AND_CONSTRAINTS = "matrix_and_constraints"


class MultigridOperator:
    """Prolongation and restriction between a fine (upper) and a coarse (lower) level."""

    upper_size: int
    lower_size: int
    nb_constraint_rows: int
    matrix: sparse.csr_matrix | None
    upper_projector: NullSpaceProjector | None
    lower_projector: NullSpaceProjector | None

    def __init__(self):
        self.upper_size = 0
        self.lower_size = 0
        self.nb_constraint_rows = 0
        self.matrix = None
        self._matrix_t = None
        self.upper_projector = None
        self.lower_projector = None

    def set_matrix(
            self, prolongation: sparse.spmatrix, nb_constraint_rows: int = 0,
            upper_projector: NullSpaceProjector | None = None,
            lower_projector: NullSpaceProjector | None = None):
        [self.upper_size, self.lower_size] = prolongation.shape
        self.matrix = sparse.csr_matrix(prolongation)
        self._matrix_t = sparse.csr_matrix(self.matrix.T)
        self.nb_constraint_rows = nb_constraint_rows
        self.upper_projector = upper_projector
        self.lower_projector = lower_projector

    @property
    def is_ready(self) -> bool:
        return self.matrix is not None

    def prolong(self, v: np.ndarray, mode: ProlongationMode = ProlongationMode.MATRIX_ONLY) -> np.ndarray:
        """Map a coarse vector to the fine level."""
        return self._transfer(v, mode, self.matrix, self.lower_size, self.lower_projector, self.upper_projector)

    def restrict(self, v: np.ndarray, mode: ProlongationMode = ProlongationMode.MATRIX_ONLY) -> np.ndarray:
        """Map a fine vector to the coarse level."""
        return self._transfer(v, mode, self._matrix_t, self.upper_size, self.upper_projector, self.lower_projector)

    def _transfer(self, v, mode, matrix, source_size, source_projector, target_projector):
        assert self.is_ready, "The operator has not been filled by a coarsening step"

        if mode is ProlongationMode.MATRIX_AND_CONSTRAINTS:
            expected = source_size + self.nb_constraint_rows
            assert np.shape(v) == (expected,), f"Expect a saddle vector of size {expected}, got {np.shape(v)}"
            return np.concatenate([matrix @ v[:source_size], v[source_size:]])

        assert np.shape(v) == (source_size,), f"Expect a vector of size {source_size}, got {np.shape(v)}"

        if mode is ProlongationMode.MATRIX_ONLY:
            return matrix @ v

        if mode is ProlongationMode.MATRIX_AND_PROJECTOR:
            assert source_projector is not None and target_projector is not None, \
                "Projectors of both levels are needed"
            return target_projector.project_to_nullspace(matrix @ source_projector.project_to_nullspace(v))

        raise ValueError(f"Unknown prolongation mode: {mode}")
