"""
Projection onto the null space of a constraint block B, i.e. the directions that keep the
constraints unchanged.

    P v = v - B^T (B B^T)^-1 B v
"""

import numpy as np
import scipy.sparse as sparse
import scipy.sparse.linalg as splinalg

from gmultigrid.errors import SingularSaddleSystemError
from gmultigrid.numeric.constraints import SaddleConstraints


class NullSpaceProjector:

    B: sparse.csr_matrix
    B_t: sparse.csr_matrix

    def __init__(self, B: sparse.spmatrix):
        self.B = sparse.csr_matrix(B)
        self.B_t = sparse.csr_matrix(self.B.T)

        if self.num_constraint_rows() == 0:
            self._solve_gram = None
            return

        gram = sparse.csc_matrix(self.B @ self.B_t)
        try:
            self._solve_gram = splinalg.splu(gram).solve
        except RuntimeError as err:
            # SuperLU reports an exactly singular factor as RuntimeError
            raise SingularSaddleSystemError(f"Constraint rows are linearly dependent: {err}") from err

    @classmethod
    def from_constraints(cls, constraints: SaddleConstraints) -> "NullSpaceProjector":
        return cls(constraints.fill_constraint_matrix())

    def num_constraint_rows(self) -> int:
        return self.B.shape[0]

    def num_cols(self) -> int:
        return self.B.shape[1]

    def apply_b(self, v: np.ndarray) -> np.ndarray:
        assert np.shape(v) == (self.num_cols(),)
        return self.B @ v

    def apply_bt(self, phi: np.ndarray) -> np.ndarray:
        assert np.shape(phi) == (self.num_constraint_rows(),)
        return self.B_t @ phi

    def project_to_nullspace(self, v: np.ndarray) -> np.ndarray:
        """Remove the components of v along the constraint rows."""
        assert np.shape(v) == (self.num_cols(),), f"Expect a vector of size {self.num_cols()}, got {np.shape(v)}"
        if self._solve_gram is None:
            return np.array(v, dtype=float)
        return v - self.B_t @ self._solve_gram(self.B @ v)

    def project_to_rowspace(self, v: np.ndarray) -> np.ndarray:
        """Keep only the components of v along the constraint rows."""
        return v - self.project_to_nullspace(v)
