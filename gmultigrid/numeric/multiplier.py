import numpy as np
import scipy.sparse as sparse


class MatrixMultiplier:
    """The kernel operator A of one multigrid level, applied to vectors of primary unknowns."""

    matrix: sparse.csr_matrix

    def __init__(self, matrix: sparse.spmatrix):
        assert matrix.shape[0] == matrix.shape[1], f"Kernel must be square, got {matrix.shape}"
        self.matrix = sparse.csr_matrix(matrix)

    @property
    def nb_rows(self) -> int:
        return self.matrix.shape[0]

    def multiply(self, v: np.ndarray) -> np.ndarray:
        assert np.shape(v) == (self.nb_rows,)
        return self.matrix @ v

    def diagonal(self) -> np.ndarray:
        return self.matrix.diagonal()

    def to_dense(self) -> np.ndarray:
        return self.matrix.toarray()
